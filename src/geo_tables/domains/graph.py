"""Graphs with spatial vertices, and parcels with explicit adjacency."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from geo_tables.schema import Schema
from geo_tables.store import Store

SCHEMA_TEXT = """
object V, E
attrtype Geom, Weight

morphism src: E -> V [indexed]
morphism tgt: E -> V [indexed]

attribute location: V -> Geom
attribute edge_geom: E -> Geom
attribute weight: E -> Weight
"""

SCHEMA = Schema.parse(SCHEMA_TEXT)

ADJACENCY_SCHEMA_TEXT = """
object Parcel, Adjacency
attrtype Geom, Length

morphism left: Adjacency -> Parcel [indexed]
morphism right: Adjacency -> Parcel [indexed]

attribute boundary: Parcel -> Geom
attribute shared_length: Adjacency -> Length
"""

ADJACENCY_SCHEMA = Schema.parse(ADJACENCY_SCHEMA_TEXT)


def _unique(values: Iterable[int]) -> list[int]:
    """Drop repeats, keeping first occurrences in order."""
    return list(dict.fromkeys(values))


def spatial_graph(geom: Any = None, weight: Any = float) -> Store:
    """Create an empty spatial graph store."""
    bindings = {"Geom": geom, "Weight": weight}
    return Store(SCHEMA, {k: v for k, v in bindings.items() if v is not None})


def parcel_adjacency(geom: Any = None, length: Any = float) -> Store:
    """Create an empty parcel adjacency store."""
    bindings = {"Geom": geom, "Length": length}
    return Store(ADJACENCY_SCHEMA, {k: v for k, v in bindings.items() if v is not None})


def neighbors(graph: Store, vertex: int) -> list[int]:
    """Vertices joined to ``vertex`` by an edge in either direction."""
    targets = [graph.subpart(e, "tgt") for e in graph.incident(vertex, "src")]
    sources = [graph.subpart(e, "src") for e in graph.incident(vertex, "tgt")]
    return _unique(targets + sources)


def edges_between(graph: Store, v1: int, v2: int) -> list[int]:
    """Edges connecting two vertices, ``v1 -> v2`` edges first."""
    forward = [e for e in graph.incident(v1, "src") if graph.subpart(e, "tgt") == v2]
    backward = [e for e in graph.incident(v2, "src") if graph.subpart(e, "tgt") == v1]
    return forward + backward


def adjacent_parcels(parcels: Store, parcel: int) -> list[int]:
    """Parcels sharing an adjacency record with ``parcel``."""
    rights = [parcels.subpart(a, "right") for a in parcels.incident(parcel, "left")]
    lefts = [parcels.subpart(a, "left") for a in parcels.incident(parcel, "right")]
    return _unique(rights + lefts)
