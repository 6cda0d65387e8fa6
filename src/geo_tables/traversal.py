"""Generic morphism-chain traversal.

Both directions cost O(1) per hop: upward traversal reads one morphism value
per step, downward traversal expands through ``Store.incident``, which is an
index lookup for indexed morphisms.
"""

from __future__ import annotations

from geo_tables.errors import BrokenChainError, SchemaError
from geo_tables.store import Store
from geo_tables.types import MorphismDefinition


def _resolve_chain(
    store: Store, morphisms: tuple[str, ...], upward: bool
) -> list[MorphismDefinition]:
    """Look up a morphism chain and check that consecutive steps compose."""
    chain = [store.schema.get_morphism(name) for name in morphisms]
    for prev, step in zip(chain, chain[1:]):
        if upward and prev.codom != step.dom:
            raise SchemaError(
                f"'{prev.name}' ends at {prev.codom} but '{step.name}' starts at {step.dom}"
            )
        if not upward and prev.dom != step.codom:
            raise SchemaError(
                f"'{prev.name}' comes from {prev.dom} but '{step.name}' leads to {step.codom}"
            )
    return chain


def traverse_up(store: Store, part: int, *morphisms: str) -> int:
    """Follow a chain of morphisms upward (part -> ... -> ancestor).

    Example::

        # Building -> Parcel -> District -> Region
        region = traverse_up(city, building, "building_on", "parcel_of", "district_of")

    Raises:
        BrokenChainError: If an optional morphism along the way is unset.
        SchemaError: If consecutive morphisms do not compose.
    """
    current = part
    for m in _resolve_chain(store, morphisms, upward=True):
        value = store.subpart(current, m.name)
        if value is None:
            raise BrokenChainError(
                f"{m.dom} part {current} has no '{m.name}' value"
            )
        current = value
    return current


def traverse_down(store: Store, part: int, *morphisms: str) -> list[int]:
    """Follow a chain of morphisms downward (ancestor -> ... -> descendants).

    Each step replaces the current parts with the concatenation of their
    incident parts, in order. Parts reachable through more than one parent
    appear once per path; nothing is deduplicated.

    Example::

        # Region -> Districts -> Parcels -> Buildings
        buildings = traverse_down(city, region, "district_of", "parcel_of", "building_on")
    """
    current = [part]
    for m in _resolve_chain(store, morphisms, upward=False):
        current = [source for target in current for source in store.incident(target, m.name)]
    return current
