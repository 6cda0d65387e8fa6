"""Attribute filtering and brute-force joins with caller-supplied predicates.

This layer knows nothing about geometry: values are passed to the predicate
exactly as stored. It is a fallback for relationships that are not encoded
as morphisms. When the relationship is structural (a building on a parcel),
use ``Store.incident`` or the traversal functions instead, which cost O(k)
rather than a scan.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from geo_tables.errors import SchemaError
from geo_tables.store import Store

logger = logging.getLogger(__name__)


def _attribute_values(store: Store, kind: str, attribute: str) -> list[tuple[int, Any]]:
    """Return ``(part, value)`` for every part of ``kind`` with a value set."""
    attr = store.schema.get_attribute(attribute)
    if attr.dom != kind:
        raise SchemaError(f"Attribute '{attribute}' belongs to {attr.dom}, not {kind}")
    values = []
    for part in store.parts(kind):
        value = store.subpart(part, attribute)
        if value is not None:
            values.append((part, value))
    return values


def spatial_filter(
    store: Store, kind: str, attribute: str, predicate: Callable[[Any], bool]
) -> list[int]:
    """Return the parts of ``kind`` whose ``attribute`` satisfies ``predicate``.

    Parts are visited in ascending id order and parts without a value are
    skipped. Cost is O(n) in the number of parts of ``kind``.

    Example::

        nearby = spatial_filter(city, "Building", "footprint",
                                lambda geom: distance(geom, point) < 100.0)
    """
    return [part for part, value in _attribute_values(store, kind, attribute)
            if predicate(value)]


def spatial_filter_relation(
    store: Store,
    kind: str,
    attribute: str,
    relation: Callable[[Any, Any], bool],
    query_value: Any,
) -> list[int]:
    """Filter by a binary relation against a fixed query value."""
    return spatial_filter(store, kind, attribute, lambda value: relation(value, query_value))


def spatial_join(
    store: Store,
    kind_a: str,
    attr_a: str,
    kind_b: str,
    attr_b: str,
    relation: Callable[[Any, Any], bool],
) -> list[tuple[int, int]]:
    """Return every pair ``(a, b)`` for which ``relation(value_a, value_b)`` holds.

    Pairs come out in nested order, ``a`` ascending then ``b`` ascending.
    Parts without a value on either side are skipped.

    Note: this tests every pair and costs O(n*m). For containment, prefer the
    morphisms: ``incident`` and ``traverse_down`` give the same answer in
    O(k) when the relationship is already in the schema.
    """
    left = _attribute_values(store, kind_a, attr_a)
    right = _attribute_values(store, kind_b, attr_b)
    logger.debug("Joining %d %s x %d %s parts", len(left), kind_a, len(right), kind_b)

    results: list[tuple[int, int]] = []
    for a, value_a in left:
        for b, value_b in right:
            if relation(value_a, value_b):
                results.append((a, b))
    return results
