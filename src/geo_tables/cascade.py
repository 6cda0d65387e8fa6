"""Cascading delete: dependent closure planning and id compaction."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from geo_tables.errors import DependentPartsError, OutOfRangeError
from geo_tables.incidence import IncidenceIndex
from geo_tables.table import PartTable

if TYPE_CHECKING:
    from geo_tables.schema import Schema
    from geo_tables.store import Store

logger = logging.getLogger(__name__)


@dataclass
class DeletePlan:
    """The full effect of deleting one part, computed before any mutation.

    ``removed`` maps each affected kind to the ascending ids that go away.
    ``order`` lists those kinds deepest dependent first. ``cleared`` holds
    ``(morphism, part)`` pairs for optional unindexed references into the
    closure that get unset.
    """

    kind: str
    part: int
    removed: dict[str, list[int]]
    order: list[str]
    cleared: list[tuple[str, int]] = field(default_factory=list)

    @property
    def size(self) -> int:
        """Total number of parts removed."""
        return sum(len(ids) for ids in self.removed.values())


def plan_delete(store: Store, kind: str, part: int, cascade: bool = True) -> DeletePlan:
    """Compute the dependent closure of ``part`` without touching the store.

    The closure is ``part`` plus every part reaching it through indexed
    morphisms followed backwards, transitively. Unindexed morphisms are not
    followed: an optional one pointing into the closure from outside is
    scheduled to be cleared, a required one makes the delete fail.

    Args:
        store: The store to plan against.
        kind: Object kind of the part to delete.
        part: Id of the part to delete.
        cascade: If False, any indexed dependent is an error.

    Raises:
        OutOfRangeError: If ``part`` is not live in ``kind``.
        DependentPartsError: If the delete would leave a dangling reference.
    """
    schema = store.schema
    if not store.has_part(kind, part):
        raise OutOfRangeError(f"{kind} part {part!r} is not live")

    closure: dict[str, set[int]] = {kind: {part}}
    depth: dict[str, int] = {kind: 0}
    queue: deque[tuple[str, int, int]] = deque([(kind, part, 0)])

    while queue:
        target_kind, target, level = queue.popleft()
        for m in schema.morphisms_into(target_kind):
            if not m.indexed:
                continue
            dependents = store.incident(target, m.name)
            if not dependents:
                continue
            if not cascade:
                raise DependentPartsError(
                    f"{target_kind} part {target} has {len(dependents)} dependent "
                    f"{m.dom} part(s) via '{m.name}'; use cascading_delete"
                )
            seen = closure.setdefault(m.dom, set())
            depth[m.dom] = max(depth.get(m.dom, 0), level + 1)
            for dependent in dependents:
                if dependent not in seen:
                    seen.add(dependent)
                    queue.append((m.dom, dependent, level + 1))

    cleared: list[tuple[str, int]] = []
    for target_kind, doomed_targets in closure.items():
        for m in schema.morphisms_into(target_kind):
            if m.indexed:
                continue
            doomed_sources = closure.get(m.dom, set())
            for source in store.parts(m.dom):
                if source in doomed_sources:
                    continue
                if store.subpart(source, m.name) in doomed_targets:
                    if not m.optional:
                        raise DependentPartsError(
                            f"{m.dom} part {source} refers to a deleted {target_kind} "
                            f"part via unindexed required morphism '{m.name}'"
                        )
                    cleared.append((m.name, source))

    position = {name: i for i, name in enumerate(schema.objects)}
    order = sorted(closure, key=lambda k: (-depth[k], position[k]))
    plan = DeletePlan(
        kind=kind,
        part=part,
        removed={k: sorted(closure[k]) for k in order},
        order=order,
        cleared=cleared,
    )
    logger.debug("Planned delete of %s part %d: %d parts, order %s",
                 kind, part, plan.size, order)
    return plan


def compact(
    schema: Schema,
    tables: Mapping[str, PartTable],
    indexes: Mapping[str, IncidenceIndex],
    plan: DeletePlan,
) -> tuple[dict[str, PartTable], dict[str, IncidenceIndex]]:
    """Apply a delete plan to copies of the store state.

    Phase 1 clears scheduled references and compacts every kind in the plan,
    building an old -> new id mapping per kind. Phase 2 rewrites every
    morphism column that points into a compacted kind and rebuilds the
    affected incidence indexes. Tables and indexes that the plan does not
    touch are shared with the input; the input itself is never mutated.
    """
    new_tables = dict(tables)
    copied: set[str] = set()

    def writable(kind: str) -> PartTable:
        if kind not in copied:
            new_tables[kind] = new_tables[kind].copy()
            copied.add(kind)
        return new_tables[kind]

    # Phase 1: clear references, then compact in deletion order
    for morphism, source in plan.cleared:
        m = schema.get_morphism(morphism)
        writable(m.dom).update(source, m.name, None)

    remaps: dict[str, dict[int, int]] = {}
    for kind in plan.order:
        new_tables[kind], remaps[kind] = new_tables[kind].compacted(plan.removed[kind])
        copied.add(kind)

    # Phase 2: rewrite references into compacted kinds
    for m in schema.morphisms:
        if m.codom in remaps:
            writable(m.dom).remap(m.name, remaps[m.codom])

    new_indexes = dict(indexes)
    for name in indexes:
        m = schema.get_morphism(name)
        if m.dom in remaps or m.codom in remaps:
            new_indexes[name] = IncidenceIndex.from_column(name, new_tables[m.dom].column(name))

    return new_tables, new_indexes
