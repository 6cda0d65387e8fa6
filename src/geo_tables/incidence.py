"""Reverse index for indexed morphisms."""

from __future__ import annotations

from bisect import bisect_left, insort
from collections.abc import Iterable


class IncidenceIndex:
    """Maps each target part to the ascending list of parts pointing at it.

    One index exists per indexed morphism. It must always equal the inverse
    image of the morphism column; the store keeps it in step on every write.
    """

    def __init__(self, morphism: str) -> None:
        self.morphism = morphism
        self._sources: dict[int, list[int]] = {}

    @classmethod
    def from_column(cls, morphism: str, column: Iterable[int | None]) -> IncidenceIndex:
        """Build an index from a morphism column ordered by source id."""
        index = cls(morphism)
        for source, target in enumerate(column, start=1):
            if target is not None:
                # Ascending source order, so appending keeps each list sorted
                index._sources.setdefault(target, []).append(source)
        return index

    def add(self, target: int, source: int) -> None:
        sources = self._sources.setdefault(target, [])
        if not sources or sources[-1] < source:
            sources.append(source)
        else:
            insort(sources, source)

    def remove(self, target: int, source: int) -> None:
        sources = self._sources.get(target)
        if sources is None:
            raise KeyError(f"{self.morphism}: no sources recorded for target {target}")
        pos = bisect_left(sources, source)
        if pos == len(sources) or sources[pos] != source:
            raise KeyError(f"{self.morphism}: {source} is not incident to {target}")
        del sources[pos]
        if not sources:
            del self._sources[target]

    def move(self, source: int, old_target: int | None, new_target: int | None) -> None:
        """Re-point ``source`` from ``old_target`` to ``new_target``."""
        if old_target == new_target:
            return
        if old_target is not None:
            self.remove(old_target, source)
        if new_target is not None:
            self.add(new_target, source)

    def get(self, target: int) -> list[int]:
        """Return the sources pointing at ``target`` (a copy)."""
        return list(self._sources.get(target, ()))

    def copy(self) -> IncidenceIndex:
        clone = IncidenceIndex(self.morphism)
        clone._sources = {target: list(sources) for target, sources in self._sources.items()}
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IncidenceIndex):
            return NotImplemented
        return self.morphism == other.morphism and self._sources == other._sources

    def __repr__(self) -> str:
        return f"IncidenceIndex({self.morphism!r}, targets={len(self._sources)})"
