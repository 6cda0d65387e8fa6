"""Column storage for the parts of a single object kind."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from geo_tables.errors import OutOfRangeError


class PartTable:
    """Holds every field value of one object kind, one column per field.

    Part ids are dense and 1-based: the live ids are always ``1..count``.
    Column position ``i`` stores the value for part ``i + 1``.
    """

    def __init__(self, kind: str, fields: Iterable[str]) -> None:
        self.kind = kind
        self._columns: dict[str, list[Any]] = {name: [] for name in fields}
        self._count = 0

    @property
    def count(self) -> int:
        """Return the number of live parts."""
        return self._count

    @property
    def fields(self) -> list[str]:
        return list(self._columns)

    def ids(self) -> range:
        """Return the live part ids in ascending order."""
        return range(1, self._count + 1)

    def __contains__(self, part: object) -> bool:
        return (
            isinstance(part, int)
            and not isinstance(part, bool)
            and 1 <= part <= self._count
        )

    def _check(self, part: int) -> None:
        if part not in self:
            raise OutOfRangeError(
                f"{self.kind} part {part!r} out of range [1, {self._count}]"
            )

    def insert(self, values: Mapping[str, Any]) -> int:
        """Append a part and return its id. Missing fields are stored as None."""
        for name, column in self._columns.items():
            column.append(values.get(name))
        self._count += 1
        return self._count

    def get(self, part: int, field: str) -> Any:
        """Get a field value by part id."""
        self._check(part)
        return self._columns[field][part - 1]

    def update(self, part: int, field: str, value: Any) -> None:
        """Update a field value at the given part id."""
        self._check(part)
        self._columns[field][part - 1] = value

    def column(self, field: str) -> list[Any]:
        """Return a copy of a whole column, ordered by part id."""
        return list(self._columns[field])

    def copy(self) -> PartTable:
        clone = PartTable(self.kind, ())
        clone._columns = {name: list(col) for name, col in self._columns.items()}
        clone._count = self._count
        return clone

    def compacted(self, removed: Iterable[int]) -> tuple[PartTable, dict[int, int]]:
        """Return a copy without the removed parts, plus the id mapping.

        Surviving parts keep their relative order, so every id above a removed
        id shifts down by the number of removed ids below it. The mapping
        covers surviving ids only.
        """
        removed = set(removed)
        for part in removed:
            self._check(part)

        old_to_new: dict[int, int] = {}
        new_id = 0
        for old_id in self.ids():
            if old_id not in removed:
                new_id += 1
                old_to_new[old_id] = new_id

        clone = PartTable(self.kind, ())
        clone._columns = {
            name: [value for i, value in enumerate(col, start=1) if i not in removed]
            for name, col in self._columns.items()
        }
        clone._count = new_id
        return clone, old_to_new

    def remap(self, field: str, old_to_new: Mapping[int, int]) -> None:
        """Rewrite references stored in ``field`` through an id mapping.

        None values are left as they are. Every other value must be present
        in the mapping.
        """
        column = self._columns[field]
        for i, value in enumerate(column):
            if value is not None:
                column[i] = old_to_new[value]

    def __repr__(self) -> str:
        return f"PartTable({self.kind!r}, count={self._count})"
