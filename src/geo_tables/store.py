"""Relational store holding the parts of every object kind of a schema."""

from __future__ import annotations

import logging
import numbers
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from geo_tables.cascade import DeletePlan, compact, plan_delete
from geo_tables.errors import (
    GeoTablesError,
    OutOfRangeError,
    ReferentialIntegrityError,
    SchemaError,
    TypeMismatchError,
    UnknownNameError,
)
from geo_tables.incidence import IncidenceIndex
from geo_tables.schema import Schema
from geo_tables.table import PartTable
from geo_tables.types import FieldDefinition, MorphismDefinition

logger = logging.getLogger(__name__)


class LookupCost(Enum):
    """Cost of an ``incident`` lookup for a given morphism."""

    INDEXED = "indexed"  # O(1) amortized, via the incidence index
    SCAN = "scan"  # O(n) over the parts of the morphism's domain


def _conforms(value: Any, expected: type | tuple[type, ...]) -> bool:
    """Check a value against a bound attribute type or tuple of types.

    A ``float`` member accepts any real number except ``bool``.
    """
    members = expected if isinstance(expected, tuple) else (expected,)
    for member in members:
        if member is float:
            if isinstance(value, numbers.Real) and not isinstance(value, bool):
                return True
        elif isinstance(value, member):
            return True
    return False


class Store:
    """A mutable instance of a schema.

    Holds, per object kind, the live part ids and one column per morphism and
    attribute, plus an incidence index per indexed morphism. Every public
    operation leaves the store internally consistent; the store has no
    internal locking and assumes a single writer.

    Example::

        store = Store(schema, attr_types={"Name": str, "Area": float})
        r = store.add_part("Region", region_name="Downtown")
        d = store.add_part("District", district_of=r)
        store.incident(r, "district_of")  # [d]
    """

    def __init__(
        self,
        schema: Schema,
        attr_types: Mapping[str, type | tuple[type, ...]] | None = None,
    ) -> None:
        """Initialize an empty store.

        Args:
            schema: The schema to instantiate.
            attr_types: Python types bound to the schema's attribute types.
                Attribute values are checked against them with isinstance;
                unbound attribute types accept any value.
        """
        self.schema = schema
        self.attr_types: dict[str, type | tuple[type, ...]] = dict(attr_types or {})
        for name in self.attr_types:
            if name not in schema.attr_types:
                raise UnknownNameError(f"Attribute type '{name}' not found")

        self._tables: dict[str, PartTable] = {
            kind: PartTable(kind, [f.name for f in schema.fields_of(kind)])
            for kind in schema.objects
        }
        self._indexes: dict[str, IncidenceIndex] = {
            m.name: IncidenceIndex(m.name) for m in schema.indexed_morphisms
        }

    def _table(self, kind: str) -> PartTable:
        table = self._tables.get(kind)
        if table is None:
            raise UnknownNameError(f"Object kind '{kind}' not found")
        return table

    # -- validation ---------------------------------------------------------

    def _check_value(self, field: FieldDefinition, value: Any) -> None:
        """Validate a value for a field before it is written."""
        if value is None:
            if field.optional:
                return
            if isinstance(field, MorphismDefinition):
                raise ReferentialIntegrityError(
                    f"Morphism '{field.name}' requires a {field.codom} part"
                )
            raise TypeMismatchError(f"Attribute '{field.name}' is required")

        if isinstance(field, MorphismDefinition):
            if value not in self._tables[field.codom]:
                raise ReferentialIntegrityError(
                    f"Morphism '{field.name}': {value!r} is not a live {field.codom} part"
                )
        else:
            expected = self.attr_types.get(field.attr_type)
            if expected is not None and not _conforms(value, expected):
                raise TypeMismatchError(
                    f"Attribute '{field.name}' expects {field.attr_type}, "
                    f"got {type(value).__name__}"
                )

    def _validate_row(self, kind: str, values: Mapping[str, Any]) -> dict[str, Any]:
        """Validate the values for a new part of ``kind`` and return a full row."""
        self._table(kind)
        owned = {f.name: f for f in self.schema.fields_of(kind)}
        for name in values:
            if name not in owned:
                field = self.schema.field(name)
                raise SchemaError(f"Field '{field.name}' belongs to {field.dom}, not {kind}")

        row: dict[str, Any] = {}
        for name, field in owned.items():
            value = values.get(name)
            self._check_value(field, value)
            row[name] = value
        return row

    # -- creation and mutation ---------------------------------------------

    def _insert(self, kind: str, row: Mapping[str, Any]) -> int:
        part = self._tables[kind].insert(row)
        for m in self.schema.morphisms_from(kind):
            target = row.get(m.name)
            if m.indexed and target is not None:
                self._indexes[m.name].add(target, part)
        return part

    def add_part(self, kind: str, /, **values: Any) -> int:
        """Create a part of ``kind`` and return its id.

        Every non-optional morphism of ``kind`` and every required attribute
        must be given a value.

        Raises:
            UnknownNameError: If ``kind`` or a field name is not in the schema.
            ReferentialIntegrityError: If a morphism value is missing or does
                not name a live part of the morphism's codomain.
            TypeMismatchError: If an attribute value does not match its bound
                type, or a required attribute is missing.
        """
        row = self._validate_row(kind, values)
        part = self._insert(kind, row)
        logger.debug("Added %s part %d", kind, part)
        return part

    def add_parts(self, kind: str, rows: Iterable[Mapping[str, Any]]) -> list[int]:
        """Create several parts of ``kind`` at once.

        All rows are validated against the store as it was before the call,
        then inserted in order. If any row is invalid nothing is added.
        """
        validated = [self._validate_row(kind, values) for values in rows]
        parts = [self._insert(kind, row) for row in validated]
        logger.debug("Added %d %s parts", len(parts), kind)
        return parts

    def set_subpart(self, part: int, field_name: str, value: Any) -> None:
        """Set one field of an existing part.

        Setting an indexed morphism moves ``part`` from the old target's
        incidence entry to the new one. ``None`` unsets the field, which is
        only allowed for optional morphisms and non-required attributes.
        """
        field = self.schema.field(field_name)
        table = self._tables[field.dom]
        old = table.get(part, field.name)
        self._check_value(field, value)
        table.update(part, field.name, value)
        if isinstance(field, MorphismDefinition) and field.indexed:
            self._indexes[field.name].move(part, old, value)

    def clear_subpart(self, part: int, field_name: str) -> None:
        """Unset an optional morphism or attribute."""
        self.set_subpart(part, field_name, None)

    # -- reads --------------------------------------------------------------

    def subpart(self, part: int, field_name: str) -> Any:
        """Read one field of a part.

        Raises:
            OutOfRangeError: If ``part`` is not live in the field's kind.
        """
        field = self.schema.field(field_name)
        return self._tables[field.dom].get(part, field.name)

    def __getitem__(self, key: tuple[int, str]) -> Any:
        part, field_name = key
        return self.subpart(part, field_name)

    def incident_cost(self, morphism: str) -> LookupCost:
        """Report whether ``incident`` on ``morphism`` is indexed or a scan."""
        return LookupCost.INDEXED if self.schema.is_indexed(morphism) else LookupCost.SCAN

    def incident(self, target: int, morphism: str) -> list[int]:
        """Return the parts whose ``morphism`` value is ``target``, ascending.

        Indexed morphisms answer from the incidence index. Other morphisms
        fall back to a scan of the whole domain kind; see ``incident_cost``.
        """
        m = self.schema.get_morphism(morphism)
        if target not in self._tables[m.codom]:
            raise OutOfRangeError(f"{m.codom} part {target!r} is not live")
        if m.indexed:
            return self._indexes[m.name].get(target)

        table = self._tables[m.dom]
        logger.debug("Scanning %d %s parts for unindexed '%s'", table.count, m.dom, m.name)
        return [source for source, value in enumerate(table.column(m.name), start=1)
                if value == target]

    def parts(self, kind: str) -> list[int]:
        """Return all live ids of ``kind`` in ascending order."""
        return list(self._table(kind).ids())

    def count(self, kind: str) -> int:
        return self._table(kind).count

    def has_part(self, kind: str, part: int) -> bool:
        return part in self._table(kind)

    # -- deletion -----------------------------------------------------------

    def delete_one(self, kind: str, part: int) -> DeletePlan:
        """Delete a single part that has no indexed dependents.

        Raises:
            DependentPartsError: If any part still points at ``part`` through
                an indexed morphism (or a required unindexed one).
        """
        plan = plan_delete(self, kind, part, cascade=False)
        self._apply(plan)
        return plan

    def cascading_delete(self, kind: str, part: int) -> DeletePlan:
        """Delete a part together with everything that depends on it.

        The dependent closure follows indexed morphisms backwards, transitively.
        Surviving ids are compacted and every reference is rewritten; the new
        state replaces the old one in a single step.
        """
        plan = plan_delete(self, kind, part, cascade=True)
        self._apply(plan)
        return plan

    def _apply(self, plan: DeletePlan) -> None:
        tables, indexes = compact(self.schema, self._tables, self._indexes, plan)
        self._tables, self._indexes = tables, indexes
        logger.info(
            "Deleted %s part %d: %s",
            plan.kind,
            plan.part,
            ", ".join(f"{len(plan.removed[k])} {k}" for k in plan.order),
        )

    # -- utilities ----------------------------------------------------------

    def copy(self) -> Store:
        """Return an independent copy of this store."""
        clone = Store(self.schema, self.attr_types)
        clone._tables = {kind: table.copy() for kind, table in self._tables.items()}
        clone._indexes = {name: index.copy() for name, index in self._indexes.items()}
        return clone

    def check_integrity(self) -> None:
        """Verify referential integrity and incidence correctness.

        Raises:
            ReferentialIntegrityError: On a dangling or missing morphism value.
            GeoTablesError: If an incidence index disagrees with its column.
        """
        for m in self.schema.morphisms:
            codom = self._tables[m.codom]
            for source, target in enumerate(self._tables[m.dom].column(m.name), start=1):
                if target is None and not m.optional:
                    raise ReferentialIntegrityError(
                        f"{m.dom} part {source}: required morphism '{m.name}' is unset"
                    )
                if target is not None and target not in codom:
                    raise ReferentialIntegrityError(
                        f"{m.dom} part {source}: '{m.name}' points at dead {m.codom} part {target}"
                    )
            if m.indexed:
                expected = IncidenceIndex.from_column(m.name, self._tables[m.dom].column(m.name))
                if expected != self._indexes[m.name]:
                    raise GeoTablesError(f"Incidence index for '{m.name}' is out of date")

    def __repr__(self) -> str:
        counts = ", ".join(f"{kind}={table.count}" for kind, table in self._tables.items())
        return f"Store({counts})"
