"""Schema element definitions for the geo_tables library."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from geo_tables.errors import SchemaError, UnknownNameError


@dataclass(frozen=True)
class ObjectDefinition:
    """A named kind of part (Region, Building, ...)."""

    name: str


@dataclass(frozen=True)
class AttrTypeDefinition:
    """A named external value domain (Geom, Name, Area, ...).

    The schema only names the domain; the concrete Python type is bound when a
    store is instantiated.
    """

    name: str


@dataclass(frozen=True)
class MorphismDefinition:
    """A functional relationship from one object kind to another.

    ``indexed`` morphisms keep a reverse (target -> sources) index up to date.
    ``optional`` morphisms may be left unset; all others must be given a value
    when a part is created and can never be cleared.
    """

    name: str
    dom: str
    codom: str
    indexed: bool = False
    optional: bool = False


@dataclass(frozen=True)
class AttributeDefinition:
    """A function from an object kind into an attribute value domain.

    Attributes are nullable unless marked ``required``.
    """

    name: str
    dom: str
    attr_type: str
    required: bool = False

    @property
    def optional(self) -> bool:
        return not self.required


FieldDefinition = Union[MorphismDefinition, AttributeDefinition]


class SchemaRegistry:
    """Registry of all declared schema elements.

    Objects and attribute types share one namespace, and morphisms and
    attributes share another (both are addressed as "fields" of a part).
    """

    def __init__(self) -> None:
        self._objects: dict[str, ObjectDefinition] = {}
        self._attr_types: dict[str, AttrTypeDefinition] = {}
        self._fields: dict[str, FieldDefinition] = {}

    def register_object(self, name: str) -> ObjectDefinition:
        """Register an object kind."""
        self._check_sort_name(name)
        definition = ObjectDefinition(name=name)
        self._objects[name] = definition
        return definition

    def register_attr_type(self, name: str) -> AttrTypeDefinition:
        """Register an attribute value domain."""
        self._check_sort_name(name)
        definition = AttrTypeDefinition(name=name)
        self._attr_types[name] = definition
        return definition

    def register(self, field: FieldDefinition) -> None:
        """Register a morphism or attribute definition."""
        if field.name in self._fields:
            raise SchemaError(f"Field '{field.name}' is already defined")
        if field.name in self._objects or field.name in self._attr_types:
            raise SchemaError(f"Field '{field.name}' clashes with a kind of the same name")
        if field.dom not in self._objects:
            raise SchemaError(f"Field '{field.name}': unknown object kind '{field.dom}'")
        if isinstance(field, MorphismDefinition):
            if field.codom not in self._objects:
                raise SchemaError(
                    f"Morphism '{field.name}': unknown object kind '{field.codom}'"
                )
        elif field.attr_type not in self._attr_types:
            raise SchemaError(
                f"Attribute '{field.name}': unknown attribute type '{field.attr_type}'"
            )
        self._fields[field.name] = field

    def _check_sort_name(self, name: str) -> None:
        if name in self._objects or name in self._attr_types:
            raise SchemaError(f"'{name}' is already defined")

    def get_object(self, name: str) -> ObjectDefinition:
        """Get an object kind by name, raising if not found."""
        definition = self._objects.get(name)
        if definition is None:
            raise UnknownNameError(f"Object kind '{name}' not found")
        return definition

    def get_field(self, name: str) -> FieldDefinition:
        """Get a morphism or attribute by name, raising if not found."""
        definition = self._fields.get(name)
        if definition is None:
            raise UnknownNameError(f"Field '{name}' not found")
        return definition

    def list_objects(self) -> list[str]:
        """List object kinds in declaration order."""
        return list(self._objects)

    def list_attr_types(self) -> list[str]:
        """List attribute types in declaration order."""
        return list(self._attr_types)

    def list_morphisms(self) -> list[MorphismDefinition]:
        return [f for f in self._fields.values() if isinstance(f, MorphismDefinition)]

    def list_attributes(self) -> list[AttributeDefinition]:
        return [f for f in self._fields.values() if isinstance(f, AttributeDefinition)]

    def __contains__(self, name: str) -> bool:
        return name in self._objects or name in self._attr_types or name in self._fields
