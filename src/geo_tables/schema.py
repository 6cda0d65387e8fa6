"""Schema class describing object kinds, morphisms and attributes."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from geo_tables.errors import SchemaError
from geo_tables.parsing import SchemaParser
from geo_tables.types import (
    AttributeDefinition,
    FieldDefinition,
    MorphismDefinition,
    ObjectDefinition,
    SchemaRegistry,
)


class Schema:
    """Immutable description of a relational spatial structure.

    A schema is produced once and consumed by any number of stores. It holds
    the object kinds, the morphisms between them and the attributes that map
    parts into external value domains.
    """

    def __init__(self, registry: SchemaRegistry) -> None:
        """Initialize a schema.

        Args:
            registry: Registry with all schema element definitions.
        """
        self._registry = registry
        self._objects = tuple(registry.list_objects())
        self._attr_types = tuple(registry.list_attr_types())
        self._morphisms = tuple(registry.list_morphisms())
        self._attributes = tuple(registry.list_attributes())

        self._morphisms_from: dict[str, tuple[MorphismDefinition, ...]] = {}
        self._morphisms_into: dict[str, tuple[MorphismDefinition, ...]] = {}
        self._attributes_of: dict[str, tuple[AttributeDefinition, ...]] = {}
        for kind in self._objects:
            self._morphisms_from[kind] = tuple(m for m in self._morphisms if m.dom == kind)
            self._morphisms_into[kind] = tuple(m for m in self._morphisms if m.codom == kind)
            self._attributes_of[kind] = tuple(a for a in self._attributes if a.dom == kind)

    @classmethod
    def parse(cls, schema_definitions: str) -> Schema:
        """Parse schema definitions written in the schema DSL.

        Args:
            schema_definitions: DSL string declaring objects, attribute types,
                morphisms and attributes.

        Returns:
            A new Schema instance.
        """
        parser = SchemaParser()
        return cls(parser.parse(schema_definitions))

    @classmethod
    def build(
        cls,
        objects: Iterable[str],
        morphisms: Iterable[tuple[str, str, str]],
        attr_types: Iterable[str] = (),
        attributes: Iterable[tuple[str, str, str]] = (),
        index: Iterable[str] = (),
        optional: Iterable[str] = (),
        required: Iterable[str] = (),
    ) -> Schema:
        """Build a schema from plain name lists.

        Args:
            objects: Object kind names.
            morphisms: ``(name, dom, codom)`` triples.
            attr_types: Attribute value domain names.
            attributes: ``(name, kind, attr_type)`` triples.
            index: Names of morphisms that keep an incidence index.
            optional: Names of morphisms that may be left unset.
            required: Names of attributes that must always have a value.

        Returns:
            A new Schema instance.
        """
        index = set(index)
        optional = set(optional)
        required = set(required)

        registry = SchemaRegistry()
        for name in objects:
            registry.register_object(name)
        for name in attr_types:
            registry.register_attr_type(name)

        morphism_names = set()
        for name, dom, codom in morphisms:
            morphism_names.add(name)
            registry.register(MorphismDefinition(
                name=name, dom=dom, codom=codom,
                indexed=name in index, optional=name in optional,
            ))
        attribute_names = set()
        for name, dom, attr_type in attributes:
            attribute_names.add(name)
            registry.register(AttributeDefinition(
                name=name, dom=dom, attr_type=attr_type, required=name in required,
            ))

        stray = (index | optional) - morphism_names
        if stray:
            raise SchemaError(f"Not morphisms of this schema: {sorted(stray)}")
        stray = required - attribute_names
        if stray:
            raise SchemaError(f"Not attributes of this schema: {sorted(stray)}")
        return cls(registry)

    @property
    def objects(self) -> tuple[str, ...]:
        return self._objects

    @property
    def attr_types(self) -> tuple[str, ...]:
        return self._attr_types

    @property
    def morphisms(self) -> tuple[MorphismDefinition, ...]:
        return self._morphisms

    @property
    def attributes(self) -> tuple[AttributeDefinition, ...]:
        return self._attributes

    @property
    def indexed_morphisms(self) -> tuple[MorphismDefinition, ...]:
        return tuple(m for m in self._morphisms if m.indexed)

    def get_object(self, name: str) -> ObjectDefinition:
        """Get an object kind by name.

        Raises:
            UnknownNameError: If the kind is not declared.
        """
        return self._registry.get_object(name)

    def field(self, name: str) -> FieldDefinition:
        """Get a morphism or attribute by name.

        Raises:
            UnknownNameError: If no field has that name.
        """
        return self._registry.get_field(name)

    def get_morphism(self, name: str) -> MorphismDefinition:
        field = self._registry.get_field(name)
        if not isinstance(field, MorphismDefinition):
            raise SchemaError(f"'{name}' is an attribute, not a morphism")
        return field

    def get_attribute(self, name: str) -> AttributeDefinition:
        field = self._registry.get_field(name)
        if not isinstance(field, AttributeDefinition):
            raise SchemaError(f"'{name}' is a morphism, not an attribute")
        return field

    def is_indexed(self, name: str) -> bool:
        """Return whether the named morphism keeps an incidence index."""
        return self.get_morphism(name).indexed

    def morphisms_from(self, kind: str) -> tuple[MorphismDefinition, ...]:
        """Morphisms whose domain is ``kind``."""
        self.get_object(kind)
        return self._morphisms_from[kind]

    def morphisms_into(self, kind: str) -> tuple[MorphismDefinition, ...]:
        """Morphisms whose codomain is ``kind``."""
        self.get_object(kind)
        return self._morphisms_into[kind]

    def attributes_of(self, kind: str) -> tuple[AttributeDefinition, ...]:
        self.get_object(kind)
        return self._attributes_of[kind]

    def fields_of(self, kind: str) -> tuple[FieldDefinition, ...]:
        """All morphisms and attributes owned by ``kind``."""
        return self.morphisms_from(kind) + self.attributes_of(kind)

    def describe(self) -> dict[str, Any]:
        """Describe the schema as a JSON-compatible dict."""
        return {
            "objects": list(self._objects),
            "attr_types": list(self._attr_types),
            "morphisms": [
                {
                    "name": m.name,
                    "dom": m.dom,
                    "codom": m.codom,
                    "indexed": m.indexed,
                    "optional": m.optional,
                }
                for m in self._morphisms
            ],
            "attributes": [
                {
                    "name": a.name,
                    "dom": a.dom,
                    "attr_type": a.attr_type,
                    "required": a.required,
                }
                for a in self._attributes
            ],
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return self.describe() == other.describe()

    def __hash__(self) -> int:
        return hash((self._objects, self._attr_types, self._morphisms, self._attributes))

    def __repr__(self) -> str:
        return f"Schema(objects={list(self._objects)!r})"
