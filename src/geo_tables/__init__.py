"""Geo Tables - schema-typed relational tables for hierarchical spatial data.

Morphisms answer structural questions (which buildings are in this region?)
with O(1)-per-hop index lookups; attribute predicates answer geometric ones.
"""

from geo_tables.cascade import DeletePlan
from geo_tables.errors import (
    BrokenChainError,
    DependentPartsError,
    GeoTablesError,
    OutOfRangeError,
    ReferentialIntegrityError,
    SchemaError,
    TypeMismatchError,
    UnknownNameError,
)
from geo_tables.parsing import SchemaParser
from geo_tables.predicates import spatial_filter, spatial_filter_relation, spatial_join
from geo_tables.schema import Schema
from geo_tables.store import LookupCost, Store
from geo_tables.traversal import traverse_down, traverse_up
from geo_tables.types import (
    AttributeDefinition,
    AttrTypeDefinition,
    MorphismDefinition,
    ObjectDefinition,
    SchemaRegistry,
)

__all__ = [
    # Main API
    "Schema",
    "SchemaParser",
    "Store",
    "LookupCost",
    "DeletePlan",
    # Queries
    "traverse_up",
    "traverse_down",
    "spatial_filter",
    "spatial_filter_relation",
    "spatial_join",
    # Schema definitions
    "ObjectDefinition",
    "AttrTypeDefinition",
    "MorphismDefinition",
    "AttributeDefinition",
    "SchemaRegistry",
    # Errors
    "GeoTablesError",
    "SchemaError",
    "UnknownNameError",
    "OutOfRangeError",
    "ReferentialIntegrityError",
    "TypeMismatchError",
    "DependentPartsError",
    "BrokenChainError",
]

__version__ = "0.1.0"
