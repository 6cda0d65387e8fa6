"""Parsing module for the schema DSL."""

from geo_tables.parsing.schema_parser import SchemaParser

__all__ = [
    "SchemaParser",
]
