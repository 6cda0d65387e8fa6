"""Exception types raised by geo_tables.

Each error also derives from the builtin exception that describes the same
condition, so ``except KeyError`` and friends keep working.
"""


class GeoTablesError(Exception):
    """Base class for all geo_tables errors."""


class SchemaError(GeoTablesError, ValueError):
    """A schema declaration or morphism chain is malformed."""


class UnknownNameError(GeoTablesError, KeyError):
    """An object kind, morphism or attribute name is not in the schema."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class OutOfRangeError(GeoTablesError, IndexError):
    """A part id is not live in the kind being read or written."""


class ReferentialIntegrityError(GeoTablesError, ValueError):
    """A morphism value does not refer to a live part of its codomain."""


class TypeMismatchError(GeoTablesError, TypeError):
    """An attribute value does not match its bound value domain."""


class DependentPartsError(GeoTablesError, ValueError):
    """A non-cascading delete was attempted on a part with live dependents."""


class BrokenChainError(GeoTablesError, LookupError):
    """An upward traversal hit an unset morphism value."""
