"""Ready-made schemas for common spatial hierarchies.

Each module exposes its ``SCHEMA``, a factory returning an empty ``Store``
with the attribute types bound, and lookups defined as fixed morphism chains.
"""
