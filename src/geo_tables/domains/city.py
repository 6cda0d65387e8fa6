"""A four-level city hierarchy: Region <- District <- Parcel <- Building."""

from __future__ import annotations

from typing import Any

from geo_tables.schema import Schema
from geo_tables.store import Store
from geo_tables.traversal import traverse_down, traverse_up

SCHEMA_TEXT = """
object Region, District, Parcel, Building
attrtype Geom, Name, Area

# Containment
morphism district_of: District -> Region [indexed]
morphism parcel_of: Parcel -> District [indexed]
morphism building_on: Building -> Parcel [indexed]

attribute region_geom: Region -> Geom
attribute district_geom: District -> Geom
attribute parcel_geom: Parcel -> Geom
attribute footprint: Building -> Geom
attribute region_name: Region -> Name
attribute district_name: District -> Name
attribute floor_area: Building -> Area
"""

SCHEMA = Schema.parse(SCHEMA_TEXT)


def spatial_city(geom: Any = None, name: Any = str, area: Any = float) -> Store:
    """Create an empty city store.

    Args:
        geom: Python type of geometries, or None to accept any value.
        name: Python type of names.
        area: Python type of floor areas.
    """
    bindings = {"Geom": geom, "Name": name, "Area": area}
    return Store(SCHEMA, {k: v for k, v in bindings.items() if v is not None})


def buildings_in_region(city: Store, region: int) -> list[int]:
    """All buildings transitively contained in a region.

    Cost is O(d + p + b) in the districts, parcels and buildings of the
    region, against at least O(n log n) for a geometric join.
    """
    return traverse_down(city, region, "district_of", "parcel_of", "building_on")


def parcels_in_region(city: Store, region: int) -> list[int]:
    return traverse_down(city, region, "district_of", "parcel_of")


def buildings_in_district(city: Store, district: int) -> list[int]:
    return traverse_down(city, district, "parcel_of", "building_on")


def parcels_in_district(city: Store, district: int) -> list[int]:
    return traverse_down(city, district, "parcel_of")


def region_of_building(city: Store, building: int) -> int:
    """The region containing a building: three morphism lookups."""
    return traverse_up(city, building, "building_on", "parcel_of", "district_of")


def district_of_building(city: Store, building: int) -> int:
    return traverse_up(city, building, "building_on", "parcel_of")


def district_of_parcel(city: Store, parcel: int) -> int:
    return traverse_up(city, parcel, "parcel_of")


def region_of_parcel(city: Store, parcel: int) -> int:
    return traverse_up(city, parcel, "parcel_of", "district_of")
