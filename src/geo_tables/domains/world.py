"""Administrative geography: Continent <- Country <- Region <- City <- Feature."""

from __future__ import annotations

from typing import Any

from geo_tables.schema import Schema
from geo_tables.store import Store
from geo_tables.traversal import traverse_down, traverse_up

SCHEMA_TEXT = """
object Continent, Country, Region, City, Feature
attrtype Name, Code, Population, Area, Lat, Lon, Category

morphism country_in: Country -> Continent [indexed]
morphism region_in: Region -> Country [indexed]
morphism city_in: City -> Region [indexed]
morphism feature_in: Feature -> City [indexed]

attribute continent_name: Continent -> Name
attribute country_name: Country -> Name
attribute country_code: Country -> Code
attribute country_pop: Country -> Population
attribute country_area: Country -> Area
attribute region_name: Region -> Name
attribute region_code: Region -> Code
attribute region_pop: Region -> Population
attribute city_name: City -> Name
attribute city_pop: City -> Population
attribute city_lat: City -> Lat
attribute city_lon: City -> Lon
attribute feature_name: Feature -> Name
attribute feature_cat: Feature -> Category
attribute feature_lat: Feature -> Lat
attribute feature_lon: Feature -> Lon
"""

SCHEMA = Schema.parse(SCHEMA_TEXT)


def world_map(**bindings: Any) -> Store:
    """Create an empty world store; keyword arguments override type bindings."""
    types: dict[str, Any] = {
        "Name": str,
        "Code": str,
        "Population": int,
        "Area": float,
        "Lat": float,
        "Lon": float,
        "Category": str,
    }
    types.update(bindings)
    return Store(SCHEMA, types)


def countries_in_continent(world: Store, continent: int) -> list[int]:
    return traverse_down(world, continent, "country_in")


def regions_in_country(world: Store, country: int) -> list[int]:
    return traverse_down(world, country, "region_in")


def cities_in_region(world: Store, region: int) -> list[int]:
    return traverse_down(world, region, "city_in")


def features_in_city(world: Store, city: int) -> list[int]:
    return traverse_down(world, city, "feature_in")


def cities_in_country(world: Store, country: int) -> list[int]:
    """All cities in a country, through its regions."""
    return traverse_down(world, country, "region_in", "city_in")


def features_in_country(world: Store, country: int) -> list[int]:
    return traverse_down(world, country, "region_in", "city_in", "feature_in")


def country_of_city(world: Store, city: int) -> int:
    return traverse_up(world, city, "city_in", "region_in")


def continent_of_city(world: Store, city: int) -> int:
    return traverse_up(world, city, "city_in", "region_in", "country_in")
