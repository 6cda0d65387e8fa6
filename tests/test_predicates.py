"""Tests for attribute filters and brute-force joins."""

import operator

import pytest

from geo_tables import spatial_filter, spatial_filter_relation, spatial_join
from geo_tables.domains.city import spatial_city
from geo_tables.errors import SchemaError


def contains(outer, inner):
    """Axis-aligned box containment; boxes are (xmin, ymin, xmax, ymax)."""
    return (
        outer[0] <= inner[0]
        and outer[1] <= inner[1]
        and inner[2] <= outer[2]
        and inner[3] <= outer[3]
    )


def within(inner, outer):
    return contains(outer, inner)


@pytest.fixture
def city():
    """One parcel P1 with buildings of floor area 100, 200 and 300."""
    city = spatial_city(geom=tuple)
    r = city.add_part("Region")
    d = city.add_part("District", district_of=r)
    p1 = city.add_part("Parcel", parcel_of=d, parcel_geom=(0, 0, 50, 50))
    city.add_part("Parcel", parcel_of=d, parcel_geom=(50, 0, 100, 50))
    city.add_part("Parcel", parcel_of=d)
    city.add_part("Building", building_on=p1, floor_area=100.0, footprint=(5, 5, 20, 20))
    city.add_part("Building", building_on=p1, floor_area=200.0, footprint=(30, 5, 45, 20))
    city.add_part("Building", building_on=p1, floor_area=300.0, footprint=(45, 5, 60, 20))
    city.add_part("Building", building_on=p1)
    return city


class TestSpatialFilter:
    """Tests for spatial_filter and spatial_filter_relation."""

    def test_numeric_predicate(self, city):
        """Test filtering buildings by floor area."""
        assert spatial_filter(city, "Building", "floor_area", lambda a: a > 150) == [2, 3]

    def test_absent_values_skipped(self, city):
        """Test that parts without a value never reach the predicate."""
        seen = []

        def record(value):
            seen.append(value)
            return True

        assert spatial_filter(city, "Building", "floor_area", record) == [1, 2, 3]
        assert seen == [100.0, 200.0, 300.0]

    def test_geometric_predicate(self, city):
        """Test filtering by an opaque geometry predicate."""
        query = (0, 0, 50, 50)
        result = spatial_filter(city, "Building", "footprint", lambda g: contains(query, g))
        assert result == [1, 2]

    def test_relation_form(self, city):
        """Test the relation-plus-query convenience form."""
        assert spatial_filter_relation(
            city, "Building", "floor_area", operator.ge, 200.0
        ) == [2, 3]
        assert spatial_filter_relation(
            city, "Building", "footprint", within, (0, 0, 100, 50)
        ) == [1, 2, 3]

    def test_no_matches(self, city):
        """Test an empty result."""
        assert spatial_filter(city, "Building", "floor_area", lambda a: a > 1000) == []

    def test_predicate_errors_propagate(self, city):
        """Test that exceptions from the predicate are not swallowed."""
        with pytest.raises(ZeroDivisionError):
            spatial_filter(city, "Building", "floor_area", lambda a: a / 0 > 1)

    def test_attribute_of_other_kind(self, city):
        """Test error when the attribute belongs to another kind."""
        with pytest.raises(SchemaError):
            spatial_filter(city, "Parcel", "footprint", lambda g: True)

    def test_morphism_is_not_an_attribute(self, city):
        """Test error when a morphism name is given as the attribute."""
        with pytest.raises(SchemaError):
            spatial_filter(city, "Building", "building_on", lambda v: True)


class TestSpatialJoin:
    """Tests for spatial_join."""

    def test_join_pairs_in_nested_order(self, city):
        """Test which (parcel, building) pairs satisfy containment."""
        pairs = spatial_join(city, "Parcel", "parcel_geom", "Building", "footprint", contains)
        assert pairs == [(1, 1), (1, 2)]

    def test_join_skips_absent_values(self, city):
        """Test that parts without a value on either side are skipped."""
        calls = []

        def always(a, b):
            calls.append((a, b))
            return True

        pairs = spatial_join(city, "Parcel", "parcel_geom", "Building", "footprint", always)
        assert pairs == [(1, 1), (1, 2), (1, 3), (2, 1), (2, 2), (2, 3)]
        assert len(calls) == 6

    def test_join_symmetry(self, city):
        """Test that flipping sides and relation gives the reversed pairs."""
        forward = spatial_join(city, "Parcel", "parcel_geom", "Building", "footprint", contains)
        backward = spatial_join(city, "Building", "footprint", "Parcel", "parcel_geom", within)
        assert {(b, a) for a, b in backward} == set(forward)

    def test_self_join(self, city):
        """Test joining a kind with itself."""
        pairs = spatial_join(
            city, "Building", "floor_area", "Building", "floor_area", operator.lt
        )
        assert pairs == [(1, 2), (1, 3), (2, 3)]

    def test_join_errors_propagate(self, city):
        """Test that exceptions from the relation are not swallowed."""
        def broken(a, b):
            raise RuntimeError("bad geometry")

        with pytest.raises(RuntimeError, match="bad geometry"):
            spatial_join(city, "Parcel", "parcel_geom", "Building", "footprint", broken)
