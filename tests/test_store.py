"""Tests for the relational store: creation, reads, updates and incidence."""

import random
from decimal import Decimal

import pytest

from geo_tables import LookupCost, Schema, Store
from geo_tables.errors import (
    OutOfRangeError,
    ReferentialIntegrityError,
    SchemaError,
    TypeMismatchError,
    UnknownNameError,
)

SCHEMA = Schema.parse("""
object Owner, Parcel, Building
attrtype Name, Area

morphism building_on: Building -> Parcel [indexed]
morphism owned_by: Parcel -> Owner [optional]
morphism managed_by: Building -> Owner [indexed, optional]

attribute owner_name: Owner -> Name [required]
attribute parcel_name: Parcel -> Name
attribute floor_area: Building -> Area
""")


@pytest.fixture
def store():
    return Store(SCHEMA, {"Name": str, "Area": float})


@pytest.fixture
def parcels(store):
    """Two parcels and three buildings: b1, b2 on p1 and b3 on p2."""
    p1 = store.add_part("Parcel", parcel_name="P1")
    p2 = store.add_part("Parcel", parcel_name="P2")
    store.add_part("Building", building_on=p1, floor_area=100.0)
    store.add_part("Building", building_on=p1, floor_area=200.0)
    store.add_part("Building", building_on=p2, floor_area=300.0)
    return p1, p2


def inverse_image(store, morphism):
    """Compute target -> sources by brute force."""
    m = store.schema.get_morphism(morphism)
    result = {}
    for source in store.parts(m.dom):
        target = store.subpart(source, morphism)
        if target is not None:
            result.setdefault(target, []).append(source)
    return result


class TestAddPart:
    """Tests for creating parts."""

    def test_ids_are_dense_from_one(self, store):
        """Test that ids start at 1 and count up per kind."""
        assert store.add_part("Owner", owner_name="Ann") == 1
        assert store.add_part("Owner", owner_name="Bob") == 2
        assert store.add_part("Parcel") == 1
        assert store.parts("Owner") == [1, 2]
        assert store.count("Owner") == 2
        assert store.count("Building") == 0

    def test_values_are_stored(self, store, parcels):
        """Test reading values back by subpart and by indexing."""
        p1, _ = parcels
        assert store.subpart(1, "building_on") == p1
        assert store[2, "floor_area"] == 200.0
        assert store[1, "parcel_name"] == "P1"

    def test_missing_values_are_none(self, store):
        """Test that unset optional fields read as None."""
        p = store.add_part("Parcel")
        assert store[p, "parcel_name"] is None
        assert store[p, "owned_by"] is None

    def test_missing_required_morphism(self, store):
        """Test that a required morphism must be given."""
        with pytest.raises(ReferentialIntegrityError):
            store.add_part("Building", floor_area=10.0)

    def test_dangling_morphism(self, store, parcels):
        """Test that morphism values must name a live part."""
        with pytest.raises(ReferentialIntegrityError):
            store.add_part("Building", building_on=3)
        with pytest.raises(ReferentialIntegrityError):
            store.add_part("Building", building_on=0)

    def test_morphism_value_must_be_an_id(self, store, parcels):
        """Test that non-integer morphism values are rejected."""
        with pytest.raises(ReferentialIntegrityError):
            store.add_part("Building", building_on="1")
        with pytest.raises(ReferentialIntegrityError):
            store.add_part("Building", building_on=True)

    def test_attribute_type_mismatch(self, store, parcels):
        """Test that attribute values are checked against bound types."""
        with pytest.raises(TypeMismatchError):
            store.add_part("Building", building_on=1, floor_area="large")
        with pytest.raises(TypeError):
            store.add_part("Parcel", parcel_name=42)

    def test_float_binding_accepts_int_but_not_bool(self, store, parcels):
        """Test that a float binding takes any real number except bool."""
        b = store.add_part("Building", building_on=1, floor_area=150)
        assert store[b, "floor_area"] == 150
        with pytest.raises(TypeMismatchError):
            store.add_part("Building", building_on=1, floor_area=True)

    def test_tuple_binding_with_float(self):
        """Test that a float inside a tuple binding also takes ints but not bools."""
        store = Store(SCHEMA, {"Area": (float, Decimal)})
        p = store.add_part("Parcel")
        store.add_part("Building", building_on=p, floor_area=120)
        store.add_part("Building", building_on=p, floor_area=Decimal("80.5"))
        store.add_part("Building", building_on=p, floor_area=99.5)
        assert [store[b, "floor_area"] for b in store.parts("Building")] == [
            120, Decimal("80.5"), 99.5,
        ]
        with pytest.raises(TypeMismatchError):
            store.add_part("Building", building_on=p, floor_area=False)
        with pytest.raises(TypeMismatchError):
            store.add_part("Building", building_on=p, floor_area="120")

    def test_required_attribute(self, store):
        """Test that required attributes must be given."""
        with pytest.raises(TypeMismatchError):
            store.add_part("Owner")

    def test_unbound_attr_type_accepts_anything(self):
        """Test that attribute types without a binding are not checked."""
        store = Store(SCHEMA)
        p = store.add_part("Parcel", parcel_name=("any", "value"))
        assert store[p, "parcel_name"] == ("any", "value")

    def test_unknown_kind(self, store):
        """Test error for an undeclared kind."""
        with pytest.raises(UnknownNameError):
            store.add_part("Castle")

    def test_unknown_field(self, store):
        """Test error for an undeclared field."""
        with pytest.raises(UnknownNameError):
            store.add_part("Parcel", height=3)

    def test_field_of_other_kind(self, store):
        """Test error for a field that belongs to another kind."""
        with pytest.raises(SchemaError):
            store.add_part("Parcel", floor_area=3.0)

    def test_failed_add_changes_nothing(self, store, parcels):
        """Test that a rejected part leaves counts and incidence untouched."""
        before = store.incident(1, "building_on")
        with pytest.raises(ReferentialIntegrityError):
            store.add_part("Building", building_on=99)
        assert store.count("Building") == 3
        assert store.incident(1, "building_on") == before

    def test_unknown_attr_type_binding(self):
        """Test error when binding an attribute type the schema lacks."""
        with pytest.raises(UnknownNameError):
            Store(SCHEMA, {"Geom": object})


class TestAddParts:
    """Tests for bulk creation."""

    def test_add_parts(self, store, parcels):
        """Test adding several rows at once."""
        ids = store.add_parts("Building", [
            {"building_on": 2, "floor_area": 1.0},
            {"building_on": 2, "floor_area": 2.0},
        ])
        assert ids == [4, 5]
        assert store.incident(2, "building_on") == [3, 4, 5]

    def test_add_parts_is_all_or_nothing(self, store, parcels):
        """Test that one bad row stops every row from being added."""
        with pytest.raises(ReferentialIntegrityError):
            store.add_parts("Building", [
                {"building_on": 2},
                {"building_on": 7},
            ])
        assert store.count("Building") == 3
        assert store.incident(2, "building_on") == [3]


class TestReads:
    """Tests for reads and incidence lookups."""

    def test_out_of_range(self, store, parcels):
        """Test reading a part that does not exist."""
        with pytest.raises(OutOfRangeError):
            store.subpart(4, "floor_area")
        with pytest.raises(IndexError):
            store[0, "floor_area"]

    def test_incident_indexed(self, store, parcels):
        """Test indexed incidence in ascending order."""
        p1, p2 = parcels
        assert store.incident(p1, "building_on") == [1, 2]
        assert store.incident(p2, "building_on") == [3]
        assert store.incident_cost("building_on") is LookupCost.INDEXED

    def test_incident_unindexed_scan(self, store, parcels):
        """Test that unindexed morphisms fall back to a scan."""
        owner = store.add_part("Owner", owner_name="Ann")
        store.set_subpart(2, "owned_by", owner)
        store.set_subpart(1, "owned_by", owner)
        assert store.incident(owner, "owned_by") == [1, 2]
        assert store.incident_cost("owned_by") is LookupCost.SCAN

    def test_incident_empty(self, store, parcels):
        """Test incidence of a target nothing points at."""
        p = store.add_part("Parcel")
        assert store.incident(p, "building_on") == []

    def test_incident_target_out_of_range(self, store, parcels):
        """Test incidence on a target that is not live."""
        with pytest.raises(OutOfRangeError):
            store.incident(5, "building_on")

    def test_incident_returns_a_copy(self, store, parcels):
        """Test that mutating the result does not touch the index."""
        result = store.incident(1, "building_on")
        result.append(99)
        assert store.incident(1, "building_on") == [1, 2]

    def test_parts_read_idempotent(self, store, parcels):
        """Test that two reads without mutation agree."""
        assert store.parts("Building") == store.parts("Building")
        assert store.has_part("Building", 3)
        assert not store.has_part("Building", 4)


class TestSetSubpart:
    """Tests for updating fields of existing parts."""

    def test_move_updates_incidence(self, store, parcels):
        """Test that re-pointing an indexed morphism moves the part."""
        p1, p2 = parcels
        store.set_subpart(1, "building_on", p2)
        assert store.incident(p1, "building_on") == [2]
        assert store.incident(p2, "building_on") == [1, 3]
        assert store[1, "building_on"] == p2

    def test_set_attribute(self, store, parcels):
        """Test updating an attribute."""
        store.set_subpart(3, "floor_area", 350.0)
        assert store[3, "floor_area"] == 350.0

    def test_set_validates(self, store, parcels):
        """Test that updates are validated like creation."""
        with pytest.raises(ReferentialIntegrityError):
            store.set_subpart(1, "building_on", 9)
        with pytest.raises(TypeMismatchError):
            store.set_subpart(1, "floor_area", "big")
        with pytest.raises(OutOfRangeError):
            store.set_subpart(9, "floor_area", 1.0)
        assert store[1, "building_on"] == 1
        assert store.incident(1, "building_on") == [1, 2]

    def test_optional_indexed_morphism(self, store, parcels):
        """Test setting and clearing an optional indexed morphism."""
        owner = store.add_part("Owner", owner_name="Ann")
        store.set_subpart(3, "managed_by", owner)
        store.set_subpart(1, "managed_by", owner)
        assert store.incident(owner, "managed_by") == [1, 3]
        store.clear_subpart(3, "managed_by")
        assert store[3, "managed_by"] is None
        assert store.incident(owner, "managed_by") == [1]

    def test_required_morphism_cannot_be_cleared(self, store, parcels):
        """Test that required morphisms stay set."""
        with pytest.raises(ReferentialIntegrityError):
            store.clear_subpart(1, "building_on")
        assert store.incident(1, "building_on") == [1, 2]

    def test_clear_attribute(self, store, parcels):
        """Test clearing nullable and required attributes."""
        store.clear_subpart(1, "floor_area")
        assert store[1, "floor_area"] is None
        owner = store.add_part("Owner", owner_name="Ann")
        with pytest.raises(TypeMismatchError):
            store.clear_subpart(owner, "owner_name")


class TestCopy:
    """Tests for Store.copy."""

    def test_copy_is_independent(self, store, parcels):
        """Test that changes to a copy do not leak into the original."""
        clone = store.copy()
        clone.add_part("Building", building_on=1)
        clone.set_subpart(1, "building_on", 2)
        assert store.count("Building") == 3
        assert store.incident(1, "building_on") == [1, 2]
        assert clone.incident(1, "building_on") == [2, 4]


class TestIncidenceProperty:
    """Incidence always equals the inverse image of the morphism column."""

    def test_random_mutations(self, store):
        """Test incidence correctness after a random mix of operations."""
        rng = random.Random(1234)
        owners = [store.add_part("Owner", owner_name=f"o{i}") for i in range(3)]
        for i in range(5):
            store.add_part("Parcel", parcel_name=f"p{i}")

        for _ in range(200):
            op = rng.random()
            n_parcels = store.count("Parcel")
            n_buildings = store.count("Building")
            if op < 0.4 or n_buildings == 0:
                store.add_part(
                    "Building",
                    building_on=rng.randint(1, n_parcels),
                    managed_by=rng.choice(owners + [None]),
                )
            elif op < 0.7:
                store.set_subpart(
                    rng.randint(1, n_buildings), "building_on", rng.randint(1, n_parcels)
                )
            elif op < 0.85:
                store.set_subpart(
                    rng.randint(1, n_buildings), "managed_by", rng.choice(owners + [None])
                )
            else:
                store.delete_one("Building", rng.randint(1, n_buildings))

            for morphism in ("building_on", "managed_by"):
                expected = inverse_image(store, morphism)
                codom = store.schema.get_morphism(morphism).codom
                for target in store.parts(codom):
                    assert store.incident(target, morphism) == expected.get(target, [])

        store.check_integrity()
