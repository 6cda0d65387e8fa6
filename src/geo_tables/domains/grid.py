"""Distribution grid hierarchy.

TransmissionZone <- Substation <- Feeder <- Transformer <- ServicePoint <- DER

Morphisms read as "served by": which substation serves this meter is three
morphism lookups, and everything on a feeder is an incidence expansion.
"""

from __future__ import annotations

from typing import Any

from geo_tables.schema import Schema
from geo_tables.store import Store
from geo_tables.traversal import traverse_down, traverse_up

SCHEMA_TEXT = """
object TransmissionZone, Substation, Feeder, Transformer, ServicePoint, DER
attrtype Geom, Name, ID, Capacity, Load, Voltage, Status, DERType, Cost

morphism substation_in: Substation -> TransmissionZone [indexed]
morphism feeder_at: Feeder -> Substation [indexed]
morphism transformer_on: Transformer -> Feeder [indexed]
morphism service_at: ServicePoint -> Transformer [indexed]
morphism der_at: DER -> ServicePoint [indexed]

attribute zone_geom: TransmissionZone -> Geom
attribute zone_name: TransmissionZone -> Name
attribute zone_id: TransmissionZone -> ID

attribute sub_geom: Substation -> Geom
attribute sub_name: Substation -> Name
attribute sub_id: Substation -> ID
attribute sub_capacity_mva: Substation -> Capacity
attribute sub_load_mw: Substation -> Load
attribute sub_voltage_kv: Substation -> Voltage

attribute feeder_geom: Feeder -> Geom
attribute feeder_id: Feeder -> ID
attribute feeder_capacity_mw: Feeder -> Capacity
attribute feeder_load_mw: Feeder -> Load
attribute feeder_voltage_kv: Feeder -> Voltage
attribute feeder_length_mi: Feeder -> Capacity

attribute xfmr_geom: Transformer -> Geom
attribute xfmr_id: Transformer -> ID
attribute xfmr_capacity_kva: Transformer -> Capacity
attribute xfmr_load_kw: Transformer -> Load

attribute sp_geom: ServicePoint -> Geom
attribute sp_id: ServicePoint -> ID
attribute sp_load_kw: ServicePoint -> Load
attribute sp_customer_type: ServicePoint -> Name
attribute sp_critical: ServicePoint -> Status

attribute der_geom: DER -> Geom
attribute der_id: DER -> ID
attribute der_type: DER -> DERType
attribute der_capacity_kw: DER -> Capacity
attribute der_cost_usd: DER -> Cost
attribute der_status: DER -> Status
"""

SCHEMA = Schema.parse(SCHEMA_TEXT)


def distribution_grid(geom: Any = None, **bindings: Any) -> Store:
    """Create an empty distribution grid store.

    Numeric attribute types default to float and labels to str; pass
    ``Capacity=int`` and the like to override.
    """
    types: dict[str, Any] = {
        "Name": str,
        "ID": str,
        "Capacity": float,
        "Load": float,
        "Voltage": float,
        "Status": str,
        "DERType": str,
        "Cost": float,
    }
    if geom is not None:
        types["Geom"] = geom
    types.update(bindings)
    return Store(SCHEMA, types)


def feeders_at_substation(grid: Store, substation: int) -> list[int]:
    return traverse_down(grid, substation, "feeder_at")


def transformers_on_feeder(grid: Store, feeder: int) -> list[int]:
    return traverse_down(grid, feeder, "transformer_on")


def services_at_transformer(grid: Store, transformer: int) -> list[int]:
    return traverse_down(grid, transformer, "service_at")


def ders_at_service(grid: Store, service_point: int) -> list[int]:
    return traverse_down(grid, service_point, "der_at")


def services_on_feeder(grid: Store, feeder: int) -> list[int]:
    """All service points on a feeder, through its transformers."""
    return traverse_down(grid, feeder, "transformer_on", "service_at")


def ders_on_feeder(grid: Store, feeder: int) -> list[int]:
    return traverse_down(grid, feeder, "transformer_on", "service_at", "der_at")


def services_at_substation(grid: Store, substation: int) -> list[int]:
    return traverse_down(grid, substation, "feeder_at", "transformer_on", "service_at")


def ders_at_substation(grid: Store, substation: int) -> list[int]:
    return traverse_down(
        grid, substation, "feeder_at", "transformer_on", "service_at", "der_at"
    )


def feeders_in_zone(grid: Store, zone: int) -> list[int]:
    """All feeders in a transmission zone, for regional planning."""
    return traverse_down(grid, zone, "substation_in", "feeder_at")


def feeder_of_service(grid: Store, service_point: int) -> int:
    return traverse_up(grid, service_point, "service_at", "transformer_on")


def substation_of_service(grid: Store, service_point: int) -> int:
    """Which substation serves a service point."""
    return traverse_up(grid, service_point, "service_at", "transformer_on", "feeder_at")


def zone_of_der(grid: Store, der: int) -> int:
    return traverse_up(
        grid, der, "der_at", "service_at", "transformer_on", "feeder_at", "substation_in"
    )
