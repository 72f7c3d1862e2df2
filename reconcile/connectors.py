from typing import Iterable
import dataclasses
import logging

from reconcile.models import ConnectorProvenance, ConnectorRecord, PlugType


logger = logging.getLogger(__name__)

DIRECTORY_TYPE_PREFIX = "EV_CONNECTOR_TYPE_"

DIRECTORY_CODE_TO_PLUG_MAP = {
    "J1772": PlugType.J1772,
    "TYPE_2": PlugType.MENNEKES,
    "CCS_COMBO_1": PlugType.J1772_COMBO,
    "CCS_COMBO_2": PlugType.MENNEKES_COMBO,
    "CHADEMO": PlugType.CHADEMO,
    "TESLA": PlugType.NACS,
    "NACS": PlugType.NACS,
    "GB_T": PlugType.GB_T,
    "WALL_OUTLET": PlugType.WALL_OUTLET,

    "OTHER": None,
    "UNSPECIFIED": None,
}

# Checked in order, combo plugs before their AC counterparts
REGISTRY_NAME_TO_PLUG_RULES = [
    (("ccs", "combo"), ("type 1", "combo 1", "j1772"), PlugType.J1772_COMBO),
    (("ccs", "combo"), ("type 2", "combo 2", "mennekes"), PlugType.MENNEKES_COMBO),
    (("type 2", "mennekes"), (), PlugType.MENNEKES),
    (("type 1", "j1772"), (), PlugType.J1772),
    (("chademo",), (), PlugType.CHADEMO),
    (("tesla", "nacs", "j3400"), (), PlugType.NACS),
    (("gb/t", "gbt", "gb-t"), (), PlugType.GB_T),
    (("wall outlet", "nema", "schuko", "domestic"), (), PlugType.WALL_OUTLET),
]


def normalize_registry_type(name) -> str:
    """Map a free-text registry connector name onto the shared vocabulary.

    Unknown names are returned unchanged.
    """
    if not name:
        return "Unknown"

    lower_name = name.lower()

    for any_of, also_any_of, plug in REGISTRY_NAME_TO_PLUG_RULES:
        if not any(token in lower_name for token in any_of):
            continue

        if also_any_of and not any(token in lower_name for token in also_any_of):
            continue

        return plug.value

    return name


def normalize_directory_type(code) -> str:
    if not code:
        return "Unknown"

    if code.startswith(DIRECTORY_TYPE_PREFIX):
        code = code[len(DIRECTORY_TYPE_PREFIX):]

    if plug := DIRECTORY_CODE_TO_PLUG_MAP.get(code):
        return plug.value

    return code


def types_match(first_type: str, second_type: str) -> bool:
    return first_type.lower() == second_type.lower()


def powers_match(registry_power, directory_power, tolerance: float) -> bool:
    if registry_power is None or directory_power is None:
        return False

    return abs(float(registry_power) - float(directory_power)) <= tolerance


def reset_telemetry(connector: ConnectorRecord) -> ConnectorRecord:
    return dataclasses.replace(
        connector,
        connector_type=normalize_registry_type(connector.connector_type),
        available_count=None,
        out_of_service_count=None,
        max_charge_rate_kw=None,
        availability_updated_at=None,
    )


def connector_from_bucket(bucket) -> ConnectorRecord:
    max_charge_rate = bucket.get("max_charge_rate")

    return ConnectorRecord(
        connector_type=normalize_directory_type(bucket.get("plug")),
        power_kw=float(max_charge_rate) if max_charge_rate is not None else None,
        quantity=bucket.get("count") or 0,
        available_count=bucket.get("available_count"),
        out_of_service_count=bucket.get("out_of_service_count"),
        max_charge_rate_kw=float(max_charge_rate) if max_charge_rate is not None else None,
        availability_updated_at=bucket.get("availability_updated"),
        provenance=ConnectorProvenance.DIRECTORY,
    )


def reconcile_connectors(connectors: Iterable[ConnectorRecord], buckets: Iterable, power_tolerance: float = 2.0) -> list[ConnectorRecord]:
    """Fuse registry connector specs with directory availability buckets.

    Each bucket enriches at most one registry connector of the same type
    with a power rating within ``power_tolerance`` kW. Buckets left over are
    appended as directory connectors. The inputs are not modified and any
    directory connectors already present are replaced, so repeated runs
    over the same inputs give the same result.
    """
    registry_connectors = [
        reset_telemetry(connector)
        for connector in connectors
        if connector.provenance == ConnectorProvenance.REGISTRY
    ]

    buckets = list(buckets)
    bucket_types = [normalize_directory_type(bucket.get("plug")) for bucket in buckets]
    used_buckets: set[int] = set()

    for connector in registry_connectors:
        for bucket_index, bucket in enumerate(buckets):
            if bucket_index in used_buckets:
                continue

            if not types_match(connector.connector_type, bucket_types[bucket_index]):
                continue

            if not powers_match(connector.power_kw, bucket.get("max_charge_rate"), power_tolerance):
                continue

            connector.available_count = bucket.get("available_count")
            connector.out_of_service_count = bucket.get("out_of_service_count")
            connector.availability_updated_at = bucket.get("availability_updated")

            if bucket.get("max_charge_rate") is not None:
                connector.max_charge_rate_kw = float(bucket["max_charge_rate"])

            used_buckets.add(bucket_index)

            logger.debug("Matched %s connector (%skW) with directory bucket (%skW)", connector.connector_type, connector.power_kw, connector.max_charge_rate_kw)

            break

    combined_connectors = list(registry_connectors)

    for bucket_index, bucket in enumerate(buckets):
        if bucket_index in used_buckets:
            continue

        new_connector = connector_from_bucket(bucket)
        combined_connectors.append(new_connector)

        logger.debug("Added directory connector %s (%skW)", new_connector.connector_type, new_connector.power_kw)

    return combined_connectors


def total_quantity(connectors: Iterable[ConnectorRecord]) -> int:
    return sum(connector.quantity or 0 for connector in connectors)
