import pytest

from reconcile.connectors import normalize_directory_type, normalize_registry_type, reconcile_connectors, total_quantity
from reconcile.models import ConnectorProvenance, ConnectorRecord, PlugType
from scrapers.items import ConnectorAggregationFeature


def bucket(plug, max_charge_rate, count, available_count=None, out_of_service_count=None):
    return ConnectorAggregationFeature(
        plug=plug,
        max_charge_rate=max_charge_rate,
        count=count,
        available_count=available_count,
        out_of_service_count=out_of_service_count,
    )


@pytest.mark.parametrize("name, expected", [
    ("CCS (Type 1)", PlugType.J1772_COMBO),
    ("CCS (Type 2)", PlugType.MENNEKES_COMBO),
    ("Type 2 (Socket Only)", PlugType.MENNEKES),
    ("Type 1 (J1772)", PlugType.J1772),
    ("CHAdeMO", PlugType.CHADEMO),
    ("Tesla (Model S/X)", PlugType.NACS),
    ("NACS / SAE J3400", PlugType.NACS),
    ("GB-T DC - GB/T 20234.3", PlugType.GB_T),
    ("NEMA 5-20R", PlugType.WALL_OUTLET),
])
def test_registry_names(name, expected):
    assert normalize_registry_type(name) == expected.value


def test_unknown_registry_names_pass_through():
    assert normalize_registry_type("Europlug 2-Pin (CEE 7/16)") == "Europlug 2-Pin (CEE 7/16)"
    assert normalize_registry_type(None) == "Unknown"


def test_directory_codes():
    assert normalize_directory_type("EV_CONNECTOR_TYPE_CCS_COMBO_1") == PlugType.J1772_COMBO.value
    assert normalize_directory_type("EV_CONNECTOR_TYPE_TESLA") == PlugType.NACS.value
    assert normalize_directory_type("EV_CONNECTOR_TYPE_OTHER") == "OTHER"


def test_matching_bucket_enriches_registry_connector():
    connectors = [ConnectorRecord("CCS (Type 1)", power_kw=50, quantity=2)]

    merged = reconcile_connectors(connectors, [bucket("EV_CONNECTOR_TYPE_CCS_COMBO_1", 50, 2, available_count=1, out_of_service_count=0)])

    assert len(merged) == 1
    assert merged[0].quantity == 2
    assert merged[0].available_count == 1
    assert merged[0].out_of_service_count == 0
    assert merged[0].max_charge_rate_kw == 50
    assert merged[0].provenance == ConnectorProvenance.REGISTRY
    assert total_quantity(merged) == 2


def test_unmatched_bucket_becomes_directory_connector():
    connectors = [ConnectorRecord("CCS (Type 1)", power_kw=50, quantity=2)]

    merged = reconcile_connectors(connectors, [bucket("EV_CONNECTOR_TYPE_CHADEMO", 50, 1, available_count=1)])

    assert len(merged) == 2
    assert merged[1].connector_type == PlugType.CHADEMO.value
    assert merged[1].provenance == ConnectorProvenance.DIRECTORY
    assert merged[1].quantity == 1
    assert merged[1].available_count == 1
    assert total_quantity(merged) == 3


def test_power_outside_tolerance_does_not_match():
    connectors = [ConnectorRecord("CCS (Type 1)", power_kw=50, quantity=2)]

    merged = reconcile_connectors(connectors, [bucket("EV_CONNECTOR_TYPE_CCS_COMBO_1", 150, 4)])

    assert merged[0].available_count is None
    assert merged[1].provenance == ConnectorProvenance.DIRECTORY
    assert merged[1].power_kw == 150


def test_missing_power_never_matches():
    connectors = [ConnectorRecord("CCS (Type 1)", power_kw=None, quantity=2)]

    merged = reconcile_connectors(connectors, [bucket("EV_CONNECTOR_TYPE_CCS_COMBO_1", 50, 2)])

    assert len(merged) == 2
    assert merged[0].available_count is None


def test_each_bucket_is_used_once():
    connectors = [
        ConnectorRecord("CCS (Type 1)", power_kw=50, quantity=1),
        ConnectorRecord("CCS (Type 1)", power_kw=50, quantity=1),
    ]

    merged = reconcile_connectors(connectors, [bucket("EV_CONNECTOR_TYPE_CCS_COMBO_1", 50, 1, available_count=1)])

    assert [connector.available_count for connector in merged] == [1, None]


def test_reconcile_is_idempotent():
    connectors = [
        ConnectorRecord("CCS (Type 1)", power_kw=50, quantity=2),
        ConnectorRecord("Type 1 (J1772)", power_kw=7.2, quantity=4),
    ]
    buckets = [
        bucket("EV_CONNECTOR_TYPE_CCS_COMBO_1", 50, 2, available_count=1),
        bucket("EV_CONNECTOR_TYPE_CHADEMO", 50, 1),
    ]

    once = reconcile_connectors(connectors, buckets)
    twice = reconcile_connectors(once, buckets)

    assert twice == once
    assert total_quantity(twice) == 7


def test_inputs_are_not_modified():
    connector = ConnectorRecord("CCS (Type 1)", power_kw=50, quantity=2)

    reconcile_connectors([connector], [bucket("EV_CONNECTOR_TYPE_CCS_COMBO_1", 50, 2, available_count=1)])

    assert connector.available_count is None
