"""Tests for the in-memory stop catalog."""
import json

import pytest

from bus_sg.data.catalog import InMemoryCatalog, load_catalog
from bus_sg.data.models import BusService, BusStop


def test_services_at_returns_services_calling_at_stop(sample_catalog):
    stop = sample_catalog.get_stop("Stop-001")
    assert {s.service_id for s in sample_catalog.services_at(stop)} == {"Svc-10", "Svc-20"}
    stop4 = sample_catalog.get_stop("Stop-004")
    assert {s.service_id for s in sample_catalog.services_at(stop4)} == {"Svc-20"}


def test_services_at_unknown_stop_is_empty(sample_catalog):
    assert sample_catalog.services_at(BusStop("nope")) == set()


def test_routes_keep_stop_order(sample_catalog):
    svc = sample_catalog.get_service("Svc-10")
    assert [s.stop_id for s in svc.bus_stops()] == ["Stop-001", "Stop-002", "Stop-003"]
    assert svc.bus_stops()[2].name == "Central"


def test_stop_without_services_is_still_known():
    catalog = InMemoryCatalog.from_mapping({"stops": {"LONELY": "Lonely Stop"}, "services": {}})
    stop = catalog.get_stop("LONELY")
    assert stop == BusStop("LONELY", "Lonely Stop")
    assert catalog.services_at(stop) == set()


def test_from_mapping_rejects_unknown_stop_in_route():
    with pytest.raises(ValueError, match="unknown stop"):
        InMemoryCatalog.from_mapping({"stops": {"A": "Alpha"}, "services": {"1": ["A", "B"]}})


def test_catalog_from_service_objects():
    a, b = BusStop("A", "Alpha"), BusStop("B", "Beta")
    catalog = InMemoryCatalog(services=[BusService("1", route=(a, b))])
    assert catalog.get_stop("B") == b
    assert len(catalog) == 1


def test_load_catalog_reads_json(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"stops": {"A": "Alpha", "B": "Beta"}, "services": {"1": ["A", "B"]}}))
    catalog = load_catalog(path)
    assert catalog.get_stop("A").name == "Alpha"
    assert {s.service_id for s in catalog.services_at(BusStop("B"))} == {"1"}


def test_load_catalog_missing_file_is_empty(tmp_path):
    catalog = load_catalog(tmp_path / "missing.json")
    assert len(catalog) == 0
    assert catalog.get_stop("A") is None
