"""Tests for bus stop / service / routes models."""
import pytest

from bus_sg.data.models import BusRoutes, BusService, BusStop

CLEMENTI = BusStop("17091", "Clementi Stn")
KENT_RIDGE = BusStop("18331", "Kent Ridge Stn")
NUS = BusStop("16991", "NUS Kent Vale")


def test_matches_name_is_case_insensitive_substring():
    assert CLEMENTI.matches_name("clementi")
    assert CLEMENTI.matches_name("STN")
    assert not CLEMENTI.matches_name("Kent")


def test_empty_fragment_matches_every_stop():
    assert CLEMENTI.matches_name("")
    assert BusStop("X").matches_name("")


def test_find_stops_with_returns_matching_stops_only():
    svc = BusService("96", route=(CLEMENTI, NUS, KENT_RIDGE))
    assert svc.find_stops_with("Kent") == frozenset({NUS, KENT_RIDGE})
    assert svc.find_stops_with("Marina") == frozenset()


def test_services_compare_by_id_only():
    a = BusService("96", route=(CLEMENTI,))
    b = BusService("96", route=(KENT_RIDGE,))
    assert a == b
    assert hash(a) == hash(b)
    assert BusService("97") != a


def test_bus_routes_is_read_only():
    svc = BusService("96", route=(CLEMENTI, KENT_RIDGE))
    routes = BusRoutes(stop=CLEMENTI, name="Kent", services={svc: {KENT_RIDGE}})
    assert routes.services[svc] == frozenset({KENT_RIDGE})
    with pytest.raises(TypeError):
        routes.services[BusService("97")] = frozenset()  # type: ignore[index]
    with pytest.raises(AttributeError):
        routes.name = "other"  # type: ignore[misc]


def test_bus_routes_equality():
    svc = BusService("96", route=(CLEMENTI, KENT_RIDGE))
    first = BusRoutes(stop=CLEMENTI, name="Kent", services={svc: {KENT_RIDGE}})
    second = BusRoutes(stop=CLEMENTI, name="Kent", services={svc: frozenset({KENT_RIDGE})})
    assert first == second
    assert first != BusRoutes(stop=CLEMENTI, name="Kent", services={}, failed=True)


def test_describe_lists_services_and_stops_sorted():
    svc96 = BusService("96")
    svc151 = BusService("151")
    routes = BusRoutes(
        stop=CLEMENTI,
        name="Kent",
        services={svc96: {KENT_RIDGE, NUS}, svc151: {NUS}},
    )
    assert routes.describe() == "\n".join(
        [
            "Search for: 17091 <-> Kent:",
            "From 17091 Clementi Stn",
            "- Can take 151 to:",
            "  - 16991 NUS Kent Vale",
            "- Can take 96 to:",
            "  - 16991 NUS Kent Vale",
            "  - 18331 Kent Ridge Stn",
        ]
    )
    assert routes.service_ids() == ["151", "96"]


def test_describe_flags_failed_lookup():
    routes = BusRoutes(stop=CLEMENTI, name="Kent", services={}, failed=True)
    assert "Lookup failed" in routes.describe()


def test_services_without_matches_are_dropped():
    svc96, svc97 = BusService("96"), BusService("97")
    routes = BusRoutes(stop=CLEMENTI, name="Kent", services={svc96: {KENT_RIDGE}, svc97: frozenset()})
    assert set(routes.services) == {svc96}
    assert routes.service_ids() == ["96"]


def test_bus_routes_are_hashable():
    svc = BusService("96", route=(CLEMENTI, KENT_RIDGE))
    first = BusRoutes(stop=CLEMENTI, name="Kent", services={svc: {KENT_RIDGE}})
    second = BusRoutes(stop=CLEMENTI, name="Kent", services={svc: {KENT_RIDGE}})
    assert hash(first) == hash(second)
    assert len({first, second, BusRoutes(stop=CLEMENTI, name="Kent", services={})}) == 2
