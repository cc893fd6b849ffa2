from __future__ import annotations

import pytest

from dvsim.core.metric import INFINITE, is_infinite, normalize_infinity, saturate, saturating_add
from dvsim.core.routing_table import RouteEntry, RoutingTable


def test_saturating_add_never_wraps():
    assert saturating_add(3, 4) == 7
    assert saturating_add(INFINITE, 1) == INFINITE
    assert saturating_add(1, INFINITE) == INFINITE
    assert saturating_add(INFINITE - 1, INFINITE - 1) == INFINITE
    assert saturating_add(10, 6, infinity=16) == INFINITE
    assert saturating_add(10, 5, infinity=16) == 15


def test_saturate_and_infinity_bounds():
    assert saturate(2**40) == INFINITE
    assert is_infinite(saturate(16, 16))
    with pytest.raises(ValueError):
        saturate(-1)
    assert normalize_infinity(None) == INFINITE
    assert normalize_infinity(2**40) == INFINITE
    with pytest.raises(ValueError):
        normalize_infinity(0)


def test_table_starts_with_self_route():
    table = RoutingTable("r1")

    assert table.rows() == [("r1", 0, "r1")]
    assert table.cost("r2") == INFINITE
    assert table.next_hop("r2") is None


def test_unreachable_route_drops_next_hop():
    table = RoutingTable(0)
    table.set_route(1, 4, 1)
    assert table.set_route(1, INFINITE, 1)

    assert table.get(1) == RouteEntry(1, INFINITE, None)
    assert not table.get(1).reachable


def test_set_route_reports_change():
    table = RoutingTable(0)
    assert table.set_route(1, 4, 1)
    assert not table.set_route(1, 4, 1)
    assert table.set_route(1, 3, 2)


@pytest.mark.parametrize(
    "dst,cost,hop",
    [
        (0, 1, 0),  # self route must cost 0
        (1, 0, 1),  # only the self route costs 0
        (1, 3, 0),  # next hop may not be the owner for a foreign destination
        (1, 3, None),  # reachable route needs a next hop
        (1, -1, 1),
    ],
)
def test_invariant_violations_raise(dst, cost, hop):
    table = RoutingTable(0)
    with pytest.raises(ValueError):
        table.set_route(dst, cost, hop)


def test_snapshot_has_value_semantics():
    table = RoutingTable(0)
    table.set_route(1, 5, 1)
    snap = table.snapshot()

    table.set_route(1, 2, 2)
    table.set_route(3, 7, 2)

    assert snap.cost(1) == 5
    assert snap[1].next_hop == 1
    assert 3 not in snap
    assert snap.cost(3) == INFINITE
    with pytest.raises(TypeError):
        snap._entries[1] = RouteEntry(1, 1, 1)


def test_rows_sorted_by_destination():
    table = RoutingTable("10.0.0.2")
    table.set_route("10.0.0.9", 2, "10.0.0.1")
    table.set_route("10.0.0.1", 1, "10.0.0.1")

    assert [row[0] for row in table.rows()] == ["10.0.0.1", "10.0.0.2", "10.0.0.9"]
