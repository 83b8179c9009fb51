"""
Tests for the logistics scheduler.

Tests cover:
- Station resolution by id and by hex
- Building and base station accessors
- Load and unload transfers clamped by capacity and storage
- Route advancement, wrap-around and missing stations
- Unknown actions being reported and ignored
- Route editing helpers
"""

from unittest.mock import patch

import pytest

from deephex.config.rules import DOCKS_STORAGE_CAP
from deephex.core.logistics import (
    BaseStation,
    BuildingStation,
    add_route_stop,
    apply_logistics_on_end_turn,
    enable_logistics,
    execute_stop,
    find_station_at,
    find_station_by_id,
    get_all_stations,
    move_route_stop,
    remove_route_stop,
    reset_route,
    set_carrier_route,
)
from deephex.core.models import Building, Hauler, Resource, RouteStop, Ship

from conftest import HARBOR_ROWS, state_from_rows


@pytest.fixture
def world():
    state = state_from_rows(HARBOR_ROWS, base=(2, 2))
    docks = Building(id=1, type="docks", q=5, r=5)
    mine = Building(id=2, type="mine", q=0, r=0, max_scrap=10)
    state.buildings.extend([docks, mine])
    return state, docks, mine


class TestStations:
    """Test station resolution and accessors."""

    def test_find_by_id(self, world):
        """Test find by id."""
        state, docks, _ = world
        station = find_station_by_id(state, "b:1")
        assert isinstance(station, BuildingStation)
        assert station.building is docks
        assert isinstance(find_station_by_id(state, "base"), BaseStation)
        assert find_station_by_id(state, "b:99") is None
        assert find_station_by_id(state, "b:x") is None
        assert find_station_by_id(state, "dock") is None

    def test_all_stations(self, world):
        """Test all stations."""
        state, _, _ = world
        ids = [s.station_id for s in get_all_stations(state)]
        assert ids == ["base", "b:1", "b:2"]

    def test_find_at(self, world):
        """Test find at."""
        state, _, _ = world
        assert find_station_at(state, 2, 2).station_id == "base"
        assert find_station_at(state, 0, 0).station_id == "b:2"
        assert find_station_at(state, 9, 9) is None

    def test_docks_storage_clamped(self, world):
        """Test docks storage clamped."""
        _, docks, _ = world
        station = BuildingStation(docks)
        station.set(Resource.FOOD, 25)
        assert docks.storage_food == DOCKS_STORAGE_CAP
        station.add(Resource.FOOD, -40)
        assert docks.storage_food == 0

    def test_base_station_uses_player_pool(self, world):
        """Test base station uses player pool."""
        state, _, _ = world
        station = find_station_by_id(state, "base")
        station.add(Resource.MONEY, 5)
        assert state.player_resources["money"] == 205
        assert station.free_capacity(Resource.MONEY) == float("inf")


class TestTransfers:
    """Test execute_stop transfer semantics."""

    def test_load_moves_one_unit(self, world):
        """Test load moves one unit."""
        _, docks, _ = world
        docks.storage_food = 4
        hauler = Hauler(id=1, q=5, r=5)
        execute_stop(hauler, BuildingStation(docks), RouteStop(station_id="b:1", action="load", resource=Resource.FOOD))
        assert hauler.cargo_food == 1
        assert docks.storage_food == 3

    def test_load_all_respects_shared_capacity(self, world):
        """Test load all respects shared capacity."""
        _, docks, _ = world
        docks.storage_food = 7
        docks.storage_scrap = 3
        hauler = Hauler(id=1, q=5, r=5)
        moved = execute_stop(hauler, BuildingStation(docks), RouteStop(station_id="b:1", action="loadAll"))
        assert moved == 5
        assert hauler.total_cargo() == 5
        assert (hauler.cargo_food, hauler.cargo_scrap) == (5, 0)
        assert (docks.storage_food, docks.storage_scrap) == (2, 3)

    def test_load_limited_by_availability(self, world):
        """Test load limited by availability."""
        _, docks, _ = world
        docks.storage_food = 1
        ship = Ship(id=1, q=5, r=5)
        execute_stop(ship, BuildingStation(docks), RouteStop(station_id="b:1", action="loadAll", resource="food"))
        assert ship.cargo_food == 1
        assert docks.storage_food == 0

    def test_unload_all_clamped_by_docks_cap(self, world):
        """Test unload all clamped by docks cap."""
        _, docks, _ = world
        docks.storage_food = DOCKS_STORAGE_CAP - 1
        hauler = Hauler(id=1, q=5, r=5, cargo_food=4)
        execute_stop(hauler, BuildingStation(docks), RouteStop(station_id="b:1", action="unloadAll"))
        assert docks.storage_food == DOCKS_STORAGE_CAP
        assert hauler.cargo_food == 3

    def test_unload_into_base(self, world):
        """Test unload into base."""
        state, _, _ = world
        hauler = Hauler(id=1, q=2, r=2, cargo_food=2, cargo_scrap=1)
        execute_stop(hauler, find_station_by_id(state, "base"), RouteStop(station_id="base", action="unloadAll"))
        assert hauler.total_cargo() == 0
        assert state.player_resources["food"] == 202
        assert state.player_resources["scrap"] == 201

    def test_unknown_action_is_ignored(self, world):
        """Test unknown action is ignored."""
        _, docks, _ = world
        docks.storage_food = 5
        hauler = Hauler(id=1, q=5, r=5)
        with patch("deephex.core.logistics.logger") as mock_logger:
            moved = execute_stop(hauler, BuildingStation(docks), RouteStop(station_id="b:1", action="teleport"))
        assert moved == 0
        assert docks.storage_food == 5
        mock_logger.warning.assert_called_once()


class TestScheduler:
    """Test apply_logistics_on_end_turn."""

    def make_hauler(self, state, q, r, stops):
        hauler = Hauler(id=len(state.haulers) + 1, q=q, r=r)
        set_carrier_route(hauler, stops)
        enable_logistics(hauler)
        state.haulers.append(hauler)
        return hauler

    def test_shuttle_between_docks_and_base(self, world):
        """Test shuttle between docks and base."""
        state, docks, _ = world
        docks.storage_food = 8
        hauler = self.make_hauler(state, 5, 5, [
            RouteStop(station_id="b:1", action="loadAll", resource=Resource.FOOD),
            RouteStop(station_id="base", action="unloadAll"),
        ])

        apply_logistics_on_end_turn(state)
        assert hauler.cargo_food == 5
        assert hauler.route_index == 1

        # five hexes to the base at four movement points per tick
        apply_logistics_on_end_turn(state)
        assert hauler.route_index == 1
        apply_logistics_on_end_turn(state)
        assert (hauler.q, hauler.r) == (2, 2)
        assert hauler.cargo_food == 0
        assert state.player_resources["food"] == 205
        assert hauler.route_index == 0

    def test_not_arrived_keeps_index(self, world):
        """Test not arrived keeps index."""
        state, _, _ = world
        hauler = self.make_hauler(state, 9, 0, [RouteStop(station_id="b:2", action="load", resource="scrap")])
        apply_logistics_on_end_turn(state)
        assert hauler.route_index == 0
        assert (hauler.q, hauler.r) != (9, 0)

    def test_missing_station_advances(self, world):
        """Test missing station advances."""
        state, _, _ = world
        hauler = self.make_hauler(state, 2, 2, [
            RouteStop(station_id="b:99", action="load"),
            RouteStop(station_id="base", action="unloadAll"),
        ])
        with patch("deephex.core.logistics.logger") as mock_logger:
            apply_logistics_on_end_turn(state)
        assert hauler.route_index == 1
        mock_logger.warning.assert_called_once()

    def test_opt_in_only(self, world):
        """Test opt in only."""
        state, docks, _ = world
        docks.storage_food = 5
        hauler = Hauler(id=1, q=5, r=5)
        add_route_stop(hauler, "b:1", "loadAll")
        state.haulers.append(hauler)
        apply_logistics_on_end_turn(state)
        assert hauler.cargo_food == 0

    def test_out_of_range_index_resets(self, world):
        """Test out of range index resets."""
        state, docks, _ = world
        docks.storage_food = 5
        hauler = self.make_hauler(state, 5, 5, [RouteStop(station_id="b:1", action="load", resource="food")])
        hauler.route_index = 7
        apply_logistics_on_end_turn(state)
        assert hauler.cargo_food == 1
        assert hauler.route_index == 0


class TestRouteEditing:
    """Test the route editing helpers."""

    def setup_method(self):
        self.hauler = Hauler(id=1, q=0, r=0)
        for sid in ("base", "b:1", "b:2"):
            add_route_stop(self.hauler, sid, "loadAll")

    def test_add_converts_resource(self):
        """Test stop resource is converted to the enum."""
        stop = add_route_stop(self.hauler, "base", "load", "money")
        assert stop.resource == Resource.MONEY

    def test_remove_clamps_index(self):
        """Test removing the last stop clamps the index."""
        self.hauler.route_index = 2
        assert remove_route_stop(self.hauler, 2)
        assert self.hauler.route_index == 1
        assert not remove_route_stop(self.hauler, 5)

    def test_remove_earlier_stop_keeps_next_stop(self):
        """Test removing a stop before the pointer keeps the same next stop."""
        self.hauler.route_index = 1
        assert remove_route_stop(self.hauler, 0)
        assert self.hauler.route[self.hauler.route_index].station_id == "b:1"

    def test_remove_later_stop_keeps_index(self):
        """Test removing a stop after the pointer leaves it alone."""
        self.hauler.route_index = 1
        assert remove_route_stop(self.hauler, 2)
        assert self.hauler.route_index == 1
        assert self.hauler.route[1].station_id == "b:1"

    def test_remove_last_remaining_stop(self):
        """Test emptying the route resets the index."""
        for _ in range(3):
            assert remove_route_stop(self.hauler, 0)
        assert self.hauler.route == []
        assert self.hauler.route_index == 0

    def test_move_keeps_pointer_on_stop(self):
        """Test moving stops keeps the pointer on the same next stop."""
        self.hauler.route_index = 1
        assert move_route_stop(self.hauler, 0, 2)
        assert self.hauler.route[self.hauler.route_index].station_id == "b:1"
        assert move_route_stop(self.hauler, 0, 1)
        assert self.hauler.route[self.hauler.route_index].station_id == "b:1"

    def test_move(self):
        """Test moving a stop within the route."""
        assert move_route_stop(self.hauler, 0, 2)
        assert [s.station_id for s in self.hauler.route] == ["b:1", "b:2", "base"]
        assert not move_route_stop(self.hauler, 0, 3)

    def test_reset(self):
        """Test route reset disables logistics."""
        enable_logistics(self.hauler)
        reset_route(self.hauler)
        assert self.hauler.route == []
        assert not self.hauler.uses_logistics
