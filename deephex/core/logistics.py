"""
Logistics scheduler: cyclic load/unload routes between stations.

A station is anything that holds resources: a building (its storage fields)
or the mobile base (the player's resource pool). A carrier that opts in
follows an ordered list of stops. Each tick it walks one leg toward the
current stop's station; on exact arrival it runs the stop's transfer and
moves on to the next stop, wrapping around forever.

Transfers are clamped by what the source holds and what the destination
can take, so cargo never exceeds the carrier capacity and storage never
goes negative or above its cap.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Union

import structlog

from ..config.rules import DOCKS_STORAGE_CAP
from .carriers import carrier_capacity, free_capacity, move_carrier_one_leg
from .models import Building, Carrier, MobileBase, Resource, RouteStop, WorldState
from .renderer import Renderer

logger = structlog.get_logger()

BASE_STATION_ID = "base"
TRANSFER_ACTIONS = ("load", "loadAll", "unload", "unloadAll")
IDLE_ACTION = "idle"

Amount = Union[int, float]


class Station(ABC):
    """Resource endpoint with uniform accessors over ``Resource``."""

    station_id: str
    name: str

    @property
    @abstractmethod
    def q(self) -> int: ...

    @property
    @abstractmethod
    def r(self) -> int: ...

    @abstractmethod
    def get(self, resource: Resource) -> int: ...

    @abstractmethod
    def set(self, resource: Resource, amount: int) -> None: ...

    def add(self, resource: Resource, delta: int) -> None:
        self.set(resource, self.get(resource) + delta)

    def capacity(self, resource: Resource) -> Optional[int]:
        """Storage ceiling for a resource; None means unlimited."""
        return None

    def free_capacity(self, resource: Resource) -> Amount:
        cap = self.capacity(resource)
        if cap is None:
            return float("inf")
        return max(0, cap - self.get(resource))


class BuildingStation(Station):
    def __init__(self, building: Building):
        self.building = building
        self.station_id = building_station_id(building)
        self.name = building.name or building.type

    @property
    def q(self) -> int:
        return self.building.q

    @property
    def r(self) -> int:
        return self.building.r

    def get(self, resource: Resource) -> int:
        return self.building.get_storage(resource)

    def set(self, resource: Resource, amount: int) -> None:
        cap = self.capacity(resource)
        if cap is not None:
            amount = min(cap, amount)
        self.building.set_storage(resource, amount)

    def capacity(self, resource: Resource) -> Optional[int]:
        if self.building.type == "docks":
            return DOCKS_STORAGE_CAP
        if self.building.type == "mine" and Resource(resource) == Resource.SCRAP:
            return self.building.max_scrap
        return None


class BaseStation(Station):
    """The mobile base; reads and writes the player resource pool."""

    def __init__(self, state: WorldState, base: MobileBase):
        self.state = state
        self.base = base
        self.station_id = BASE_STATION_ID
        self.name = base.name

    @property
    def q(self) -> int:
        return self.base.q

    @property
    def r(self) -> int:
        return self.base.r

    def get(self, resource: Resource) -> int:
        return self.state.player_resources.get(Resource(resource).value, 0)

    def set(self, resource: Resource, amount: int) -> None:
        self.state.player_resources[Resource(resource).value] = max(0, int(amount))


def building_station_id(building: Building) -> str:
    return f"b:{building.id}"


def find_station_by_id(state: WorldState, station_id: str) -> Optional[Station]:
    if station_id == BASE_STATION_ID:
        if state.mobile_base is None:
            return None
        return BaseStation(state, state.mobile_base)
    if not station_id.startswith("b:"):
        return None
    try:
        building_id = int(station_id[2:])
    except ValueError:
        return None
    building = state.building_by_id(building_id)
    return BuildingStation(building) if building is not None else None


def get_all_stations(state: WorldState) -> List[Station]:
    stations: List[Station] = []
    if state.mobile_base is not None:
        stations.append(BaseStation(state, state.mobile_base))
    stations.extend(BuildingStation(b) for b in state.buildings)
    return stations


def find_station_at(state: WorldState, q: int, r: int) -> Optional[Station]:
    """Station standing on a hex; the mobile base wins over a building."""
    for station in get_all_stations(state):
        if station.q == q and station.r == r:
            return station
    return None


# ----------------------------------------------------------------------
# Route editing
# ----------------------------------------------------------------------


def _make_stop(station_id: str, action: str, resource: Optional[Union[Resource, str]]) -> RouteStop:
    return RouteStop(
        station_id=station_id,
        action=action,
        resource=Resource(resource) if resource is not None else None,
    )


def set_carrier_route(carrier: Carrier, stops: Iterable[RouteStop]) -> None:
    carrier.route = list(stops)
    carrier.route_index = 0


def add_route_stop(
    carrier: Carrier,
    station_id: str,
    action: str,
    resource: Optional[Union[Resource, str]] = None,
) -> RouteStop:
    stop = _make_stop(station_id, action, resource)
    carrier.route.append(stop)
    return stop


def remove_route_stop(carrier: Carrier, index: int) -> bool:
    """Delete a stop; the route index keeps naming the same next stop."""
    if not 0 <= index < len(carrier.route):
        return False
    del carrier.route[index]
    if not carrier.route:
        carrier.route_index = 0
        return True
    if index < carrier.route_index:
        carrier.route_index -= 1
    if carrier.route_index >= len(carrier.route):
        carrier.route_index = len(carrier.route) - 1
    return True


def move_route_stop(carrier: Carrier, index: int, new_index: int) -> bool:
    n = len(carrier.route)
    if not (0 <= index < n and 0 <= new_index < n):
        return False
    stop = carrier.route.pop(index)
    carrier.route.insert(new_index, stop)
    current = carrier.route_index
    if current == index:
        carrier.route_index = new_index
    elif index < current <= new_index:
        carrier.route_index = current - 1
    elif new_index <= current < index:
        carrier.route_index = current + 1
    return True


def reset_route(carrier: Carrier) -> None:
    carrier.route = []
    carrier.route_index = 0
    carrier.logistics_enabled = False


def enable_logistics(carrier: Carrier, enabled: bool = True) -> None:
    carrier.logistics_enabled = enabled
    if enabled and not 0 <= carrier.route_index < max(1, len(carrier.route)):
        carrier.route_index = 0


# ----------------------------------------------------------------------
# Transfers
# ----------------------------------------------------------------------


def transfer_to_carrier(carrier: Carrier, station: Station, resource: Resource, limit: Amount) -> int:
    """Move up to ``limit`` units from a station into a carrier."""
    amount = int(min(limit, station.get(resource), free_capacity(carrier)))
    if amount <= 0:
        return 0
    station.add(resource, -amount)
    carrier.set_cargo(resource, carrier.get_cargo(resource) + amount)
    return amount


def transfer_to_station(carrier: Carrier, station: Station, resource: Resource, limit: Amount) -> int:
    """Move up to ``limit`` units from a carrier into a station."""
    amount = int(min(limit, carrier.get_cargo(resource), station.free_capacity(resource)))
    if amount <= 0:
        return 0
    carrier.set_cargo(resource, carrier.get_cargo(resource) - amount)
    station.add(resource, amount)
    return amount


def execute_stop(carrier: Carrier, station: Station, stop: RouteStop) -> int:
    """Run one stop's action at its station; returns units moved."""
    action = stop.action
    if action == IDLE_ACTION:
        return 0
    if action not in TRANSFER_ACTIONS:
        logger.warning("Unknown logistics action", action=action, carrier_id=carrier.id)
        return 0

    loading = action.startswith("load")
    move = transfer_to_carrier if loading else transfer_to_station

    if action in ("load", "unload"):
        resource = stop.resource or Resource.FOOD
        return move(carrier, station, resource, 1)

    resources = [stop.resource] if stop.resource is not None else list(Resource)
    return sum(move(carrier, station, resource, float("inf")) for resource in resources)


def _run_route(state: WorldState, carrier: Carrier, renderer: Optional[Renderer]) -> None:
    steps = carrier.route
    if not 0 <= carrier.route_index < len(steps):
        carrier.route_index = 0

    stop = steps[carrier.route_index]
    station = find_station_by_id(state, stop.station_id)
    if station is None:
        logger.warning("Station not found for route stop", station_id=stop.station_id, carrier_id=carrier.id)
        carrier.route_index = (carrier.route_index + 1) % len(steps)
        return

    if not move_carrier_one_leg(state, carrier, station.q, station.r, renderer):
        return

    moved = execute_stop(carrier, station, stop)
    cap = carrier_capacity(carrier)
    logger.debug(
        "Route stop executed",
        carrier_id=carrier.id,
        station_id=station.station_id,
        action=stop.action,
        moved=moved,
        cargo=carrier.total_cargo(),
        cap=cap,
    )
    carrier.route_index = (carrier.route_index + 1) % len(steps)


def apply_logistics_on_end_turn(state: WorldState, renderer: Optional[Renderer] = None) -> None:
    """Advance every opted-in carrier one leg; haulers first, then ships."""
    carriers: List[Carrier] = [*state.haulers, *state.ships]
    for carrier in carriers:
        if not carrier.uses_logistics:
            continue
        carrier.move_points = carrier.max_move_points
        _run_route(state, carrier, renderer)
