"""
Ship and hauler state machines.

Ships belong to a docks: they sail to the docks route target, harvest fish
there for a fixed number of turns, and bring the catch back into docks
storage. Haulers shuttle docks storage to the player's mobile base over
land. Both advance once per end-turn tick and walk at most their movement
points along a breadth-first path.

Ship modes:   toTarget -> harvesting -> returning -> toTarget | returning
Hauler modes: idle | toDocks <-> returningToBase
"""

from typing import List, Optional, Union

import structlog

from ..config.rules import (
    DOCKS_STORAGE_CAP,
    HARVEST_TURNS,
    HAULER_CARGO_CAP,
    HAULER_COST,
    HAULER_MOVE_POINTS,
    SHIP_CARGO_CAP,
    SHIP_COST,
    SHIP_MOVE_POINTS,
)
from .hex_grid import Hex, hex_distance
from .models import Building, Carrier, Hauler, Resource, Ship, WorldState
from .pathfinding import Domain, find_path
from .renderer import Renderer
from .resources import format_cost, gain, spend

logger = structlog.get_logger()

DEFAULT_CAPACITY = {"ship": SHIP_CARGO_CAP, "hauler": HAULER_CARGO_CAP}


def carrier_capacity(carrier: Carrier) -> Optional[int]:
    """Explicit ``cargo_cap``, else the per-type default, else unlimited (None)."""
    if carrier.cargo_cap is not None:
        return carrier.cargo_cap
    return DEFAULT_CAPACITY.get(carrier.type)


def free_capacity(carrier: Carrier) -> Union[int, float]:
    cap = carrier_capacity(carrier)
    if cap is None:
        return float("inf")
    return max(0, cap - carrier.total_cargo())


def carrier_domain(carrier: Carrier) -> Domain:
    return Domain.WATER if carrier.type == "ship" else Domain.LAND


def carrier_path(state: WorldState, carrier: Carrier, to_q: int, to_r: int) -> Optional[List[Hex]]:
    """Domain-aware path; docks hexes are passable for ships and haulers alike."""
    return find_path(
        state.world_map,
        carrier.q,
        carrier.r,
        to_q,
        to_r,
        carrier_domain(carrier),
        passable_extra=state.docks_hexes(),
    )


def _advance(carrier: Carrier, path: List[Hex]) -> int:
    steps = min(carrier.move_points, len(path) - 1)
    if steps <= 0:
        return 0
    nxt = path[steps]
    carrier.q, carrier.r = nxt.q, nxt.r
    carrier.move_points -= steps
    return steps


def move_carrier_one_leg(
    state: WorldState, carrier: Carrier, target_q: int, target_r: int, renderer: Optional[Renderer] = None
) -> bool:
    """
    Move a carrier toward a hex with its remaining movement points.

    Returns:
        True when the carrier now stands exactly on the target
    """
    if carrier is None:
        return False
    if carrier.q == target_q and carrier.r == target_r:
        return True

    path = carrier_path(state, carrier, target_q, target_r)
    if not path or len(path) <= 1:
        return False

    if _advance(carrier, path) and renderer is not None:
        renderer.redraw_world()
    return carrier.q == target_q and carrier.r == target_r


# ----------------------------------------------------------------------
# Ships
# ----------------------------------------------------------------------


def build_ship_for_docks(
    state: WorldState, docks: Optional[Building], renderer: Optional[Renderer] = None
) -> Optional[Ship]:
    """Build a ship on the docks hex (costs 10 food)."""
    if docks is None or docks.type != "docks":
        logger.warning("Ship build needs a docks")
        return None
    if not spend(state, SHIP_COST, renderer):
        logger.warning("Not enough resources for a ship", cost=format_cost(SHIP_COST))
        return None

    ship = Ship(
        id=state.next_id("ship"),
        q=docks.q,
        r=docks.r,
        docks_id=docks.id,
        max_move_points=SHIP_MOVE_POINTS,
        move_points=SHIP_MOVE_POINTS,
        cargo_cap=SHIP_CARGO_CAP,
    )
    state.ships.append(ship)
    logger.info("Ship built", ship_id=ship.id, docks_id=docks.id)
    return ship


def set_docks_route(state: WorldState, docks: Optional[Building], q: int, r: int) -> bool:
    """Point a docks' ships at a water hex they can reach."""
    if docks is None or docks.type != "docks":
        logger.warning("Route needs a docks")
        return False
    if not state.world_map.in_bounds(q, r):
        logger.warning("Route pick out of bounds", q=q, r=r)
        return False
    if not state.world_map.is_water(q, r):
        logger.warning("Route must be on water", q=q, r=r)
        return False
    path = find_path(
        state.world_map, docks.q, docks.r, q, r, Domain.WATER, passable_extra=state.docks_hexes()
    )
    if path is None:
        logger.warning("Route is not reachable by water from the docks", docks_id=docks.id, q=q, r=r)
        return False

    docks.route = Hex(q, r)
    logger.info("Docks route set", docks_id=docks.id, q=q, r=r)
    return True


def clear_docks_route(docks: Optional[Building]) -> bool:
    """Drop a docks' route; its ships head home on the next tick."""
    if docks is None or docks.type != "docks":
        logger.warning("Route needs a docks")
        return False
    docks.route = None
    logger.info("Docks route cleared", docks_id=docks.id)
    return True


def recall_ships_to_docks(state: WorldState, docks: Building) -> int:
    """Snap every ship of a docks back onto the docks hex."""
    ships = [s for s in state.ships if s.docks_id == docks.id]
    for ship in ships:
        ship.q, ship.r = docks.q, docks.r
    logger.info("Ships recalled", docks_id=docks.id, count=len(ships))
    return len(ships)


def _harvest_tick(ship: Ship) -> None:
    cap = carrier_capacity(ship)
    if ship.harvest_turns_remaining > 0:
        room = max(0, cap - ship.total_cargo())
        take = min(1, room)
        if take > 0:
            ship.cargo_food += take
        ship.harvest_turns_remaining -= 1
    if ship.harvest_turns_remaining <= 0 or ship.total_cargo() >= cap:
        ship.mode = "returning"


def _deposit_catch(ship: Ship, docks: Building) -> int:
    food = ship.cargo_food
    if food <= 0:
        return 0
    room = max(0, DOCKS_STORAGE_CAP - docks.storage_food)
    deposit = min(room, food)
    if deposit > 0:
        docks.storage_food += deposit
        ship.cargo_food -= deposit
    return deposit


def apply_ship_routes_on_end_turn(state: WorldState, renderer: Optional[Renderer] = None) -> None:
    """Advance every docks-bound ship one tick."""
    if not state.ships:
        return

    moved = False
    for docks in state.docks():
        route = docks.route
        for ship in [s for s in state.ships if s.docks_id == docks.id]:
            if ship.uses_logistics:
                continue
            ship.move_points = ship.max_move_points

            if ship.mode == "harvesting" and route is not None and ship.harvest_at != route:
                logger.debug("Harvest interrupted by route change", ship_id=ship.id)
                ship.mode = "toTarget"
                ship.harvest_turns_remaining = 0
                ship.harvest_at = None
            if route is None and ship.total_cargo() > 0:
                ship.mode = "returning"

            if ship.mode == "harvesting":
                _harvest_tick(ship)
                continue

            if ship.mode == "toTarget" and route is not None:
                target = route
            elif ship.mode == "returning":
                target = Hex(docks.q, docks.r)
            else:
                target = Hex(ship.q, ship.r)

            if (ship.q, ship.r) == (target.q, target.r):
                if ship.mode == "toTarget":
                    if state.fish_at(ship.q, ship.r):
                        ship.mode = "harvesting"
                        ship.harvest_turns_remaining = HARVEST_TURNS
                        ship.harvest_at = Hex(ship.q, ship.r)
                    else:
                        ship.mode = "returning"
                elif ship.mode == "returning":
                    deposited = _deposit_catch(ship, docks)
                    if deposited:
                        logger.debug("Catch deposited", ship_id=ship.id, docks_id=docks.id, amount=deposited)
                    ship.mode = "toTarget" if route is not None else "returning"
                continue

            path = carrier_path(state, ship, target.q, target.r)
            if not path or len(path) <= 1:
                continue
            if _advance(ship, path):
                moved = True

    if moved:
        renderer = renderer or Renderer()
        renderer.redraw_world()
    else:
        logger.debug(
            "No ships moved",
            ships=[f"ship#{s.id}@{s.q},{s.r} mode={s.mode} food={s.cargo_food}" for s in state.ships],
        )


# ----------------------------------------------------------------------
# Haulers
# ----------------------------------------------------------------------


def nearest_docks(state: WorldState, q: int, r: int) -> Optional[Building]:
    docks = state.docks()
    if not docks:
        return None
    return min(docks, key=lambda b: hex_distance(q, r, b.q, b.r))


def build_hauler_at_selected_unit(state: WorldState, renderer: Optional[Renderer] = None) -> Optional[Hauler]:
    """Build a hauler on the mobile base (costs 10 food) and auto-assign a docks."""
    renderer = renderer or Renderer()
    unit = renderer.get_selected_unit() or state.mobile_base
    if unit is None:
        logger.warning("No selected unit (mobile base) for hauler")
        return None
    if not spend(state, HAULER_COST, renderer):
        logger.warning("Not enough resources for a hauler", cost=format_cost(HAULER_COST))
        return None

    hauler = Hauler(
        id=state.next_id("hauler"),
        q=unit.q,
        r=unit.r,
        base_q=unit.q,
        base_r=unit.r,
        max_move_points=HAULER_MOVE_POINTS,
        move_points=HAULER_MOVE_POINTS,
        cargo_cap=HAULER_CARGO_CAP,
    )
    docks = nearest_docks(state, unit.q, unit.r)
    if docks is not None:
        hauler.target_docks_id = docks.id
        hauler.mode = "toDocks"
        logger.info("Hauler auto-assigned", hauler_id=hauler.id, docks_id=docks.id, q=docks.q, r=docks.r)
    else:
        logger.warning("No docks available to assign hauler", hauler_id=hauler.id)

    state.haulers.append(hauler)
    return hauler


def assign_hauler_to_docks(state: WorldState, hauler: Hauler, q: int, r: int) -> bool:
    """Point a hauler at the docks standing on ``(q, r)``."""
    docks = state.building_at(q, r)
    if docks is None or docks.type != "docks":
        logger.warning("You must select an existing docks", q=q, r=r)
        return False
    hauler.target_docks_id = docks.id
    if hauler.mode == "idle":
        hauler.mode = "toDocks"
    logger.info("Hauler assigned", hauler_id=hauler.id, docks_id=docks.id)
    return True


def mobile_base_hex(state: WorldState, hauler: Hauler) -> Hex:
    if state.mobile_base is not None:
        return Hex(state.mobile_base.q, state.mobile_base.r)
    return Hex(hauler.base_q, hauler.base_r)


def _unload_at_base(state: WorldState, hauler: Hauler, renderer: Optional[Renderer]) -> None:
    delivered = {}
    for resource in Resource:
        amount = hauler.get_cargo(resource)
        if amount > 0:
            delivered[resource.value] = amount
            hauler.set_cargo(resource, 0)
    if delivered:
        gain(state, delivered, renderer)
        logger.debug("Hauler delivered", hauler_id=hauler.id, **delivered)


def apply_hauler_behavior_on_end_turn(state: WorldState, renderer: Optional[Renderer] = None) -> None:
    """Advance every hauler not driven by a logistics route one tick."""
    if not state.haulers:
        return

    moved = False
    for hauler in state.haulers:
        if hauler.uses_logistics:
            continue
        hauler.move_points = hauler.max_move_points

        docks = state.building_by_id(hauler.target_docks_id)
        if docks is None or docks.type != "docks":
            hauler.mode = "idle"
            continue

        base = mobile_base_hex(state, hauler)
        total = hauler.total_cargo()
        if total > 0 and hauler.mode != "returningToBase":
            hauler.mode = "returningToBase"
        if total == 0 and hauler.mode == "idle":
            hauler.mode = "toDocks"

        if hauler.mode == "toDocks":
            target = Hex(docks.q, docks.r)
        elif hauler.mode == "returningToBase":
            target = base
        else:
            target = Hex(hauler.q, hauler.r)

        if (hauler.q, hauler.r) == (target.q, target.r):
            if hauler.mode == "toDocks":
                room = free_capacity(hauler)
                available = docks.storage_food
                take = int(min(room, available))
                docks.storage_food = max(0, available - take)
                hauler.cargo_food += take
                hauler.mode = "returningToBase"
                logger.debug("Hauler loaded", hauler_id=hauler.id, docks_id=docks.id, amount=take)
            elif hauler.mode == "returningToBase":
                _unload_at_base(state, hauler, renderer)
                hauler.mode = "toDocks"
            continue

        path = carrier_path(state, hauler, target.q, target.r)
        if not path or len(path) <= 1:
            continue
        if _advance(hauler, path):
            moved = True

    if moved and renderer is not None:
        renderer.redraw_world()
