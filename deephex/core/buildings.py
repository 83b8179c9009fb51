"""
Player buildings: placement, destruction and per-turn production.
"""

from typing import Optional, Tuple

import structlog

from ..config.rules import (
    BUILDING_COSTS,
    BUILDING_EMOJI,
    BUILDING_LIMITS,
    MINE_MAX_SCRAP,
    MINE_SCRAP_PER_TURN,
)
from .hex_grid import is_water_type
from .models import Building, WorldState
from .renderer import Renderer
from .resources import can_afford, format_cost, spend

logger = structlog.get_logger()


def building_label(kind: str) -> str:
    return f"{BUILDING_EMOJI.get(kind, '')} {kind.capitalize()}".strip()


def _placement_hex(state: WorldState, hex_override, renderer: Renderer) -> Optional[Tuple[int, int]]:
    if hex_override is not None:
        return int(hex_override[0]), int(hex_override[1])
    unit = renderer.get_selected_unit() or state.mobile_base
    if unit is None:
        return None
    return unit.q, unit.r


def docks_shore_ok(state: WorldState, q: int, r: int) -> bool:
    """A docks needs at least one water and one land neighbor."""
    neighbors = state.world_map.neighbors(q, r)
    has_water = any(is_water_type(t.type) for t in neighbors)
    has_land = any(not is_water_type(t.type) for t in neighbors)
    return has_water and has_land


def start_building_placement(
    state: WorldState,
    kind: str,
    hex_override=None,
    renderer: Optional[Renderer] = None,
) -> Optional[Building]:
    """
    Place a building on the selected unit's hex (or an explicit hex).

    Every rule is checked before anything is spent:
    - the tile exists, is land, and holds no building
    - docks sit on a shoreline and respect the docks limit
    - the player can pay the cost

    Returns:
        The new building, or None when placement was rejected
    """
    renderer = renderer or Renderer()
    cost = BUILDING_COSTS.get(kind)
    if cost is None:
        logger.warning("Unknown building type", kind=kind)
        return None

    target = _placement_hex(state, hex_override, renderer)
    if target is None:
        logger.warning("No selected unit to place a building", kind=kind)
        return None
    q, r = target

    tile = state.tile_at(q, r)
    if tile is None:
        logger.warning("No tile at placement hex", kind=kind, q=q, r=r)
        return None
    if is_water_type(tile.type):
        logger.warning("Cannot build on water", kind=kind, q=q, r=r)
        return None
    if state.building_at(q, r) is not None:
        logger.warning("Tile already has a building", kind=kind, q=q, r=r)
        return None
    if kind == "docks" and not docks_shore_ok(state, q, r):
        logger.warning("Docks must be placed on a shoreline", q=q, r=r)
        return None

    limit = BUILDING_LIMITS.get(kind)
    if limit is not None and sum(1 for b in state.buildings if b.type == kind) >= limit:
        logger.warning("Building limit reached", kind=kind, limit=limit)
        return None
    if not can_afford(state, cost):
        logger.warning("Not enough resources", kind=kind, cost=format_cost(cost))
        return None

    spend(state, cost, renderer)
    building = Building(
        id=state.next_id("building"),
        type=kind,
        q=q,
        r=r,
        name=building_label(kind),
        max_scrap=MINE_MAX_SCRAP if kind == "mine" else None,
    )
    state.buildings.append(building)
    renderer.draw_tile(tile)
    logger.info("Placed building", kind=kind, building_id=building.id, q=q, r=r)
    return building


def destroy_building(state: WorldState, building_id: int, renderer: Optional[Renderer] = None) -> bool:
    """Remove a building; carriers bound to it are kept but unbound."""
    building = state.building_by_id(building_id)
    if building is None:
        logger.warning("No building to destroy", building_id=building_id)
        return False

    state.buildings.remove(building)
    for ship in state.ships:
        if ship.docks_id == building_id:
            ship.docks_id = None
    for hauler in state.haulers:
        if hauler.target_docks_id == building_id:
            hauler.target_docks_id = None

    if renderer is not None:
        tile = state.tile_at(building.q, building.r)
        if tile is not None:
            renderer.draw_tile(tile)
    logger.info("Destroyed building", kind=building.type, building_id=building_id)
    return True


def apply_building_production_on_end_turn(state: WorldState) -> None:
    for building in state.buildings:
        if building.type != "mine":
            continue
        ceiling = building.max_scrap if building.max_scrap is not None else MINE_MAX_SCRAP
        if building.storage_scrap < ceiling:
            building.storage_scrap = min(ceiling, building.storage_scrap + MINE_SCRAP_PER_TURN)
