"""
Player resource pool and harvestable resource nodes.
"""

from typing import Dict, List, Optional

import structlog

from ..config.rules import FISH_COUNT, FISH_MIN_DISTANCE
from ..utils.random import FISH_STREAM, seeded_rng
from .hex_grid import hex_distance, is_water_type
from .models import ResourceNode, WorldState
from .renderer import Renderer

logger = structlog.get_logger()


def can_afford(state: WorldState, cost: Dict[str, int]) -> bool:
    return all(state.player_resources.get(k, 0) >= v for k, v in cost.items())


def spend(state: WorldState, cost: Dict[str, int], renderer: Optional[Renderer] = None) -> bool:
    """Deduct a cost atomically; nothing changes when it cannot be paid."""
    if not can_afford(state, cost):
        return False
    for k, v in cost.items():
        state.player_resources[k] = state.player_resources.get(k, 0) - v
    if renderer is not None:
        renderer.notify_resources_changed(state.player_resources)
    return True


def gain(state: WorldState, gains: Dict[str, int], renderer: Optional[Renderer] = None) -> None:
    for k, v in gains.items():
        state.player_resources[k] = state.player_resources.get(k, 0) + v
    if renderer is not None:
        renderer.notify_resources_changed(state.player_resources)


def format_cost(cost: Dict[str, int]) -> str:
    return ", ".join(f"{v} {k}" for k, v in cost.items())


def spawn_fish_resources(
    state: WorldState, count: int = FISH_COUNT, min_distance: int = FISH_MIN_DISTANCE
) -> List[ResourceNode]:
    """
    Scatter fish shoals over water tiles.

    Candidates are shuffled with the seed's fish stream and accepted greedily
    when at least ``min_distance`` hexes from every accepted shoal. Runs once
    per world; later calls return the existing nodes.
    """
    existing = [n for n in state.resources if n.type == "fish"]
    if existing:
        return existing

    water = [t for t in state.world_map if is_water_type(t.type)]
    prng = seeded_rng(state.seed, FISH_STREAM)
    prng.shuffle(water)

    placed: List[ResourceNode] = []
    for tile in water:
        if len(placed) >= count:
            break
        if any(hex_distance(tile.q, tile.r, n.q, n.r) < min_distance for n in placed):
            continue
        node = ResourceNode(type="fish", q=tile.q, r=tile.r)
        tile.resource_type = "fish"
        placed.append(node)

    state.resources.extend(placed)
    logger.info("Fish spawned", count=len(placed), requested=count)
    return placed
