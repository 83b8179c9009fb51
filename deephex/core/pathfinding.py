"""
Breadth-first pathfinding over water-only and land-only sub-graphs.

Ships search the water domain and haulers the land domain. A docks hex is
passable in both domains, so callers pass the docks coordinates as
``passable_extra``.
"""

from collections import deque
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from .hex_grid import Hex, WorldMap, is_water_type, neighbors_odd_r


class Domain(str, Enum):
    """Terrain class a path is restricted to."""

    WATER = "water"
    LAND = "land"


def domain_predicate(world_map: WorldMap, domain: Domain, passable_extra: Iterable[Hex] = ()) -> Callable[[int, int], bool]:
    """Build the passability test for a domain."""
    extra = {Hex(*h) for h in passable_extra}
    want_water = Domain(domain) == Domain.WATER

    def passable(q: int, r: int) -> bool:
        if not world_map.in_bounds(q, r):
            return False
        if (q, r) in extra:
            return True
        tile = world_map.tile_at(q, r)
        if tile is None:
            return False
        return is_water_type(tile.type) == want_water

    return passable


def find_path(
    world_map: WorldMap,
    from_q: int,
    from_r: int,
    to_q: int,
    to_r: int,
    domain: Domain,
    passable_extra: Iterable[Hex] = (),
) -> Optional[List[Hex]]:
    """
    Shortest path between two hexes within one domain.

    Args:
        world_map: Map to search
        from_q, from_r: Source hex
        to_q, to_r: Destination hex
        domain: Domain.WATER or Domain.LAND
        passable_extra: Hexes passable regardless of terrain (docks)

    Returns:
        Ordered hexes from source to destination inclusive, a single-element
        path when source equals destination, or None when unreachable or
        either endpoint fails the domain test.
    """
    if from_q == to_q and from_r == to_r:
        return [Hex(from_q, from_r)]

    passable = domain_predicate(world_map, domain, passable_extra)
    if not passable(from_q, from_r) or not passable(to_q, to_r):
        return None

    start = Hex(from_q, from_r)
    goal = Hex(to_q, to_r)
    came_from: Dict[Hex, Hex] = {}
    visited = {start}
    queue = deque([start])

    while queue:
        current = queue.popleft()
        if current == goal:
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            path.reverse()
            return path

        for n in neighbors_odd_r(current.q, current.r):
            if n in visited or not passable(n.q, n.r):
                continue
            visited.add(n)
            came_from[n] = current
            queue.append(n)

    return None


def is_reachable(
    world_map: WorldMap,
    from_q: int,
    from_r: int,
    to_q: int,
    to_r: int,
    domain: Domain,
    passable_extra: Iterable[Hex] = (),
) -> bool:
    return find_path(world_map, from_q, from_r, to_q, to_r, domain, passable_extra) is not None
