"""
Landmark geography.

Each world gets one biome-defined landmark (volcano, glacier, plateau,
desert or bog). Its footprint is found by breadth-first flood fill from a
center tile, the footprint tiles are re-typed, and the touched hexes are
recorded so later POI placement can avoid them.

Process:
1. landmark_from_biome() - Pick the landmark kind from the biome string
2. find_center() - Explicit (q, r) or the suitable tile nearest the land centroid
3. build_footprint() - BFS collecting tiles that match the landmark predicate
4. apply_landmark() - Mutate tiles and fill the no-POI set
5. compute_highlight_cells() - Re-derive the outlined cells from tile state
"""

import math
from collections import deque
from typing import Callable, Iterable, List, Optional, Set, Tuple

import structlog

from .hex_grid import Hex, WorldMap, is_water_type, neighbors_odd_r
from .models import Landmark, Tile, WorldMeta

logger = structlog.get_logger()

PLATEAU_FOOTPRINT = 6
DEFAULT_FOOTPRINT = 9

LANDMARK_DEFAULTS = {
    "glacier": ("❄️", "Glacier"),
    "volcano": ("🌋", "Volcano"),
    "desert": ("🌵", "Dune Field"),
    "bog": ("🌾", "Bog"),
    "plateau": ("🌄", "Plateau"),
}

# Tile type the landmark leaves on its footprint
LANDMARK_TILE_TYPE = {
    "glacier": "ice",
    "desert": "sand",
    "bog": "swamp",
    "plateau": "grassland",
}


def landmark_from_biome(biome: Optional[str]) -> Landmark:
    """Landmark descriptor implied by a biome string."""
    b = (biome or "").lower()
    if "icy" in b:
        kind = "glacier"
    elif "volcan" in b:
        kind = "volcano"
    elif "desert" in b:
        kind = "desert"
    elif "swamp" in b:
        kind = "bog"
    else:
        kind = "plateau"
    emoji, label = LANDMARK_DEFAULTS[kind]
    return Landmark(type=kind, emoji=emoji, label=label)


def outline_color_for(biome: Optional[str]) -> int:
    """Outline color (0xRRGGBB) for the landmark overlay."""
    b = (biome or "").lower()
    if "icy" in b:
        return 0x1E88E5
    if "volcan" in b:
        return 0xD32F2F
    if "desert" in b:
        return 0xFDD835
    if "swamp" in b:
        return 0x4E342E
    return 0x43A047


def _is_peak(tile: Optional[Tile]) -> bool:
    return tile is not None and (tile.type == "mountain" or tile.elevation == 4)


def _clear_decorations(tile: Tile) -> None:
    tile.has_forest = False
    tile.has_ruin = False
    tile.has_crash_site = False
    tile.has_vehicle = False
    tile.has_mountain_icon = False


def closest_tile_to(
    tiles: Iterable[Tile],
    target_q: float,
    target_r: float,
    predicate: Callable[[Tile], bool] = lambda t: True,
) -> Optional[Tile]:
    """Tile minimizing squared offset distance to a point, first one wins ties."""
    best = None
    best_d = math.inf
    for t in tiles:
        if not predicate(t):
            continue
        d = (t.q - target_q) ** 2 + (t.r - target_r) ** 2
        if d < best_d:
            best_d = d
            best = t
    return best


def footprint_predicate(kind: str) -> Callable[[Tile], bool]:
    """Which tiles a landmark footprint may include."""
    if kind in ("glacier", "bog"):
        return lambda t: t.type != "mountain"
    if kind == "desert":
        return lambda t: not is_water_type(t.type)
    return lambda t: True


def find_center(world_map: WorldMap, landmark: Landmark) -> Optional[Tile]:
    """Resolve the footprint center tile."""
    if landmark.q is not None and landmark.r is not None:
        tile = world_map.tile_at(landmark.q, landmark.r)
        if tile is not None:
            return tile

    land = [t for t in world_map if not is_water_type(t.type)]
    n = max(1, len(land))
    cx = sum(t.q for t in land) / n
    cy = sum(t.r for t in land) / n

    def prefer(pred):
        return closest_tile_to(world_map, cx, cy, pred)

    not_water = lambda t: not is_water_type(t.type)
    if landmark.type == "volcano":
        return prefer(_is_peak) or prefer(not_water)
    if landmark.type in ("glacier", "bog"):
        return prefer(lambda t: t.type != "mountain")
    return prefer(not_water)


def build_footprint(world_map: WorldMap, center: Tile, kind: str) -> List[Hex]:
    """Breadth-first collection of matching tiles around the center."""
    want = PLATEAU_FOOTPRINT if kind == "plateau" else DEFAULT_FOOTPRINT
    pred = footprint_predicate(kind)

    queue = deque([center])
    seen = {(center.q, center.r)}
    cells: List[Hex] = []
    while queue and len(cells) < want:
        current = queue.popleft()
        if pred(current):
            cells.append(Hex(current.q, current.r))
        for n in neighbors_odd_r(current.q, current.r):
            if n in seen:
                continue
            tile = world_map.tile_at(n.q, n.r)
            if tile is None:
                continue
            seen.add(n)
            queue.append(tile)
    return cells


def _apply_volcano(world_map: WorldMap, landmark: Landmark, no_poi: Set[Hex]) -> None:
    center = world_map.tile_at(landmark.q, landmark.r)
    if not _is_peak(center):
        if center is not None:
            tq, tr = center.q, center.r
        else:
            tq, tr = world_map.width / 2, world_map.height / 2
        center = closest_tile_to(world_map, tq, tr, _is_peak) or center
    if center is None:
        return

    center.type = "mountain"
    center.elevation = 4
    center.has_mountain_icon = False
    landmark.q, landmark.r = center.q, center.r
    no_poi.add(Hex(center.q, center.r))

    for n in neighbors_odd_r(center.q, center.r):
        tile = world_map.tile_at(n.q, n.r)
        if tile is None:
            continue
        if not is_water_type(tile.type) and tile.type != "mountain":
            tile.type = "volcano_ash"
        _clear_decorations(tile)
        no_poi.add(Hex(tile.q, tile.r))


def apply_landmark(world_map: WorldMap, landmark: Landmark, cells: List[Hex]) -> Set[Hex]:
    """Mutate footprint tiles for the landmark; returns the no-POI set."""
    no_poi: Set[Hex] = set()
    if landmark.type == "volcano":
        _apply_volcano(world_map, landmark, no_poi)
        return no_poi

    new_type = LANDMARK_TILE_TYPE.get(landmark.type)
    if new_type is None:
        return no_poi

    for cell in cells:
        tile = world_map.tile_at(cell.q, cell.r)
        if tile is None:
            continue
        tile.type = new_type
        if landmark.type == "plateau":
            tile.elevation = 3
        _clear_decorations(tile)
        no_poi.add(Hex(tile.q, tile.r))
    return no_poi


def init_or_update_geography(world_map: WorldMap, meta: WorldMeta) -> None:
    """
    Place the world landmark once.

    Later calls are no-ops. If no center tile exists the landmark is skipped
    and the map proceeds without one.

    Args:
        world_map: Map whose tiles are mutated
        meta: World metadata; ``landmark`` may be preset, else it follows ``biome``
    """
    if meta.geo_built:
        return
    if world_map is None or len(world_map) == 0:
        logger.warning("Geography skipped: empty map")
        return

    landmark = meta.landmark.model_copy() if meta.landmark and meta.landmark.type else landmark_from_biome(meta.biome)
    if not landmark.emoji or not landmark.label:
        emoji, label = LANDMARK_DEFAULTS.get(landmark.type, LANDMARK_DEFAULTS["plateau"])
        landmark.emoji = landmark.emoji or emoji
        landmark.label = landmark.label or label

    center = find_center(world_map, landmark)
    if center is None:
        logger.info("No landmark center found, skipping landmark", type=landmark.type)
        meta.landmark = None
        meta.geo_cells = []
        meta.no_poi_set = set()
        meta.geo_center = None
        meta.geo_built = True
        return

    landmark.q, landmark.r = center.q, center.r
    cells = list(meta.geo_cells) if meta.geo_cells else build_footprint(world_map, center, landmark.type)
    no_poi = apply_landmark(world_map, landmark, cells)

    if landmark.type == "volcano":
        anchor: Optional[Tuple[float, float]] = (landmark.q, landmark.r)
    elif cells:
        anchor = (
            sum(c.q for c in cells) / len(cells),
            sum(c.r for c in cells) / len(cells),
        )
    else:
        anchor = None

    if anchor is not None:
        label_tile = closest_tile_to(
            world_map, anchor[0], anchor[1], lambda t: not is_water_type(t.type)
        )
    else:
        label_tile = world_map.tile_at(landmark.q, landmark.r)

    meta.landmark = landmark
    meta.geo_cells = cells
    meta.no_poi_set = no_poi
    meta.geo_center = Hex(label_tile.q, label_tile.r) if label_tile else None
    meta.geo_built = True

    logger.info(
        "Landmark placed",
        type=landmark.type,
        q=landmark.q,
        r=landmark.r,
        footprint=len(cells),
        suppressed=len(no_poi),
    )


def compute_highlight_cells(world_map: WorldMap, meta: WorldMeta) -> List[Hex]:
    """Footprint cells that still carry the landmark's defining terrain."""
    landmark = meta.landmark
    out: List[Hex] = []
    if landmark is None or world_map is None:
        return out

    if landmark.type == "volcano":
        if world_map.tile_at(landmark.q, landmark.r) is None:
            return out
        for n in neighbors_odd_r(landmark.q, landmark.r):
            tile = world_map.tile_at(n.q, n.r)
            if tile is not None and tile.type == "volcano_ash":
                out.append(Hex(tile.q, tile.r))
        return out

    for cell in meta.geo_cells:
        tile = world_map.tile_at(cell.q, cell.r)
        if tile is None:
            continue
        if landmark.type == "plateau":
            if tile.elevation == 3:
                out.append(Hex(cell.q, cell.r))
        elif tile.type == LANDMARK_TILE_TYPE.get(landmark.type):
            out.append(Hex(cell.q, cell.r))
    return out


def get_no_poi_set(meta: WorldMeta) -> Optional[Set[Hex]]:
    """Hexes where POIs must not be placed, or None before geography ran."""
    if not meta.geo_built:
        return None
    return meta.no_poi_set


def describe_landmark(world_map: WorldMap, meta: WorldMeta) -> List[str]:
    """Inspection text: a header plus one line per highlighted cell."""
    landmark = meta.landmark
    if landmark is None:
        return []
    cells = compute_highlight_cells(world_map, meta)
    lines = []
    for cell in cells:
        tile = world_map.tile_at(cell.q, cell.r)
        lines.append(f"({cell.q},{cell.r}) - {tile.type}, lvl {tile.elevation}")
    anchor = meta.geo_center or Hex(landmark.q, landmark.r)
    header = f"{landmark.label} @ ({anchor.q},{anchor.r}) - bound tiles: {len(lines)}"
    return [header] + lines


def outline_rings(world_map: WorldMap, meta: WorldMeta, renderer, size: float) -> List[List[Tuple[float, float]]]:
    """
    Hex corner rings for every highlighted cell.

    Centers come from ``renderer.coordinate_to_world``; corners are pointy-top
    offsets of ``size`` around each center.
    """
    rings = []
    for cell in compute_highlight_cells(world_map, meta):
        cx, cy = renderer.coordinate_to_world(cell.q, cell.r)
        ring = []
        for i in range(6):
            angle = math.radians(60 * i - 30)
            ring.append((cx + size * math.cos(angle), cy + size * math.sin(angle)))
        rings.append(ring)
    return rings


def draw_landmark_outline(world_map: WorldMap, meta: WorldMeta, renderer) -> int:
    """Hand the landmark outline to the renderer in the biome color; returns ring count."""
    if meta.landmark is None:
        return 0
    rings = outline_rings(world_map, meta, renderer, renderer.hex_size)
    if rings:
        renderer.draw_landmark_outline(rings, outline_color_for(meta.biome))
    return len(rings)
