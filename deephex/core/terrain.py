"""
Island terrain generation.

Builds the base hex grid for a world seed and overlays a random-width water
border around it.

Process:
1. make_value_noise() - Two value-noise fields at different scales
2. shape_island() - Radial mask + noise into water/plains/hills/mountain bands
3. add_secondary_terrain() - Beaches (sand) and wetlands (swamp)
4. carve_rivers() - Downhill water channels from random mountains
5. grow_forests() - Breadth-first forest blobs
6. apply_water_border() - Relabel a 1-4 hex frame as water
"""

from collections import deque
from typing import Dict, List, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, Field

from ..utils.random import BORDER_STREAM, TERRAIN_STREAM, seeded_rng
from .hex_grid import neighbors_odd_r, in_bounds
from .models import Tile
from .xorshift_prng import XorShift32

logger = structlog.get_logger()

# movement cost / defense presets
TERRAIN_PRESETS: Dict[str, Tuple[int, int]] = {
    "water": (999, 0),
    "plains": (1, 0),
    "sand": (1, 0),
    "forest": (2, 1),
    "mountain": (999, 3),
    "swamp": (3, -1),
}


class TerrainOptions(BaseModel):
    """Island generator parameters."""

    water_threshold: float = Field(default=0.28, description="Mask below this is water")
    coast_threshold: float = Field(default=0.40, description="Mask below this is elevation-0 plains")
    plains_threshold: float = Field(default=0.75, description="Mask below this is elevation-1 plains")
    hills_threshold: float = Field(default=0.88, description="Mask below this is elevation-2 hills")
    high_peak_chance: float = Field(default=0.3, description="Chance a mountain reaches elevation 4")
    sand_chance: float = Field(default=0.10, description="Elevation-0 plains turning to sand")
    swamp_chance: float = Field(default=0.06, description="Elevation-1 plains turning to swamp")
    max_rivers: int = Field(default=3, description="Upper bound on river sources")
    river_min_steps: int = Field(default=50)
    river_step_range: int = Field(default=60)
    forest_min_blobs: int = Field(default=8)
    forest_blob_range: int = Field(default=12)
    forest_min_size: int = Field(default=4)
    forest_size_range: int = Field(default=6)
    forest_spread: float = Field(default=0.5, description="Per-neighbor forest acceptance")
    border_min: int = Field(default=1, description="Minimum water border width")
    border_max: int = Field(default=4, description="Maximum water border width")


def apply_preset(tile: Tile, preset: str) -> None:
    cost, defense = TERRAIN_PRESETS[preset]
    tile.movement_cost = cost
    tile.defense = defense


def make_value_noise(width: int, height: int, prng: XorShift32, scale: float) -> np.ndarray:
    """
    Simple value noise field of shape (height, width).

    Three draws per cell, taken in row-major order, blended with a pair of
    low-frequency waves.
    """
    draws = np.array(
        [prng.random() for _ in range(width * height * 3)], dtype=np.float64
    ).reshape(height, width, 3)
    ny, nx = np.meshgrid(
        np.arange(height) / height, np.arange(width) / width, indexing="ij"
    )
    return (
        draws[..., 0] * 0.7
        + draws[..., 1] * 0.2 * np.sin((nx + ny * 2) * scale * 3.1)
        + draws[..., 2] * 0.1 * np.cos((ny - nx) * scale * 2.7)
    )


class TerrainGenerator:
    """Seeded island generator for a width x height odd-r grid."""

    def __init__(self, width: int, height: int, seed: str, options: TerrainOptions = None):
        self.width = width
        self.height = height
        self.seed = str(seed)
        self.options = options or TerrainOptions()
        self.prng = seeded_rng(self.seed, TERRAIN_STREAM)
        self.tiles: List[Tile] = []
        self._by_hex: Dict[Tuple[int, int], Tile] = {}

    def generate(self) -> List[Tile]:
        """Run every stage and return the tile list in row-major order."""
        logger.info("Generating terrain", width=self.width, height=self.height, seed=self.seed)

        self.tiles = [
            Tile(q=q, r=r) for r in range(self.height) for q in range(self.width)
        ]
        self._by_hex = {(t.q, t.r): t for t in self.tiles}

        self.shape_island()
        self.add_secondary_terrain()
        self.carve_rivers()
        self.grow_forests()

        water = sum(1 for t in self.tiles if t.type == "water")
        logger.info(
            "Terrain generated",
            tiles=len(self.tiles),
            water=water,
            land=len(self.tiles) - water,
            prng_calls=self.prng.call_count,
        )
        return self.tiles

    def _neighbors(self, tile: Tile) -> List[Tile]:
        out = []
        for n in neighbors_odd_r(tile.q, tile.r):
            if in_bounds(n.q, n.r, self.width, self.height):
                out.append(self._by_hex[n])
        return out

    def shape_island(self) -> None:
        """Radial falloff plus noise, cut into elevation bands."""
        opts = self.options
        noise1 = make_value_noise(self.width, self.height, self.prng, 1.0)
        noise2 = make_value_noise(self.width, self.height, self.prng, 2.3)

        cx = self.width / 2
        cy = self.height / 2
        max_dist = float(np.hypot(cx, cy)) or 1.0

        rows, cols = np.meshgrid(
            np.arange(self.height), np.arange(self.width), indexing="ij"
        )
        dist = np.hypot(cols - cx, rows - cy) / max_dist
        mask = np.clip(
            (1 - dist) * 0.9 + (noise1 - 0.5) * 0.25 + (noise2 - 0.5) * 0.15, 0.0, 1.0
        )

        for tile in self.tiles:
            m = mask[tile.r, tile.q]
            if m < opts.water_threshold:
                tile.type, tile.elevation = "water", 0
            elif m < opts.coast_threshold:
                tile.type, tile.elevation = "plains", 0
            elif m < opts.plains_threshold:
                tile.type, tile.elevation = "plains", 1
            elif m < opts.hills_threshold:
                tile.type, tile.elevation = "plains", 2
            else:
                tile.type = "mountain"
                tile.elevation = 4 if self.prng.random() < opts.high_peak_chance else 3

        for tile in self.tiles:
            apply_preset(tile, tile.type if tile.type in ("water", "mountain") else "plains")

    def add_secondary_terrain(self) -> None:
        opts = self.options
        for tile in self.tiles:
            if tile.type != "plains":
                continue
            if tile.elevation == 0 and self.prng.random() < opts.sand_chance:
                tile.type = "sand"
                apply_preset(tile, "sand")
            if tile.elevation == 1 and self.prng.random() < opts.swamp_chance:
                tile.type = "swamp"
                apply_preset(tile, "swamp")

    def carve_rivers(self) -> None:
        """Walk downhill from random mountains, turning the trail into water."""
        mountains = [t for t in self.tiles if t.type == "mountain"]
        if not mountains:
            return

        sources = min(self.options.max_rivers, 1 + int(self.prng.random() * 3))
        for _ in range(sources):
            start = mountains[int(self.prng.random() * len(mountains))]
            self._carve_river_from(start)
        logger.debug("Rivers carved", sources=sources)

    def _carve_river_from(self, start: Tile) -> None:
        current = start
        steps = self.options.river_min_steps + int(
            self.prng.random() * self.options.river_step_range
        )
        for _ in range(steps):
            neighbors = self._neighbors(current)
            if not neighbors:
                break

            best = None
            best_score = float("inf")
            for n in neighbors:
                jitter = (self.prng.random() - 0.5) * 0.2
                score = n.elevation + jitter
                if score < best_score:
                    best_score = score
                    best = n

            if best is None:
                break
            if best.type != "water":
                best.type = "water"
                best.elevation = 0
                apply_preset(best, "water")
            current = best

    def grow_forests(self) -> None:
        opts = self.options
        blob_count = opts.forest_min_blobs + int(self.prng.random() * opts.forest_blob_range)
        candidates = [t for t in self.tiles if t.type not in ("water", "mountain")]

        for _ in range(blob_count):
            if not candidates:
                break
            center = candidates[int(self.prng.random() * len(candidates))]
            size = opts.forest_min_size + int(self.prng.random() * opts.forest_size_range)
            self._flood_forest(center, size)

    def _flood_forest(self, center: Tile, size: int) -> None:
        queue = deque([center])
        visited = {(center.q, center.r)}
        while queue and size > 0:
            size -= 1
            current = queue.popleft()
            current.type = "forest"
            current.has_forest = True
            apply_preset(current, "forest")

            for n in self._neighbors(current):
                if (n.q, n.r) in visited:
                    continue
                if n.type in ("water", "mountain"):
                    continue
                if self.prng.random() < self.options.forest_spread:
                    visited.add((n.q, n.r))
                    queue.append(n)


def apply_water_border(
    tiles: List[Tile], width: int, height: int, seed: str, options: TerrainOptions = None
) -> Tuple[int, int, int, int]:
    """
    Relabel a random-width frame of tiles as water.

    Returns:
        (left, right, top, bottom) border widths
    """
    opts = options or TerrainOptions()
    prng = seeded_rng(str(seed), BORDER_STREAM)
    left = prng.randint(opts.border_min, opts.border_max)
    right = prng.randint(opts.border_min, opts.border_max)
    top = prng.randint(opts.border_min, opts.border_max)
    bottom = prng.randint(opts.border_min, opts.border_max)

    for tile in tiles:
        if tile.q < left or tile.q >= width - right or tile.r < top or tile.r >= height - bottom:
            tile.type = "water"

    logger.debug("Water border applied", left=left, right=right, top=top, bottom=bottom)
    return left, right, top, bottom


def generate_map(width: int, height: int, seed: str, options: TerrainOptions = None) -> List[Tile]:
    """
    Generate the tile list for a world.

    Args:
        width: Columns
        height: Rows
        seed: World seed string
        options: Optional generator parameters

    Returns:
        Tiles in row-major order; identical arguments give identical tiles
    """
    tiles = TerrainGenerator(width, height, seed, options).generate()
    apply_water_border(tiles, width, height, seed, options)
    return tiles
