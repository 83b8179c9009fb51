"""Seed-derived world summary (land-use ratios and biome description)."""

from typing import List

import structlog

from ..utils.random import raw_seed_rng
from .models import WorldSummary

logger = structlog.get_logger()

CLIMATES = ("Temperate", "Icy", "Volcanic", "Desert", "Swamp")
CLIMATE_WEIGHTS = (4, 1, 1, 1, 1)


def summarize_world(seed: str, width: int, height: int) -> WorldSummary:
    """
    Compute deterministic statistics for a seed.

    The ratios drive the biome tags; a climate drawn from the same stream
    prefixes the biome string and selects the landmark.
    """
    prng = raw_seed_rng(seed)

    total_tiles = width * height
    water_ratio = 0.28 + (prng.random() - 0.5) * 0.08
    forest_ratio = 0.25 + (prng.random() - 0.5) * 0.10
    mountain_ratio = 0.10 + (prng.random() - 0.5) * 0.05
    roughness = 0.4 + prng.random() * 0.4
    elevation_var = 0.6 + prng.random() * 0.4
    climate = CLIMATES[prng.weighted_index(CLIMATE_WEIGHTS)]

    tags: List[str] = []
    if water_ratio > 0.3:
        tags.append("Archipelago")
    elif water_ratio < 0.22:
        tags.append("Continental")

    if forest_ratio > 0.28:
        tags.append("Dense Forests")
    elif forest_ratio < 0.20:
        tags.append("Sparse Forests")

    if mountain_ratio > 0.12:
        tags.append("Mountainous")
    if roughness > 0.6:
        tags.append("Rugged Terrain")
    if elevation_var > 0.7:
        tags.append("High Elevation Contrast")

    terrain = ", ".join(tags) if tags else "Mixed Terrain"
    biome = f"{climate} Biome, {terrain}"

    summary = WorldSummary(
        water_tiles=round(total_tiles * water_ratio),
        forest_tiles=round(total_tiles * forest_ratio),
        mountain_tiles=round(total_tiles * mountain_ratio),
        roughness=round(roughness, 2),
        elevation_var=round(elevation_var, 2),
        climate=climate,
        biome=biome,
    )
    logger.debug("World summary", seed=seed, biome=biome)
    return summary
