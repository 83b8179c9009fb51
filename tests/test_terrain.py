"""
Tests for island terrain generation.

Tests cover:
- Tile count and row-major order
- Determinism for identical arguments
- Water border widths and relabelling
- Terrain options and presets
- World summary determinism and biome text
"""

import pytest

from deephex.core.terrain import (
    TERRAIN_PRESETS,
    TerrainOptions,
    apply_preset,
    TerrainGenerator,
    apply_water_border,
    generate_map,
)
from deephex.core.models import Tile
from deephex.core.world_summary import CLIMATES, summarize_world


class TestGenerateMap:
    """Test the full map generator."""

    def test_tile_count_and_order(self):
        """Test tile count and order."""
        tiles = generate_map(12, 9, "order")
        assert len(tiles) == 12 * 9
        assert [(t.q, t.r) for t in tiles[:3]] == [(0, 0), (1, 0), (2, 0)]
        assert (tiles[-1].q, tiles[-1].r) == (11, 8)

    def test_deterministic(self):
        """Test deterministic."""
        a = generate_map(20, 20, "123456")
        b = generate_map(20, 20, "123456")
        assert [t.model_dump() for t in a] == [t.model_dump() for t in b]

    def test_different_seeds_differ(self):
        """Test different seeds differ."""
        a = generate_map(20, 20, "alpha")
        b = generate_map(20, 20, "omega")
        assert [t.type for t in a] != [t.type for t in b]

    def test_has_land(self):
        """Test generated island has land."""
        tiles = generate_map(25, 25, "land")
        assert any(t.type != "water" for t in tiles)


class TestWaterBorder:
    """Test the random-width water frame."""

    def test_border_is_water(self):
        """Test border is water."""
        width, height = 16, 14
        tiles = [Tile(q=q, r=r) for r in range(height) for q in range(width)]
        left, right, top, bottom = apply_water_border(tiles, width, height, "frame")

        for w in (left, right, top, bottom):
            assert 1 <= w <= 4
        for t in tiles:
            framed = t.q < left or t.q >= width - right or t.r < top or t.r >= height - bottom
            assert (t.type == "water") == framed

    def test_border_only_changes_type(self):
        """Test border only changes type."""
        tiles = [Tile(q=q, r=r, elevation=2, has_forest=True) for r in range(6) for q in range(6)]
        apply_water_border(tiles, 6, 6, "keep")
        assert all(t.elevation == 2 and t.has_forest for t in tiles)

    def test_border_deterministic(self):
        """Test border deterministic."""
        tiles = [Tile(q=0, r=0)]
        assert apply_water_border(tiles, 10, 10, "x") == apply_water_border(tiles, 10, 10, "x")

    def test_custom_border_range(self):
        """Test custom border range."""
        opts = TerrainOptions(border_min=2, border_max=2)
        tiles = [Tile(q=q, r=r) for r in range(8) for q in range(8)]
        assert apply_water_border(tiles, 8, 8, "fixed", opts) == (2, 2, 2, 2)


class TestPresets:
    """Test terrain presets and options."""

    def test_apply_preset(self):
        """Test apply preset."""
        tile = Tile(q=0, r=0)
        apply_preset(tile, "forest")
        assert (tile.movement_cost, tile.defense) == TERRAIN_PRESETS["forest"]

    def test_default_options(self):
        """Test default options."""
        opts = TerrainOptions()
        assert opts.water_threshold < opts.coast_threshold < opts.plains_threshold < opts.hills_threshold
        assert (opts.border_min, opts.border_max) == (1, 4)

    @pytest.mark.parametrize("seed", ["presets", "dunes", "42"])
    def test_generated_tiles_carry_their_preset(self, seed):
        """Test every generated tile carries the preset of its terrain type."""
        opts = TerrainOptions(sand_chance=1.0, swamp_chance=0.5)
        tiles = TerrainGenerator(24, 24, seed, opts).generate()
        assert any(t.type == "sand" for t in tiles)
        for tile in tiles:
            assert (tile.movement_cost, tile.defense) == TERRAIN_PRESETS[tile.type], tile.type


class TestWorldSummary:
    """Test the seed-derived summary."""

    def test_deterministic(self):
        """Test deterministic."""
        assert summarize_world("123456", 20, 20) == summarize_world("123456", 20, 20)

    def test_biome_carries_climate(self):
        """Test biome carries climate."""
        summary = summarize_world("abc", 25, 25)
        assert summary.climate in CLIMATES
        assert summary.biome.startswith(f"{summary.climate} Biome, ")

    @pytest.mark.parametrize("seed", ["1", "2", "3", "forest", "ocean"])
    def test_ratios_in_range(self, seed):
        """Test ratios in range."""
        summary = summarize_world(seed, 30, 30)
        assert 0.4 <= summary.roughness <= 0.8
        assert 0.6 <= summary.elevation_var <= 1.0
        assert 0 < summary.water_tiles < 900
