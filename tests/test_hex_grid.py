"""
Tests for odd-r hex grid helpers.

Tests cover:
- Neighbor offsets and their fixed direction order
- Cube conversion and hex distance
- WorldMap lookup, bounds and neighbor filtering
"""

from deephex.core.hex_grid import (
    Hex,
    hex_distance,
    is_water_type,
    key_of,
    neighbors_odd_r,
    offset_to_cube,
)

from conftest import world_from_rows


class TestNeighbors:
    """Test neighbor enumeration."""

    def test_even_row_order(self):
        """Test even row order."""
        assert neighbors_odd_r(2, 2) == [
            Hex(3, 2), Hex(2, 1), Hex(1, 1), Hex(1, 2), Hex(1, 3), Hex(2, 3),
        ]

    def test_odd_row_order(self):
        """Test odd row order."""
        assert neighbors_odd_r(2, 1) == [
            Hex(3, 1), Hex(3, 0), Hex(2, 0), Hex(1, 1), Hex(2, 2), Hex(3, 2),
        ]

    def test_every_neighbor_is_distance_one(self):
        """Test every neighbor is distance one."""
        for q, r in [(0, 0), (3, 3), (4, 7), (5, 2)]:
            for n in neighbors_odd_r(q, r):
                assert hex_distance(q, r, n.q, n.r) == 1


class TestDistance:
    """Test cube conversion and distance."""

    def test_cube_coordinates_sum_to_zero(self):
        """Test cube coordinates sum to zero."""
        for q, r in [(0, 0), (3, 1), (7, 4), (2, 9)]:
            assert sum(offset_to_cube(q, r)) == 0

    def test_distance_symmetric(self):
        """Test distance symmetric."""
        assert hex_distance(1, 1, 6, 4) == hex_distance(6, 4, 1, 1)

    def test_distance_examples(self):
        """Test distance examples."""
        assert hex_distance(0, 0, 0, 0) == 0
        assert hex_distance(0, 0, 5, 0) == 5
        assert hex_distance(5, 5, 5, 7) == 2
        assert hex_distance(0, 0, 0, 4) == 4


class TestWorldMap:
    """Test the tile container."""

    def setup_method(self):
        self.world = world_from_rows([
            "...",
            ".~.",
            "...",
        ])

    def test_lookup(self):
        """Test tile lookup by coordinate."""
        assert self.world.tile_at(1, 1).type == "water"
        assert self.world.tile_at(5, 5) is None

    def test_bounds(self):
        """Test in-bounds checks."""
        assert self.world.in_bounds(2, 2)
        assert not self.world.in_bounds(3, 0)
        assert not self.world.in_bounds(-1, 0)

    def test_corner_neighbors_filtered(self):
        """Test corner neighbors filtered."""
        coords = [(t.q, t.r) for t in self.world.neighbors(0, 0)]
        assert coords == [(1, 0), (0, 1)]

    def test_water_and_land(self):
        """Test water and land classification."""
        assert self.world.is_water(1, 1)
        assert self.world.is_land(0, 0)
        assert not self.world.is_land(9, 9)

    def test_water_types_and_key(self):
        """Test water types and key."""
        assert is_water_type("ocean")
        assert not is_water_type("plains")
        assert key_of(3, 4) == "3,4"
