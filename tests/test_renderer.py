"""
Tests for the renderer collaborator.

Tests cover:
- Pixel projection and its inverse
- No-op defaults
- Recording renderer bookkeeping
"""

from deephex.core.hex_grid import Hex
from deephex.core.models import Tile
from deephex.core.renderer import RecordingRenderer, Renderer, round_cube


class TestProjection:
    """Test the odd-r pointy-top projection."""

    def test_origin(self):
        """Test origin."""
        assert Renderer(hex_size=10).coordinate_to_world(0, 0) == (0.0, 0.0)

    def test_odd_rows_shift_right(self):
        """Test odd rows shift right."""
        r = Renderer(hex_size=10)
        x_even, _ = r.coordinate_to_world(2, 0)
        x_odd, _ = r.coordinate_to_world(2, 1)
        assert x_odd > x_even

    def test_inverse_recovers_hex(self):
        """Test inverse recovers hex."""
        r = Renderer(hex_size=16, offset_x=5, offset_y=-3)
        for q, r_ in [(0, 0), (3, 1), (4, 4), (7, 2)]:
            x, y = r.coordinate_to_world(q, r_)
            assert r.world_to_coordinate(x, y) == Hex(q, r_)

    def test_round_cube_keeps_zero_sum(self):
        """Test round cube keeps zero sum."""
        assert sum(round_cube(0.4, -0.9, 0.5)) == 0


class TestHooks:
    """Test hook defaults and recording."""

    def test_defaults_are_noops(self):
        """Test defaults are noops."""
        r = Renderer()
        r.draw_tile(Tile(q=0, r=0))
        r.redraw_world()
        r.draw_landmark_outline([], 0x43A047)
        r.emit_history_entry(object())
        r.notify_resources_changed({"food": 1})
        assert r.get_selected_unit() is None

    def test_recording(self):
        """Test recording."""
        r = RecordingRenderer()
        r.draw_tile(Tile(q=1, r=2))
        r.redraw_world()
        r.notify_resources_changed({"food": 3})
        assert r.drawn_tiles == [Hex(1, 2)]
        assert r.redraws == 1
        assert r.resource_updates == [{"food": 3}]

    def test_recording_outline(self):
        """Test landmark outlines are recorded with their color."""
        r = RecordingRenderer()
        r.draw_landmark_outline([[(0.0, 0.0)] * 6, [(1.0, 1.0)] * 6], 0xD32F2F)
        assert r.outlines == [(2, 0xD32F2F)]
