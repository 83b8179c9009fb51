"""
Presentation collaborator interface.

The simulation never draws anything itself; it calls these hooks after it
mutates state. ``Renderer`` is the headless default where every hook does
nothing and coordinates use a flat pointy-top odd-r projection.
"""

import math
from typing import Any, Dict, List, Optional, Tuple

from .hex_grid import Hex

SQRT3 = math.sqrt(3)


def round_cube(x: float, y: float, z: float) -> Tuple[int, int, int]:
    """Round fractional cube coordinates to the containing hex."""
    rx, ry, rz = round(x), round(y), round(z)
    dx, dy, dz = abs(rx - x), abs(ry - y), abs(rz - z)
    if dx > dy and dx > dz:
        rx = -ry - rz
    elif dy > dz:
        ry = -rx - rz
    else:
        rz = -rx - ry
    return rx, ry, rz


class Renderer:
    """Host hooks with no-op defaults."""

    def __init__(self, hex_size: float = 24.0, offset_x: float = 0.0, offset_y: float = 0.0):
        self.hex_size = hex_size
        self.offset_x = offset_x
        self.offset_y = offset_y

    def coordinate_to_world(self, q: int, r: int) -> Tuple[float, float]:
        """Hex center in world pixels."""
        x = self.hex_size * SQRT3 * (q + 0.5 * (r & 1))
        y = self.hex_size * 1.5 * r
        return x + self.offset_x, y + self.offset_y

    def world_to_coordinate(self, x: float, y: float) -> Hex:
        """Hex containing a world point."""
        px = (x - self.offset_x) / self.hex_size
        py = (y - self.offset_y) / self.hex_size
        # fractional axial, then cube rounding, then back to odd-r offset
        aq = (SQRT3 / 3 * px) - (py / 3)
        ar = 2 / 3 * py
        cx, _, cz = round_cube(aq, -aq - ar, ar)
        return Hex(cx + (cz - (cz & 1)) // 2, cz)

    def draw_tile(self, tile) -> None:
        pass

    def redraw_world(self) -> None:
        pass

    def draw_landmark_outline(self, rings: List[List[Tuple[float, float]]], color: int) -> None:
        pass

    def emit_history_entry(self, entry) -> None:
        pass

    def notify_resources_changed(self, resources: Dict[str, int]) -> None:
        pass

    def get_selected_unit(self) -> Optional[Any]:
        return None


class RecordingRenderer(Renderer):
    """Renderer that keeps every call, for headless hosts and tests."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.history: List[Any] = []
        self.drawn_tiles: List[Hex] = []
        self.redraws = 0
        self.outlines: List[Tuple[int, int]] = []
        self.resource_updates: List[Dict[str, int]] = []
        self.selected_unit: Optional[Any] = None

    def draw_tile(self, tile) -> None:
        self.drawn_tiles.append(Hex(tile.q, tile.r))

    def redraw_world(self) -> None:
        self.redraws += 1

    def draw_landmark_outline(self, rings: List[List[Tuple[float, float]]], color: int) -> None:
        self.outlines.append((len(rings), color))

    def emit_history_entry(self, entry) -> None:
        self.history.append(entry)

    def notify_resources_changed(self, resources: Dict[str, int]) -> None:
        self.resource_updates.append(dict(resources))

    def get_selected_unit(self) -> Optional[Any]:
        return self.selected_unit
