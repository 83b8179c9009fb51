"""
Odd-r offset hex grid helpers.

Tiles are addressed by ``(q, r)`` where ``q`` is the column and ``r`` the
row; odd rows are shoved right by half a hex. Neighbor order is fixed
(E, NE, NW, W, SW, SE) so breadth-first searches break ties reproducibly.
"""

from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple

WATER_TYPES = frozenset({"water", "ocean", "sea"})

# (dq, dr) per row parity, in E, NE, NW, W, SW, SE order
EVEN_ROW_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (1, 0), (0, -1), (-1, -1), (-1, 0), (-1, 1), (0, 1),
)
ODD_ROW_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (1, 0), (1, -1), (0, -1), (-1, 0), (0, 1), (1, 1),
)


class Hex(NamedTuple):
    """Offset coordinate of a tile."""

    q: int
    r: int


def key_of(q: int, r: int) -> str:
    """String key ``"q,r"`` used in logs and API payloads."""
    return f"{q},{r}"


def neighbor_offsets(r: int) -> Tuple[Tuple[int, int], ...]:
    """Direction offsets for a row."""
    return EVEN_ROW_OFFSETS if r % 2 == 0 else ODD_ROW_OFFSETS


def neighbors_odd_r(q: int, r: int) -> List[Hex]:
    """All six neighbor coordinates (unbounded)."""
    return [Hex(q + dq, r + dr) for dq, dr in neighbor_offsets(r)]


def in_bounds(q: int, r: int, width: int, height: int) -> bool:
    return 0 <= q < width and 0 <= r < height


def offset_to_cube(q: int, r: int) -> Tuple[int, int, int]:
    """Convert odd-r offset to cube coordinates."""
    x = q - (r - (r & 1)) // 2
    z = r
    return x, -x - z, z


def hex_distance(aq: int, ar: int, bq: int, br: int) -> int:
    """Number of steps between two hexes on the grid."""
    ax, ay, az = offset_to_cube(aq, ar)
    bx, by, bz = offset_to_cube(bq, br)
    return max(abs(ax - bx), abs(ay - by), abs(az - bz))


def is_water_type(tile_type: Optional[str]) -> bool:
    return tile_type in WATER_TYPES


class WorldMap:
    """
    Ordered tile collection with ``(q, r)`` lookup.

    Tiles are mutated in place by geography, lore and building systems; the
    map itself never changes shape after creation.
    """

    def __init__(self, tiles: Iterable, width: int, height: int):
        self.tiles = list(tiles)
        self.width = width
        self.height = height
        self._by_hex: Dict[Tuple[int, int], object] = {
            (t.q, t.r): t for t in self.tiles
        }

    def __iter__(self) -> Iterator:
        return iter(self.tiles)

    def __len__(self) -> int:
        return len(self.tiles)

    def tile_at(self, q: int, r: int):
        """Tile at ``(q, r)`` or None when absent."""
        return self._by_hex.get((q, r))

    def in_bounds(self, q: int, r: int) -> bool:
        return in_bounds(q, r, self.width, self.height)

    def neighbors(self, q: int, r: int) -> List:
        """Existing in-bounds neighbor tiles, in direction order."""
        out = []
        for n in neighbors_odd_r(q, r):
            if not self.in_bounds(n.q, n.r):
                continue
            tile = self._by_hex.get(n)
            if tile is not None:
                out.append(tile)
        return out

    def is_water(self, q: int, r: int) -> bool:
        tile = self.tile_at(q, r)
        return tile is not None and is_water_type(tile.type)

    def is_land(self, q: int, r: int) -> bool:
        tile = self.tile_at(q, r)
        return tile is not None and not is_water_type(tile.type)
