"""
Shared fixtures: small hand-drawn worlds.

Rows are strings, one character per tile:
    ~  water
    .  plains
    ^  mountain
    f  forest
"""

from typing import List, Optional

import pytest

from deephex.core.hex_grid import WorldMap
from deephex.core.models import MobileBase, Tile, WorldState
from deephex.core.renderer import RecordingRenderer

TILE_CHARS = {"~": "water", ".": "plains", "^": "mountain", "f": "forest"}


def world_from_rows(rows: List[str]) -> WorldMap:
    tiles = []
    for r, row in enumerate(rows):
        for q, ch in enumerate(row):
            kind = TILE_CHARS[ch]
            tiles.append(
                Tile(q=q, r=r, type=kind, elevation=3 if kind == "mountain" else 1,
                     has_forest=kind == "forest")
            )
    return WorldMap(tiles, len(rows[0]), len(rows))


def state_from_rows(rows: List[str], base: Optional[tuple] = None, seed: str = "test") -> WorldState:
    state = WorldState(seed=seed, world_map=world_from_rows(rows))
    if base is not None:
        state.mobile_base = MobileBase(q=base[0], r=base[1])
    return state


# Land in the top half, water from row 6 down
HARBOR_ROWS = [
    "..........",
    "..........",
    "..........",
    "..........",
    "..........",
    "..........",
    "~~~~~~~~~~",
    "~~~~~~~~~~",
    "~~~~~~~~~~",
    "~~~~~~~~~~",
]

# Water channel across row 2
CHANNEL_ROWS = [
    ".....",
    ".....",
    "~~~~~",
    ".....",
    ".....",
]


@pytest.fixture
def harbor_state():
    return state_from_rows(HARBOR_ROWS, base=(2, 2))


@pytest.fixture
def channel_map():
    return world_from_rows(CHANNEL_ROWS)


@pytest.fixture
def renderer():
    return RecordingRenderer()
