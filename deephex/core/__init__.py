"""
Core world generation and simulation functionality.
"""

from .hex_grid import Hex, WorldMap, hex_distance, neighbors_odd_r
from .models import WorldMeta, WorldState
from .pathfinding import Domain, find_path
from .renderer import RecordingRenderer, Renderer
from .xorshift_prng import XorShift32, hash_str32

__all__ = ['Hex', 'WorldMap', 'hex_distance', 'neighbors_odd_r', 'WorldMeta', 'WorldState',
           'Domain', 'find_path', 'RecordingRenderer', 'Renderer', 'XorShift32', 'hash_str32']
