"""
Random number generation utilities.

Every subsystem gets its own xorshift stream derived from the world seed
and a purpose tag, so terrain, the water border, fish spawning and lore can
evolve independently without shifting each other's sequences. Python's
random and NumPy's random should not be used in simulation code.
"""

from ..core.xorshift_prng import XorShift32, hash_str32

# Purpose tags
TERRAIN_STREAM = "terrain"
BORDER_STREAM = "border"
FISH_STREAM = "fish"
LORE_STREAM = "worldLoreV8"


def seeded_rng(seed: str, purpose: str) -> XorShift32:
    """
    Create the xorshift stream for a seed and purpose.

    Args:
        seed: World seed string
        purpose: Generator tag (e.g. ``"worldLoreV8"``)

    Returns:
        XorShift32 seeded with ``hash("<seed>|<purpose>")``
    """
    return XorShift32(hash_str32(f"{seed}|{purpose}"))


def raw_seed_rng(seed: str) -> XorShift32:
    """Stream seeded from the bare seed string (used by the world summary)."""
    return XorShift32(hash_str32(str(seed)))
