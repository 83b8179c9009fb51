"""
Xorshift32 PRNG seeded from an FNV-1a string hash.

Every generator in the world simulation draws from one of these streams so
that a world can be re-derived bit-for-bit from its seed string. The
arithmetic mirrors the 32-bit integer semantics of the browser client the
seeds are shared with, including the signed right shift in the xorshift
step.
"""

from typing import List, Sequence, TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
_FNV_OFFSET = 2166136261
_FNV_PRIME = 16777619
_TWO_POW_32 = 4294967296.0


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & _MASK32


def _int32(n):
    """Reinterpret an unsigned 32-bit value as signed."""
    n &= _MASK32
    return n - 0x100000000 if n & 0x80000000 else n


def _utf16_units(s: str):
    """Yield UTF-16 code units (astral characters become surrogate pairs)."""
    data = s.encode("utf-16-le")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def hash_str32(s: str) -> int:
    """FNV-1a 32-bit hash of a string.

    Args:
        s: Any string, usually ``"<seed>|<purpose>"``

    Returns:
        Unsigned 32-bit hash
    """
    h = _FNV_OFFSET
    for unit in _utf16_units(str(s)):
        h ^= unit
        h = (h * _FNV_PRIME) & _MASK32
    return h


class XorShift32:
    """
    Xorshift32 generator producing floats in [0, 1).

    Besides ``random()`` it offers the small helper set the generators
    need, and a ``call_count`` for tracing.
    """

    def __init__(self, seed: int):
        """Initialize with an unsigned 32-bit integer seed (0 maps to 1)."""
        self.call_count = 0
        self.state = _uint32(seed) or 1

    def next_uint32(self) -> int:
        """Advance the state and return it."""
        self.call_count += 1
        x = self.state
        x ^= (x << 13) & _MASK32
        # arithmetic shift on the signed view
        x ^= (_int32(x) >> 17) & _MASK32
        x ^= (x << 5) & _MASK32
        self.state = x & _MASK32
        return self.state

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        return self.next_uint32() / _TWO_POW_32

    def randint(self, low: int, high: int) -> int:
        """Random integer in the inclusive range [low, high]."""
        return low + int(self.random() * (high - low + 1))

    def chance(self, probability: float) -> bool:
        """True with the given probability."""
        return self.random() < probability

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.random() * len(seq))]

    def sample(self, seq: Sequence[T], k: int) -> List[T]:
        """Pick up to ``k`` distinct elements, preserving draw order."""
        pool = list(seq)
        picked = []
        while pool and len(picked) < k:
            picked.append(pool.pop(int(self.random() * len(pool))))
        return picked

    def shuffle(self, items: List[T]) -> List[T]:
        """Fisher-Yates shuffle in place; returns the list for chaining."""
        for i in range(len(items) - 1, 0, -1):
            j = int(self.random() * (i + 1))
            items[i], items[j] = items[j], items[i]
        return items

    def weighted_index(self, weights: Sequence[float]) -> int:
        """Index drawn proportionally to ``weights`` (all non-negative)."""
        total = float(sum(weights))
        if total <= 0:
            raise IndexError("Cannot choose from empty weights")
        roll = self.random() * total
        for i, weight in enumerate(weights):
            roll -= weight
            if roll < 0:
                return i
        return len(weights) - 1
