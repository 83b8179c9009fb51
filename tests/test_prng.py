"""
Tests for the xorshift PRNG and seeded stream factory.

Tests cover:
- FNV-1a string hash golden values
- Xorshift32 golden outputs and 32-bit arithmetic
- Determinism across instances
- Helper methods (randint, choice, sample, shuffle, weighted_index)
"""

import pytest

from deephex.core.xorshift_prng import XorShift32, hash_str32
from deephex.utils.random import FISH_STREAM, LORE_STREAM, raw_seed_rng, seeded_rng


class TestHashStr32:
    """Test the FNV-1a string hash."""

    def test_golden_values(self):
        """Test golden values."""
        assert hash_str32("a") == 0xE40C292C
        assert hash_str32("foobar") == 0xBF9CF968

    def test_empty_string_is_offset_basis(self):
        """Test empty string is offset basis."""
        assert hash_str32("") == 2166136261

    def test_result_is_unsigned_32_bit(self):
        """Test result is unsigned 32 bit."""
        for s in ["", "x", "123456|worldLoreV8", "ünïcødé", "🌋"]:
            h = hash_str32(s)
            assert 0 <= h <= 0xFFFFFFFF


class TestXorShift32:
    """Test the generator core."""

    def test_golden_sequence_from_seed_one(self):
        """Test golden sequence from seed one."""
        prng = XorShift32(1)
        assert prng.next_uint32() == 270369
        assert prng.next_uint32() == 67601921

    def test_zero_seed_maps_to_one(self):
        """Test zero seed maps to one."""
        assert XorShift32(0).next_uint32() == XorShift32(1).next_uint32()

    def test_random_in_unit_interval(self):
        """Test random in unit interval."""
        prng = XorShift32(hash_str32("range"))
        for _ in range(1000):
            v = prng.random()
            assert 0.0 <= v < 1.0

    def test_same_seed_same_sequence(self):
        """Test same seed same sequence."""
        a = XorShift32(12345)
        b = XorShift32(12345)
        assert [a.random() for _ in range(50)] == [b.random() for _ in range(50)]

    def test_call_count_tracks_draws(self):
        """Test call count tracks draws."""
        prng = XorShift32(7)
        for _ in range(5):
            prng.random()
        assert prng.call_count == 5


class TestHelpers:
    """Test the convenience helpers."""

    def setup_method(self):
        self.prng = XorShift32(hash_str32("helpers"))

    def test_randint_inclusive_bounds(self):
        """Test randint inclusive bounds."""
        values = {self.prng.randint(1, 4) for _ in range(500)}
        assert values == {1, 2, 3, 4}

    def test_choice_empty_raises(self):
        """Test choice empty raises."""
        with pytest.raises(IndexError):
            self.prng.choice([])

    def test_choice_returns_member(self):
        """Test choice returns member."""
        items = ["a", "b", "c"]
        for _ in range(20):
            assert self.prng.choice(items) in items

    def test_sample_distinct(self):
        """Test sample distinct."""
        picked = self.prng.sample(range(10), 4)
        assert len(picked) == 4
        assert len(set(picked)) == 4

    def test_sample_caps_at_population(self):
        """Test sample caps at population."""
        assert sorted(self.prng.sample([1, 2], 5)) == [1, 2]

    def test_shuffle_is_permutation(self):
        """Test shuffle is permutation."""
        items = list(range(20))
        shuffled = self.prng.shuffle(list(items))
        assert sorted(shuffled) == items

    def test_weighted_index_skips_zero_weight(self):
        """Test weighted index skips zero weight."""
        for _ in range(100):
            assert self.prng.weighted_index([0, 1, 0]) == 1

    def test_weighted_index_empty_raises(self):
        """Test weighted index empty raises."""
        with pytest.raises(IndexError):
            self.prng.weighted_index([0, 0])


class TestSeededStreams:
    """Test the seed|purpose stream factory."""

    def test_same_seed_and_purpose_match(self):
        """Test same seed and purpose match."""
        a = seeded_rng("123456", LORE_STREAM)
        b = seeded_rng("123456", LORE_STREAM)
        assert [a.random() for _ in range(10)] == [b.random() for _ in range(10)]

    def test_purposes_are_independent(self):
        """Test purposes are independent."""
        a = seeded_rng("123456", LORE_STREAM)
        b = seeded_rng("123456", FISH_STREAM)
        assert [a.random() for _ in range(5)] != [b.random() for _ in range(5)]

    def test_stream_seed_is_hash_of_joined_string(self):
        """Test stream seed is hash of joined string."""
        assert seeded_rng("s", "p").state == hash_str32("s|p")
        assert raw_seed_rng("s").state == hash_str32("s")
