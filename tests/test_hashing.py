"""Tests for the bit-position schemes."""
from collections import Counter

import pytest

from bf_core.hashing import (
    SCHEMES,
    double_hash_positions,
    get_scheme,
    mix_hash,
    mix_positions,
)


def test_mix_hash_is_deterministic():
    assert mix_hash(b"item42", 3) == mix_hash(b"item42", 3)


def test_mix_hash_is_64_bit():
    for seed in range(10):
        assert 0 <= mix_hash(b"some bytes", seed) < 2 ** 64


def test_mix_hash_empty_input():
    assert mix_hash(b"", 0) == 0
    assert mix_hash(b"", 1) != 0


def test_seed_and_byte_changes_spread():
    base = mix_hash(b"item0", 0)
    # one-unit changes in seed or in the last byte should flip roughly half the bits
    for other in (mix_hash(b"item0", 1), mix_hash(b"item1", 0)):
        assert 10 <= bin(base ^ other).count("1") <= 54


@pytest.mark.parametrize("positions", [mix_positions, double_hash_positions])
def test_positions_count_and_range(positions):
    result = list(positions("hello", 7, 101))
    assert len(result) == 7
    assert all(0 <= p < 101 for p in result)


def test_mix_positions_use_one_seed_per_slot():
    data = "abc".encode("utf-8")
    assert list(mix_positions("abc", 4, 1000)) == [mix_hash(data, i) % 1000 for i in range(4)]


def test_double_hash_is_arithmetic_progression():
    positions = list(double_hash_positions("stride", 6, 97))
    stride = (positions[1] - positions[0]) % 97
    assert stride != 0
    assert all((b - a) % 97 == stride for a, b in zip(positions, positions[1:]))


def test_double_hash_single_bit():
    assert list(double_hash_positions("anything", 3, 1)) == [0, 0, 0]


def test_mix_positions_roughly_uniform():
    buckets = 16
    counts = Counter(
        p for i in range(4000) for p in mix_positions(f"key{i}", 2, buckets)
    )
    expected = 8000 / buckets
    assert set(counts) == set(range(buckets))
    assert all(abs(c - expected) < expected * 0.25 for c in counts.values())


def test_get_scheme():
    assert get_scheme("mix") is mix_positions
    assert get_scheme("double") is double_hash_positions
    assert set(SCHEMES) == {"mix", "double"}
    with pytest.raises(ValueError):
        get_scheme("md5")
