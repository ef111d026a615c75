"""Bit-position schemes for the Bloom filter.

Two ways of deriving the ``k`` positions of an item are provided:

* **mix** (default): a single seeded byte-mixing function is evaluated once
  per hash slot with ``seed = 0, 1, ..., k-1``. Every byte is folded into a
  64-bit accumulator (xor, multiply by an odd constant, xor-shift) and the
  result is finished with the MurmurHash3 ``fmix64`` avalanche so that a
  one-unit change in the seed spreads over all 64 bits.
* **double**: Kirsch-Mitzenmacher double hashing, ``h1 + i * h2``, with
  MurmurHash3 (mmh3) and xxHash64 as the two independent hash families.

Both schemes encode the item as UTF-8 and reduce modulo ``size``.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterator, Optional

import mmh3
import xxhash


_MASK64 = (1 << 64) - 1
_MIX_MULTIPLIER = 0x5BD1E995
_MIX_SHIFT = 15
_FMIX_C1 = 0xFF51AFD7ED558CCD
_FMIX_C2 = 0xC4CEB9FE1A85EC53


def _fmix64(value: int) -> int:
    value ^= value >> 33
    value = (value * _FMIX_C1) & _MASK64
    value ^= value >> 33
    value = (value * _FMIX_C2) & _MASK64
    value ^= value >> 33
    return value


def mix_hash(data: bytes, seed: int) -> int:
    """Return a 64-bit hash of ``data`` under ``seed``."""
    acc = seed & _MASK64
    for byte in data:
        acc ^= byte
        acc = (acc * _MIX_MULTIPLIER) & _MASK64
        acc ^= acc >> _MIX_SHIFT
    return _fmix64(acc)


def mix_positions(item: str, num_hashes: int, size: int, seed: int = 0) -> Iterator[int]:
    """Yield ``num_hashes`` bit positions, one seeded mix per slot.

    ``seed`` offsets the per-slot seeds so that two filters can use disjoint
    hash families.
    """
    data = item.encode("utf-8")
    for i in range(num_hashes):
        yield mix_hash(data, seed + i) % size


def double_hash_positions(item: str, num_hashes: int, size: int, seed: int = 0) -> Iterator[int]:
    """Walk an arithmetic progression modulo ``size``.

    MurmurHash3 picks the start and xxHash64 the stride. A zero stride is
    bumped to 1 so the slots do not all land on the start bit.
    """
    data = item.encode("utf-8")
    position = mmh3.hash(data, seed, signed=False) % size
    stride = xxhash.xxh64(data, seed=seed).intdigest() % size or 1
    for _ in range(num_hashes):
        yield position
        position = (position + stride) % size


PositionScheme = Callable[[str, int, int, int], Iterator[int]]

SCHEMES: Dict[str, PositionScheme] = {
    "mix": mix_positions,
    "double": double_hash_positions,
}

# exclusive upper bound on the seed each scheme can take; mmh3 seeds are uint32
SEED_LIMITS: Dict[str, Optional[int]] = {
    "mix": None,
    "double": 1 << 32,
}


def get_scheme(name: str) -> PositionScheme:
    """Look up a position scheme by name."""
    try:
        return SCHEMES[name]
    except (KeyError, TypeError):
        known = ", ".join(sorted(SCHEMES))
        raise ValueError(f"unknown hash scheme {name!r} (expected one of: {known})") from None


def check_seed(name: str, seed: int) -> None:
    """Raise ValueError if ``seed`` is unusable with scheme ``name``."""
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise ValueError(f"seed must be an integer, got {seed!r}")
    limit = SEED_LIMITS[name]
    if limit is not None and not 0 <= seed < limit:
        raise ValueError(f"seed for the {name!r} scheme must be in [0, {limit}), got {seed}")
