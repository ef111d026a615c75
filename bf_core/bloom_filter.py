"""Bloom filter backed by a packed bitset.

Positions come from :mod:`bf_core.hashing` (a seeded mixing hash by default,
or mmh3/xxHash64 double hashing) and sizing from :mod:`bf_core.planner`.
"""
from __future__ import annotations

import logging
from typing import Iterable

from .hashing import check_seed, get_scheme
from .planner import optimal_parameters

logger = logging.getLogger(__name__)


def _check_positive_int(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise ValueError(f"{name} must be positive, got {value}")


class BloomFilter:
    """Insert-only probabilistic set backed by a bytearray bitset.

    ``might_contain`` may return false positives but never false negatives
    for items passed to ``add`` on the same instance.

    Not safe for concurrent mutation: two threads calling ``add`` may race on
    the same byte. Concurrent ``might_contain`` calls are safe only while no
    ``add`` is in flight; guard the whole filter with a lock otherwise.
    """

    optimal_parameters = staticmethod(optimal_parameters)

    def __init__(self, size: int, num_hashes: int, *, scheme: str = "mix", seed: int = 0) -> None:
        """Initialize an empty Bloom filter.

        Args:
            size: Number of bits in the filter (``m``).
            num_hashes: Number of hash slots per item (``k``).
            scheme: Position scheme, ``"mix"`` or ``"double"``.
            seed: Base seed handed to the position scheme (default 0).

        Raises:
            ValueError: If size or num_hashes is not a positive integer, the
                scheme is unknown, or the seed is out of range for it.
        """
        _check_positive_int("size", size)
        _check_positive_int("num_hashes", num_hashes)
        self._positions = get_scheme(scheme)
        check_seed(scheme, seed)

        self.size = size
        self.num_hashes = num_hashes
        self.scheme = scheme
        self.seed = seed
        self._bit_array = bytearray((size + 7) // 8)
        logger.debug("created BloomFilter m=%d k=%d scheme=%s", size, num_hashes, scheme)

    @classmethod
    def from_capacity(cls, expected_items: int, false_positive_rate: float, **kwargs) -> "BloomFilter":
        """Build a filter sized for ``expected_items`` at ``false_positive_rate``."""
        size, num_hashes = optimal_parameters(expected_items, false_positive_rate)
        return cls(size, num_hashes, **kwargs)

    def add(self, item: str) -> None:
        """Insert ``item`` into the filter."""
        for bit_index in self._positions(item, self.num_hashes, self.size, self.seed):
            self._bit_array[bit_index >> 3] |= 1 << (bit_index & 7)

    def update(self, items: Iterable[str]) -> None:
        """Insert all ``items`` into the filter."""
        for item in items:
            self.add(item)

    def might_contain(self, item: str) -> bool:
        """Return False if ``item`` is definitely absent, True if it may be present."""
        for bit_index in self._positions(item, self.num_hashes, self.size, self.seed):
            if not (self._bit_array[bit_index >> 3] & (1 << (bit_index & 7))):
                return False
        return True

    def __contains__(self, item: str) -> bool:
        return self.might_contain(item)

    def memory_usage_bytes(self) -> int:
        """Bytes needed for the bitset, ``ceil(size / 8)``."""
        return (self.size + 7) // 8

    def bit_array_size(self) -> int:
        """Number of bits in the filter."""
        return self.size

    def count_set_bits(self) -> int:
        """Number of bits currently set."""
        return sum(bin(byte).count("1") for byte in self._bit_array)

    def fill_ratio(self) -> float:
        """Fraction of bits currently set."""
        return self.count_set_bits() / self.size

    @property
    def bit_array(self) -> bytearray:
        """Packed bitset; bit ``i`` lives in byte ``i >> 3``."""
        return self._bit_array

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(size={self.size}, num_hashes={self.num_hashes}, "
            f"scheme={self.scheme!r}, seed={self.seed})"
        )
