"""Closed-form Bloom filter sizing.

Given ``n`` expected distinct elements and a target false-positive
probability ``p``::

    m = ceil(-(n * ln p) / (ln 2)^2)
    k = ceil((m / n) * ln 2)

``k`` is derived from the already-rounded ``m``. Both values round up, so the
realized false-positive rate never exceeds the target because of truncation.
"""
from __future__ import annotations

import logging
import math
from numbers import Real
from typing import NamedTuple

logger = logging.getLogger(__name__)

_LN2 = math.log(2)


class SizingResult(NamedTuple):
    """Optimal bit-array length and hash count for a workload."""

    size: int
    num_hashes: int


def _check_expected_items(n: int) -> None:
    if isinstance(n, bool) or not isinstance(n, int):
        raise ValueError(f"expected_items must be an integer, got {n!r}")
    if n < 1:
        raise ValueError(f"expected_items must be positive, got {n}")


def _check_false_positive_rate(p: float) -> None:
    if isinstance(p, bool) or not isinstance(p, Real):
        raise ValueError(f"false_positive_rate must be a real number, got {p!r}")
    if not 0.0 < p < 1.0:
        # also rejects NaN
        raise ValueError(f"false_positive_rate must be in (0, 1), got {p}")


def optimal_parameters(expected_items: int, false_positive_rate: float) -> SizingResult:
    """Return the ``(size, num_hashes)`` pair minimizing the false-positive rate.

    Args:
        expected_items: Number of distinct elements the filter should hold.
        false_positive_rate: Target false-positive probability, ``0 < p < 1``.

    Raises:
        ValueError: If ``expected_items < 1`` or ``false_positive_rate`` is
            outside the open interval (0, 1), or the resulting
            bit count is not finite.
    """
    _check_expected_items(expected_items)
    _check_false_positive_rate(false_positive_rate)

    try:
        ideal_size = -(expected_items * math.log(false_positive_rate)) / (_LN2 * _LN2)
    except OverflowError:
        ideal_size = math.inf
    if not math.isfinite(ideal_size):
        raise ValueError(
            f"expected_items is too large to size at false_positive_rate={false_positive_rate}"
        )

    size = math.ceil(ideal_size)
    num_hashes = math.ceil((size / expected_items) * _LN2)

    logger.debug(
        "planned n=%d p=%g -> m=%d bits, k=%d hashes",
        expected_items, false_positive_rate, size, num_hashes,
    )
    return SizingResult(size, num_hashes)


def expected_false_positive_rate(size: int, num_hashes: int, num_items: int) -> float:
    """Theoretical false-positive probability ``(1 - e^(-k n / m))^k``."""
    if size < 1:
        raise ValueError("size must be positive")
    if num_hashes < 1:
        raise ValueError("num_hashes must be positive")
    if num_items < 0:
        raise ValueError("num_items must be non-negative")
    return (1.0 - math.exp(-num_hashes * num_items / size)) ** num_hashes
