"""Tests for the capacity planner."""
import math

import pytest

from bf_core.bloom_filter import BloomFilter
from bf_core.planner import SizingResult, expected_false_positive_rate, optimal_parameters


def test_known_parameters():
    assert optimal_parameters(1000, 0.01) == SizingResult(size=9586, num_hashes=7)


def test_result_unpacks_as_pair():
    m, k = optimal_parameters(1000, 0.05)
    assert (m, k) == (6236, 5)


def test_hash_count_uses_rounded_size():
    for n, p in [(1, 0.5), (3, 0.2), (7, 0.01), (10, 0.1), (100_000, 0.001)]:
        m, k = optimal_parameters(n, p)
        assert m == math.ceil(-(n * math.log(p)) / (math.log(2) ** 2))
        assert k == math.ceil((m / n) * math.log(2))
        assert m >= 1 and k >= 1


def test_size_grows_with_items():
    sizes = [optimal_parameters(n, 0.01).size for n in range(1, 2000, 37)]
    assert sizes == sorted(sizes)


def test_size_grows_as_rate_tightens():
    rates = [0.5, 0.2, 0.1, 0.05, 0.01, 0.001, 1e-6]
    sizes = [optimal_parameters(500, p).size for p in rates]
    assert sizes == sorted(sizes)


@pytest.mark.parametrize(
    "n, p",
    [
        (0, 0.01),
        (-5, 0.01),
        (100, 0.0),
        (100, 1.0),
        (100, -0.1),
        (100, 1.5),
        (100, float("nan")),
        (10.5, 0.01),
        (True, 0.01),
        (100, "0.01"),
    ],
)
def test_rejects_invalid_input(n, p):
    with pytest.raises(ValueError):
        optimal_parameters(n, p)


@pytest.mark.parametrize("n, p", [(10 ** 400, 0.01), (10 ** 308, 1e-300)])
def test_rejects_sizes_beyond_float_range(n, p):
    with pytest.raises(ValueError, match="too large"):
        optimal_parameters(n, p)


def test_static_alias_on_filter():
    assert BloomFilter.optimal_parameters(1000, 0.01) == optimal_parameters(1000, 0.01)


def test_expected_rate_near_target():
    m, k = optimal_parameters(1000, 0.01)
    assert expected_false_positive_rate(m, k, 1000) == pytest.approx(0.01, rel=0.1)
    assert expected_false_positive_rate(m, k, 0) == 0.0


def test_expected_rate_rejects_bad_input():
    with pytest.raises(ValueError):
        expected_false_positive_rate(0, 3, 10)
    with pytest.raises(ValueError):
        expected_false_positive_rate(10, 0, 10)
    with pytest.raises(ValueError):
        expected_false_positive_rate(10, 3, -1)
