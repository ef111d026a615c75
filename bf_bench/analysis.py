"""Bloom filter vs. exact set analysis.

For every (item count, target false-positive rate) pair the planner sizes a
filter, ``item0 .. item{n-1}`` are inserted into both the filter and a plain
``set``, and ``NUM_PROBES`` keys that were never inserted are probed to
measure the empirical false-positive rate. Results are printed as a table
comparing memory footprints.

Run with::

    python -m bf_bench.analysis
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from bf_core.bloom_filter import BloomFilter
from bf_core.hashing import SCHEMES
from bf_core.planner import expected_false_positive_rate, optimal_parameters

logger = logging.getLogger(__name__)

DEFAULT_ITEMS = (1_000, 10_000, 100_000)
DEFAULT_FP_RATES = (0.01, 0.05, 0.1)
NUM_PROBES = 10_000
ITEM_PREFIX = "item"
RULE_WIDTH = 85


@dataclass
class AnalysisResult:
    """Measurements for a single (num_items, target_fp_rate) configuration."""

    num_items: int
    target_fp_rate: float
    size: int
    num_hashes: int
    bloom_memory_kb: float
    hashset_memory_kb: float
    savings_percent: float
    bits_per_item: float
    actual_fp_rate: float
    expected_fp_rate: float


def make_keys(start: int, stop: int) -> List[str]:
    """Synthetic keys ``item{start} .. item{stop-1}``."""
    return [f"{ITEM_PREFIX}{i}" for i in range(start, stop)]


def estimate_set_memory(items: Iterable[str]) -> int:
    """Approximate bytes held by a ``set`` of ``items``, strings included."""
    exact = set(items)
    return sys.getsizeof(exact) + sum(sys.getsizeof(s) for s in exact)


def analyze_configuration(
    num_items: int,
    target_fp_rate: float,
    *,
    num_probes: int = NUM_PROBES,
    scheme: str = "mix",
) -> AnalysisResult:
    """Size, fill and probe one filter against an exact set.

    Raises:
        ValueError: If the planner rejects ``num_items``/``target_fp_rate``
            or ``num_probes`` is not positive.
        RuntimeError: If an inserted key is reported absent.
    """
    if num_probes < 1:
        raise ValueError("num_probes must be positive")

    size, num_hashes = optimal_parameters(num_items, target_fp_rate)
    bloom = BloomFilter(size, num_hashes, scheme=scheme)

    inserted = make_keys(0, num_items)
    bloom.update(inserted)

    missing = [key for key in inserted if key not in bloom]
    if missing:
        raise RuntimeError(f"{len(missing)} inserted keys reported absent, e.g. {missing[:5]}")

    # probes start after the inserted range so none of them were added
    false_positives = sum(1 for key in make_keys(num_items, num_items + num_probes) if key in bloom)

    bloom_kb = bloom.memory_usage_bytes() / 1024.0
    set_kb = estimate_set_memory(inserted) / 1024.0
    result = AnalysisResult(
        num_items=num_items,
        target_fp_rate=target_fp_rate,
        size=size,
        num_hashes=num_hashes,
        bloom_memory_kb=bloom_kb,
        hashset_memory_kb=set_kb,
        savings_percent=(1.0 - bloom_kb / set_kb) * 100,
        bits_per_item=bloom.bit_array_size() / num_items,
        actual_fp_rate=false_positives / num_probes,
        expected_fp_rate=expected_false_positive_rate(size, num_hashes, num_items),
    )
    logger.info(
        "n=%d target=%.4f actual=%.4f fill=%.3f",
        num_items, target_fp_rate, result.actual_fp_rate, bloom.fill_ratio(),
    )
    return result


def run_analysis(
    items_list: Sequence[int] = DEFAULT_ITEMS,
    fp_rates: Sequence[float] = DEFAULT_FP_RATES,
    *,
    num_probes: int = NUM_PROBES,
    scheme: str = "mix",
) -> List[AnalysisResult]:
    """Analyze every combination of ``items_list`` x ``fp_rates``."""
    return [
        analyze_configuration(num_items, rate, num_probes=num_probes, scheme=scheme)
        for num_items in items_list
        for rate in fp_rates
    ]


def print_analysis(results: Sequence[AnalysisResult], out=None) -> None:
    """Print ``results`` as a table, one rule per item-count group."""
    out = out if out is not None else sys.stdout

    print("\nBloom Filter Analysis:", file=out)
    print("=" * RULE_WIDTH, file=out)
    print(
        f"{'Items':>10}{'Target FP%':>12}{'Actual FP%':>12}{'Bloom (KB)':>15}"
        f"{'Set (KB)':>15}{'Savings%':>12}{'Bits/Item':>12}",
        file=out,
    )
    print("-" * RULE_WIDTH, file=out)

    for i, r in enumerate(results):
        print(
            f"{r.num_items:>10}{r.target_fp_rate * 100:>12.2f}{r.actual_fp_rate * 100:>12.2f}"
            f"{r.bloom_memory_kb:>15.2f}{r.hashset_memory_kb:>15.2f}"
            f"{r.savings_percent:>12.2f}{r.bits_per_item:>12.2f}",
            file=out,
        )
        last_in_group = i + 1 == len(results) or results[i + 1].num_items != r.num_items
        if last_in_group:
            print("-" * RULE_WIDTH, file=out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bloom-analysis",
        description="Compare planned Bloom filters against an exact set.",
    )
    parser.add_argument("--items", type=int, nargs="+", default=list(DEFAULT_ITEMS),
                        help="expected element counts to analyze")
    parser.add_argument("--rates", type=float, nargs="+", default=list(DEFAULT_FP_RATES),
                        help="target false-positive rates, each in (0, 1)")
    parser.add_argument("--probes", type=int, default=NUM_PROBES,
                        help="number of never-inserted keys to probe")
    parser.add_argument("--scheme", choices=sorted(SCHEMES), default="mix",
                        help="bit-position scheme")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        results = run_analysis(args.items, args.rates, num_probes=args.probes, scheme=args.scheme)
    except ValueError as exc:
        parser.error(str(exc))

    print_analysis(results)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
