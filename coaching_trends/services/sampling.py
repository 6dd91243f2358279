"""
Weekly-stratified sampling for the sampled analysis tier.

Reduces an over-sized batch to a representative subset while keeping the
time axis honest: each week contributes in proportion to its share of the
batch, and picks inside a week are spread evenly across its dates. Taking a
prefix or a random subset would bias the improving/declining judgment toward
whichever part of the range happened to be over-represented.

Algorithm:
    1. Bucket records by week (Sunday start), weeks in chronological order.
    2. Per week, quota = round(week_size / total * target), clamped to
       [1, week_size]. Keep evenly spaced indices floor(i * week_size / quota).
    3. If rounding pushed the total over target, keep the earliest 30% and the
       latest 40% of target verbatim, fill the remaining slots with evenly
       spaced picks from the middle, and truncate to exactly target.

Usage:
    from coaching_trends.services.sampling import stratified_sample

    result = stratified_sample(records, target_size=50)
    result.sampled         # <= 50 records, date ordered per week
    result.original_count  # len(records)
"""

import math
from dataclasses import dataclass
from typing import Generic, List, Sequence

from coaching_trends.services.tiering import (
    DIRECT_ANALYSIS_MAX,
    RecordT,
    group_by_week,
)


# =============================================================================
# Constants
# =============================================================================

# Share of target kept verbatim from each end when trimming overshoot
KEEP_EARLIEST_FRACTION: float = 0.3
KEEP_LATEST_FRACTION: float = 0.4


@dataclass
class SampleResult(Generic[RecordT]):
    """Selected records plus the size of the batch they were drawn from."""
    sampled: List[RecordT]
    original_count: int


def _round_half_up(value: float) -> int:
    # round() is banker's rounding; quotas round .5 up
    return int(math.floor(value + 0.5))


def _evenly_spaced(items: Sequence[RecordT], count: int) -> List[RecordT]:
    if count >= len(items):
        return list(items)
    step = len(items) / count
    return [items[int(math.floor(i * step))] for i in range(count)]


def _trim_overshoot(records: List[RecordT], target_size: int) -> List[RecordT]:
    ordered = sorted(records, key=lambda r: r.date)
    keep_start = int(math.floor(target_size * KEEP_EARLIEST_FRACTION))
    keep_end = int(math.floor(target_size * KEEP_LATEST_FRACTION))

    head = ordered[:keep_start]
    tail = ordered[len(ordered) - keep_end:] if keep_end else []
    middle = ordered[keep_start:len(ordered) - keep_end]

    remaining = target_size - len(head) - len(tail)
    picks: List[RecordT] = []
    if remaining > 0 and middle:
        step = len(middle) / remaining
        i = 0
        while i < remaining and i * step < len(middle):
            picks.append(middle[int(math.floor(i * step))])
            i += 1

    return (head + picks + tail)[:target_size]


def stratified_sample(
    records: Sequence[RecordT],
    target_size: int = DIRECT_ANALYSIS_MAX,
) -> SampleResult[RecordT]:
    """
    Sample records proportionally by week.

    Safe to call unconditionally: a batch already within target comes back
    unchanged.

    Args:
        records: Records exposing a ``date`` attribute.
        target_size: Maximum number of records to keep. Must be >= 1.

    Returns:
        SampleResult with the selected records and the input length.

    Raises:
        ValueError: If target_size is less than 1.

    Edge Cases:
        - len(records) <= target_size: identity, same order
        - Empty input: empty sample, original_count 0
        - Many sparse weeks: every week keeps at least one record, so the
          concatenation can exceed target and is trimmed from the middle
    """
    if target_size < 1:
        raise ValueError(f"target_size must be at least 1, got {target_size}")

    total = len(records)
    if total <= target_size:
        return SampleResult(sampled=list(records), original_count=total)

    sampled: List[RecordT] = []
    for week in group_by_week(records):
        quota = _round_half_up(len(week) / total * target_size)
        quota = max(1, min(quota, len(week)))
        sampled.extend(_evenly_spaced(week, quota))

    if len(sampled) > target_size:
        sampled = _trim_overshoot(sampled, target_size)

    return SampleResult(sampled=sampled, original_count=total)
