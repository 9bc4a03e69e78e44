"""
Aggregation of classified, binned query records.

Two axes are computed independently and then joined by the assembler:
- By category: execution-time statistics across the whole window
- By day: share of each day's 1440 minutes with at least one active query
"""

import logging
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Sequence

from .assembler import assemble
from .binner import assign_buckets
from .classifier import classify
from .numeric import percentage, ratio_or_zero
from .schemas import (
    SECONDS_PRECISION,
    AggregateReport,
    BucketAssignment,
    CategoryStats,
    DailyUtilization,
    QueryRecord,
    TimeBucket,
    WorkloadCategory,
)
from .validation import validate_records

logger = logging.getLogger(__name__)

ZERO_SECONDS = Decimal("0.000")
MINUTES_PER_DAY = 1440


def category_stats(records: Iterable[QueryRecord]) -> Dict[WorkloadCategory, CategoryStats]:
    """
    Compute execution-time statistics for every workload category.

    Categories without queries are reported with zero statistics. The share of
    total execution time is zero for every category when the total is zero.

    Args:
        records: Validated query records.

    Returns:
        Mapping of every WorkloadCategory to its CategoryStats.
    """
    grouped: Dict[WorkloadCategory, List[QueryRecord]] = {c: [] for c in WorkloadCategory}
    for record in records:
        grouped[classify(record.max_scan_bytes)].append(record)

    total_sum = sum(
        (r.exec_seconds for members in grouped.values() for r in members),
        ZERO_SECONDS,
    )

    stats = {}
    for category, members in grouped.items():
        if not members:
            stats[category] = CategoryStats()
            continue

        seconds = [r.exec_seconds for r in members]
        category_sum = sum(seconds, ZERO_SECONDS)
        stats[category] = CategoryStats(
            count=len(members),
            sum_sec=category_sum,
            avg_sec=ratio_or_zero(category_sum, len(members)).quantize(SECONDS_PRECISION, rounding=ROUND_HALF_UP),
            min_sec=min(seconds),
            max_sec=max(seconds),
            pct_of_total=percentage(category_sum, total_sum),
            avg_max_scan_bytes=ratio_or_zero(
                sum(r.max_scan_bytes for r in members), len(members)
            ).quantize(Decimal("1"), rounding=ROUND_HALF_UP),
        )

    logger.debug(
        "Category counts: "
        + ", ".join(f"{c.value}={s.count}" for c, s in stats.items())
        + f"; total {total_sum}s"
    )
    return stats


def daily_utilization(
    assignments: Iterable[BucketAssignment],
    buckets: Sequence[TimeBucket],
) -> List[DailyUtilization]:
    """
    Compute per-day activity from bucket assignments.

    A bucket is active for a category when at least one query of that category
    overlaps it. Each day's percentage is its active bucket minutes over the
    1440 minutes of a calendar day. Idle buckets, and the parts of a day the
    window does not reach, count in the denominator.

    Args:
        assignments: Output of assign_buckets.
        buckets: The full, exhaustive bucket sequence of the window.

    Returns:
        One DailyUtilization per calendar day touched by the buckets, in date order.
    """
    active: Dict[TimeBucket, set] = {}
    for assignment in assignments:
        for bucket in assignment.buckets:
            active.setdefault(bucket, set()).add(assignment.category)

    days: Dict[date, dict] = {}
    for bucket in sorted(buckets, key=lambda b: b.start):
        minutes = (bucket.end - bucket.start) // timedelta(minutes=1)
        totals = days.setdefault(
            bucket.day,
            {"buckets": 0, "all_minutes": 0,
             "minutes": {c: 0 for c in WorkloadCategory}},
        )
        totals["buckets"] += 1
        categories = active.get(bucket, set())
        if categories:
            totals["all_minutes"] += minutes
        for category in categories:
            totals["minutes"][category] += minutes

    result = []
    for day, totals in days.items():
        result.append(
            DailyUtilization(
                day=day,
                bucket_count=totals["buckets"],
                active_minutes=dict(totals["minutes"]),
                activity_pct={
                    c: percentage(count, MINUTES_PER_DAY) for c, count in totals["minutes"].items()
                },
                all_active_minutes=totals["all_minutes"],
                all_activity_pct=percentage(totals["all_minutes"], MINUTES_PER_DAY),
            )
        )

    logger.debug(f"Computed utilization for {len(result)} day(s) from {len(active)} active bucket(s)")
    return result


def aggregate(records: Iterable[QueryRecord], buckets: Sequence[TimeBucket]) -> AggregateReport:
    """
    Run the full aggregation over a record set and its bucketed window.

    Records are validated before anything else; a single malformed record
    fails the whole report.

    Args:
        records: Query records already filtered to the analysis window.
        buckets: Exhaustive buckets covering the window (see generate_buckets).

    Returns:
        The assembled AggregateReport.

    Raises:
        MalformedRecordError: If any record violates its invariants.
        IncompleteDataError: If the category and daily axes disagree.

    Examples:
        >>> buckets = generate_buckets(window_start, window_end)
        >>> report = aggregate(records, buckets)
        >>> report.per_category[WorkloadCategory.LARGE].pct_of_total
        Decimal('89.3')
    """
    checked = validate_records(records)
    logger.info(f"Aggregating {len(checked)} queries over {len(buckets)} buckets")

    stats = category_stats(checked)
    assignments = assign_buckets(checked, buckets)
    daily = daily_utilization(assignments, buckets)

    return assemble(stats, daily, total_query_count=len(checked))
