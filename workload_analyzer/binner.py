"""
Time-window binning for workload utilization analysis.

This module discretizes the analysis window into fixed-width buckets and maps
each query's execution span onto the buckets it overlaps:
- Exhaustive bucket generation (empty buckets included)
- The three-clause overlap predicate (starts inside, ends inside, or spans)
- Bulk assignment of records to buckets
"""

import logging
from bisect import bisect_right
from datetime import datetime, timedelta
from typing import Iterable, List, Sequence, Set, Tuple

from .classifier import classify
from .errors import ValidationError
from .schemas import BucketAssignment, QueryRecord, TimeBucket

logger = logging.getLogger(__name__)


def floor_to_width(moment: datetime, bucket_width: timedelta) -> datetime:
    """Truncate a timestamp to the start of its bucket, counting from midnight."""
    if bucket_width <= timedelta(0):
        raise ValidationError("bucket_width must be positive")
    midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight + ((moment - midnight) // bucket_width) * bucket_width


def analysis_window(
    now: datetime,
    lookback_days: int = 7,
    bucket_width: timedelta = timedelta(minutes=1),
) -> Tuple[datetime, datetime]:
    """
    Compute the trailing analysis window ending at the analysis time.

    The end is the exclusive end of the bucket that contains ``now``, so the
    current (partial) minute is part of the window.

    Args:
        now: Analysis time.
        lookback_days: Length of the window in days. Must be positive.
        bucket_width: Bucket width the window is aligned to.

    Returns:
        Tuple of (window_start, window_end).

    Raises:
        ValidationError: If lookback_days or bucket_width is not positive.
    """
    if lookback_days <= 0:
        raise ValidationError("lookback_days must be positive")
    window_end = floor_to_width(now, bucket_width) + bucket_width
    window_start = window_end - timedelta(days=lookback_days)
    return window_start, window_end


def generate_buckets(
    window_start: datetime,
    window_end: datetime,
    bucket_width: timedelta = timedelta(minutes=1),
) -> List[TimeBucket]:
    """
    Generate contiguous, non-overlapping buckets covering the whole window.

    Every bucket is generated, whether or not any query will fall into it,
    because utilization percentages count idle buckets in their denominator.
    When the window is not a multiple of the width, the last bucket extends
    past window_end so the window is still fully covered.

    Args:
        window_start: Inclusive start of the window; start of the first bucket.
        window_end: Exclusive end of the window.
        bucket_width: Width of each bucket. Must be positive.

    Returns:
        Buckets ordered by start time.

    Raises:
        ValidationError: If bucket_width is not positive or the window is inverted.

    Examples:
        >>> start = datetime(2024, 1, 1, 10, 0)
        >>> buckets = generate_buckets(start, start + timedelta(minutes=3))
        >>> len(buckets)
        3
    """
    if bucket_width <= timedelta(0):
        raise ValidationError("bucket_width must be positive")
    if window_end < window_start:
        raise ValidationError("window_end must not be before window_start")

    buckets = []
    current = window_start
    while current < window_end:
        buckets.append(TimeBucket(start=current, end=current + bucket_width))
        current += bucket_width

    logger.debug(f"Generated {len(buckets)} buckets from {window_start} to {window_end}")
    return buckets


def overlaps(record: QueryRecord, bucket: TimeBucket) -> bool:
    """
    Decide whether a record's execution is counted in a bucket.

    True when the record starts inside [start, end), ends inside
    [start, end), or strictly spans the bucket. A record starting exactly at
    the bucket's end is not counted; a record ending exactly at the bucket's
    start is.
    """
    if bucket.start <= record.start_time < bucket.end:
        return True
    if bucket.start <= record.end_time < bucket.end:
        return True
    return record.start_time < bucket.start and record.end_time > bucket.end


def overlapping_buckets(record: QueryRecord, buckets: Iterable[TimeBucket]) -> Set[TimeBucket]:
    """Return every bucket the record overlaps."""
    return {bucket for bucket in buckets if overlaps(record, bucket)}


def assign_buckets(
    records: Iterable[QueryRecord],
    buckets: Sequence[TimeBucket],
) -> List[BucketAssignment]:
    """
    Join records to the buckets they overlap.

    Buckets are searched by bisection on their bounds, so only buckets that can
    possibly overlap a record are checked against the predicate.

    Args:
        records: Validated query records.
        buckets: Non-overlapping buckets, in any order.

    Returns:
        One BucketAssignment per record, in input order. A record outside every
        bucket gets an assignment with no buckets.
    """
    ordered = sorted(buckets, key=lambda b: b.start)
    starts = [b.start for b in ordered]
    ends = [b.end for b in ordered]

    assignments = []
    for record in records:
        # Any overlapping bucket starts no later than the record ends and
        # ends after the record starts.
        lo = bisect_right(ends, record.start_time)
        hi = bisect_right(starts, record.end_time)
        matched = tuple(b for b in ordered[lo:hi] if overlaps(record, b))
        assignments.append(
            BucketAssignment(
                query_id=record.query_id,
                category=classify(record.max_scan_bytes),
                buckets=matched,
            )
        )

    logger.debug(f"Assigned {len(assignments)} records across {len(ordered)} buckets")
    return assignments
