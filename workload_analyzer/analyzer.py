"""
Workload utilization analysis entry point.

WorkloadAnalyzer ties the pipeline together: it derives the trailing analysis
window, generates its buckets, and aggregates a record set into a report.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Sequence

from .aggregator import aggregate
from .binner import analysis_window, generate_buckets
from .config import AnalyzerConfig
from .schemas import AggregateReport, QueryRecord
from .source import QueryHistorySource
from .validation import is_naive

logger = logging.getLogger(__name__)


def match_awareness(now: datetime, records: Sequence[QueryRecord]) -> datetime:
    """
    Express ``now`` the way the records express their timestamps.

    Naive timestamps are taken to be UTC. Buckets are compared against record
    times, so both must be naive or both timezone-aware.
    """
    if not records:
        return now
    if is_naive(records[0]) and now.tzinfo is not None:
        return now.astimezone(timezone.utc).replace(tzinfo=None)
    if not is_naive(records[0]) and now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


class WorkloadAnalyzer:
    """
    Analyzer producing workload utilization reports.

    Every analysis is a pure computation over the records passed in; the
    analyzer keeps no state between calls.

    Attributes:
        cfg: AnalyzerConfig controlling the window and bucket width
    """

    def __init__(self, cfg: AnalyzerConfig | None = None):
        """
        Initialize WorkloadAnalyzer with optional configuration.

        Args:
            cfg: AnalyzerConfig instance. If None, a 7-day window of 1-minute
                buckets is used.

        Examples:
            >>> analyzer = WorkloadAnalyzer()
            >>> analyzer = WorkloadAnalyzer(AnalyzerConfig(lookback_days=3))
        """
        self.cfg = cfg or AnalyzerConfig()
        logger.info(
            f"WorkloadAnalyzer initialized (lookback_days={self.cfg.lookback_days}, "
            f"bucket_width_minutes={self.cfg.bucket_width_minutes})"
        )

    @property
    def bucket_width(self) -> timedelta:
        return timedelta(minutes=self.cfg.bucket_width_minutes)

    def analyze(self, records: Iterable[QueryRecord], now: datetime | None = None) -> AggregateReport:
        """
        Analyze records over the trailing window ending at ``now``.

        Args:
            records: Query records, already filtered to the window by the source.
            now: Analysis time. Defaults to the current UTC time. It is converted
                to match the records: naive records are read as UTC.

        Returns:
            The AggregateReport for the window.

        Raises:
            MalformedRecordError: If any record violates its invariants.

        Examples:
            >>> analyzer = WorkloadAnalyzer()
            >>> report = analyzer.analyze(records)
            >>> print(f"{report.total_query_count} queries")
            >>> for category, stats in report.per_category.items():
            ...     print(f"{category.value}: {stats.sum_sec}s ({stats.pct_of_total}%)")
        """
        records = list(records)
        now = match_awareness(now or datetime.now(timezone.utc), records)
        window_start, window_end = analysis_window(now, self.cfg.lookback_days, self.bucket_width)
        logger.info(f"Analyzing workload from {window_start.isoformat()} to {window_end.isoformat()}")

        buckets = generate_buckets(window_start, window_end, self.bucket_width)
        return aggregate(records, buckets)

    def analyze_source(self, source: QueryHistorySource, now: datetime | None = None) -> AggregateReport:
        """
        Fetch records from a query history source and analyze them.

        Raises:
            APIError: If the source cannot be read.
            MalformedRecordError: If the source returns inconsistent rows.
        """
        now = now or datetime.now(timezone.utc)
        records = source.fetch_records(lookback_days=self.cfg.lookback_days, now=now)
        return self.analyze(records, now=now)
