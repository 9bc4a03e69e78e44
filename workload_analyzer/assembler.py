"""
Assembly of the final workload utilization report.
"""

import logging
from typing import Dict, Sequence

from .errors import IncompleteDataError
from .numeric import mean
from .schemas import AggregateReport, CategoryStats, DailyUtilization, WorkloadCategory

logger = logging.getLogger(__name__)


def assemble(
    category_stats: Dict[WorkloadCategory, CategoryStats],
    daily_utilization: Sequence[DailyUtilization],
    total_query_count: int,
) -> AggregateReport:
    """
    Join per-category statistics and per-day utilization into one report.

    Daily figures are averaged across every day of the window, idle days
    included.

    Args:
        category_stats: Statistics for each workload category.
        daily_utilization: Utilization for each day of the window.
        total_query_count: Number of queries analyzed.

    Returns:
        The immutable AggregateReport.

    Raises:
        IncompleteDataError: If any day covers a different set of categories
            than category_stats.
    """
    categories = set(category_stats)
    for day in daily_utilization:
        if set(day.activity_pct) != categories or set(day.active_minutes) != categories:
            raise IncompleteDataError(
                f"Utilization for {day.day} covers {sorted(c.value for c in day.activity_pct)}, "
                f"expected {sorted(c.value for c in categories)}"
            )

    ordered = [c for c in WorkloadCategory if c in categories]
    report = AggregateReport(
        per_category={c: category_stats[c] for c in ordered},
        per_day_avg_activity_pct={
            c: mean(day.activity_pct[c] for day in daily_utilization) for c in ordered
        },
        per_day_avg_active_minutes={
            c: mean(day.active_minutes[c] for day in daily_utilization) for c in ordered
        },
        all_queries_avg_activity_pct=mean(day.all_activity_pct for day in daily_utilization),
        daily=tuple(daily_utilization),
        total_query_count=total_query_count,
    )

    logger.info(f"Assembled report for {total_query_count} queries across {len(daily_utilization)} day(s)")
    return report
