"""
Data-share consumer usage report.

Groups consumer-side queries by request date, database and user, and
summarizes request durations, execution times, transactions and errors,
including p80/p90/p99 request durations.
"""

import logging
from typing import Iterable, List

import pandas as pd

from .schemas import ConsumerQuery, ConsumerUsageSummary

logger = logging.getLogger(__name__)

GROUP_KEYS = ["request_date", "dbname", "db_username"]

# Output column -> (input column, aggregation)
AGGREGATIONS = {
    "query_count": ("query_id", "count"),
    "avg_query_execution_secs": ("query_execution_secs", "mean"),
    "total_query_execution_secs": ("query_execution_secs", "sum"),
    "avg_execution_secs": ("total_execution_secs", "mean"),
    "total_execution_secs": ("total_execution_secs", "sum"),
    "avg_request_duration_secs": ("request_duration_secs", "mean"),
    "total_request_duration_secs": ("request_duration_secs", "sum"),
    "avg_request_interval_secs": ("request_interval_secs", "mean"),
    "total_request_interval_secs": ("request_interval_secs", "sum"),
    "total_unique_transaction": ("unique_transaction", "sum"),
    "total_usage_consumer_count": ("total_usage_consumer_count", "sum"),
    "total_request_error_count": ("request_error_count", "sum"),
}

REQUEST_PERCENTILES = {
    "p80_request_secs": 0.8,
    "p90_request_secs": 0.9,
    "p99_request_secs": 0.99,
}


def consumer_usage(queries: Iterable[ConsumerQuery]) -> List[ConsumerUsageSummary]:
    """
    Summarize consumer usage per (request date, database, user).

    Database and user names are compared with surrounding whitespace removed.
    Percentiles interpolate linearly between order statistics, like
    PERCENTILE_CONT. Averages, totals and percentiles are rounded to 4 places.

    Args:
        queries: Consumer-side queries joined to their consumer requests.

    Returns:
        One ConsumerUsageSummary per group, ordered by date, database and user.

    Examples:
        >>> for summary in consumer_usage(queries):
        ...     print(f"{summary.request_date} {summary.db_username}: p90={summary.p90_request_secs}s")
    """
    data = pd.DataFrame([query.model_dump() for query in queries])
    if data.empty:
        logger.info("No consumer queries to summarize")
        return []

    data["dbname"] = data["dbname"].str.strip()
    data["db_username"] = data["db_username"].str.strip()

    grouped = data.groupby(GROUP_KEYS, sort=True)
    summary = grouped.agg(**AGGREGATIONS)
    for column, fraction in REQUEST_PERCENTILES.items():
        summary[column] = grouped["request_duration_secs"].quantile(fraction, interpolation="linear")
    summary = summary.round(4).reset_index()

    summaries = [ConsumerUsageSummary(**row) for row in summary.to_dict(orient="records")]
    logger.info(f"Summarized consumer usage for {len(summaries)} group(s)")
    return summaries
