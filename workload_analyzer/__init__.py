"""
Workload Analyzer

A Python package that turns warehouse query execution records into workload
utilization reports: size classification by scan volume, minute-level
activity per day, execution-time statistics per workload category, plus
queue health and data-share consumer usage summaries.
"""

from .config import AnalyzerConfig, SourceConfig, get_workspace_client
from .schemas import (
    WorkloadCategory,
    QueryRecord,
    TimeBucket,
    BucketAssignment,
    CategoryStats,
    DailyUtilization,
    AggregateReport,
    CompletionState,
    QueueQueryRecord,
    QueueHealthEntry,
    ConsumerQuery,
    ConsumerUsageSummary,
)
from .classifier import classify
from .binner import analysis_window, generate_buckets, overlaps, overlapping_buckets, assign_buckets
from .aggregator import aggregate, category_stats, daily_utilization
from .assembler import assemble
from .validation import validate_records
from .numeric import percentile_cont
from .queue_health import queue_health, completion_state, classify_query_type, service_class_category
from .consumer_usage import consumer_usage
from .source import QueryHistorySource
from .analyzer import WorkloadAnalyzer

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "AnalyzerConfig",
    "SourceConfig",
    "get_workspace_client",
    # Schemas
    "WorkloadCategory",
    "QueryRecord",
    "TimeBucket",
    "BucketAssignment",
    "CategoryStats",
    "DailyUtilization",
    "AggregateReport",
    "CompletionState",
    "QueueQueryRecord",
    "QueueHealthEntry",
    "ConsumerQuery",
    "ConsumerUsageSummary",
    # Pipeline
    "classify",
    "analysis_window",
    "generate_buckets",
    "overlaps",
    "overlapping_buckets",
    "assign_buckets",
    "aggregate",
    "category_stats",
    "daily_utilization",
    "assemble",
    "validate_records",
    "percentile_cont",
    # Supplementary reports
    "queue_health",
    "completion_state",
    "classify_query_type",
    "service_class_category",
    "consumer_usage",
    # Entry points
    "QueryHistorySource",
    "WorkloadAnalyzer",
]
