"""
Pydantic models for workload analysis domain objects.

These schemas provide strongly typed, immutable data structures for every stage
of the analysis pipeline: raw query records, time buckets, per-category and
per-day aggregates, and the final report.
"""

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Mapping, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer

SECONDS_PRECISION = Decimal("0.001")
PERCENT_PRECISION = Decimal("0.1")

K = TypeVar("K")
V = TypeVar("V")


def _read_only(value: Mapping) -> Mapping:
    return MappingProxyType(dict(value))


# Mapping field of a frozen model: read-only once validated, dumped as a plain dict.
FrozenMapping = Annotated[Mapping[K, V], AfterValidator(_read_only), PlainSerializer(lambda value: dict(value))]


class WorkloadCategory(str, Enum):
    """Workload size category derived from a query's peak scan volume."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class QueryRecord(BaseModel):
    """
    One finished warehouse query execution.

    Attributes:
        query_id: Unique identifier assigned by the source system
        start_time: When execution started
        end_time: When execution finished (never before start_time)
        total_exec_time_micros: Total execution time in microseconds
        max_scan_bytes: Largest per-segment scan volume of the query in bytes
    """
    model_config = ConfigDict(frozen=True)

    query_id: str = Field(description="Unique identifier for the query")
    start_time: datetime = Field(description="When execution started")
    end_time: datetime = Field(description="When execution finished")
    total_exec_time_micros: int = Field(description="Total execution time in microseconds")
    max_scan_bytes: int = Field(description="Peak scanned bytes across query segments")

    @property
    def exec_seconds(self) -> Decimal:
        """Execution time in seconds, fixed to 3 decimal places."""
        return (Decimal(self.total_exec_time_micros) / Decimal(1_000_000)).quantize(
            SECONDS_PRECISION, rounding=ROUND_HALF_UP
        )


class TimeBucket(BaseModel):
    """
    Half-open interval [start, end) used to discretize query activity.

    Attributes:
        start: Inclusive lower bound
        end: Exclusive upper bound
    """
    model_config = ConfigDict(frozen=True)

    start: datetime = Field(description="Inclusive start of the bucket")
    end: datetime = Field(description="Exclusive end of the bucket")

    @property
    def day(self) -> date:
        """Calendar day the bucket belongs to."""
        return self.start.date()


class BucketAssignment(BaseModel):
    """Relates one query record to every time bucket its execution overlaps."""
    model_config = ConfigDict(frozen=True)

    query_id: str = Field(description="Identifier of the assigned query")
    category: WorkloadCategory = Field(description="Workload category of the query")
    buckets: tuple[TimeBucket, ...] = Field(default=(), description="Overlapping buckets in time order")


class CategoryStats(BaseModel):
    """
    Execution-time statistics for one workload category across the window.

    Attributes:
        count: Number of queries in the category
        sum_sec: Total execution seconds
        avg_sec: Average execution seconds per query
        min_sec: Shortest execution in seconds
        max_sec: Longest execution in seconds
        pct_of_total: Share of all execution seconds, as a percentage
        avg_max_scan_bytes: Average peak scan volume of the category's queries
    """
    model_config = ConfigDict(frozen=True)

    count: int = Field(default=0, description="Number of queries in the category")
    sum_sec: Decimal = Field(default=Decimal("0.000"), description="Total execution seconds")
    avg_sec: Decimal = Field(default=Decimal("0.000"), description="Average execution seconds")
    min_sec: Decimal = Field(default=Decimal("0.000"), description="Minimum execution seconds")
    max_sec: Decimal = Field(default=Decimal("0.000"), description="Maximum execution seconds")
    pct_of_total: Decimal = Field(default=Decimal("0.0"), description="Percentage of total execution seconds")
    avg_max_scan_bytes: Decimal = Field(default=Decimal("0"), description="Average peak scan bytes")


class DailyUtilization(BaseModel):
    """
    Utilization of one calendar day of the analysis window.

    Attributes:
        day: Calendar day
        bucket_count: Number of time buckets generated for the day
        active_minutes: Minutes with at least one active query, per category
        activity_pct: active_minutes as a percentage of the day's 1440 minutes
        all_active_minutes: Minutes with at least one active query of any category
        all_activity_pct: all_active_minutes as a percentage of the day's 1440 minutes
    """
    model_config = ConfigDict(frozen=True)

    day: date = Field(description="Calendar day")
    bucket_count: int = Field(description="Number of buckets generated for the day")
    active_minutes: FrozenMapping[WorkloadCategory, int] = Field(description="Active minutes per category")
    activity_pct: FrozenMapping[WorkloadCategory, Decimal] = Field(description="Activity percentage per category")
    all_active_minutes: int = Field(default=0, description="Active minutes for any category")
    all_activity_pct: Decimal = Field(default=Decimal("0.0"), description="Activity percentage for any category")


class AggregateReport(BaseModel):
    """
    Final workload utilization report.

    Attributes:
        per_category: Execution-time statistics per workload category
        per_day_avg_activity_pct: Mean of the daily activity percentages per category
        per_day_avg_active_minutes: Mean of the daily active minutes per category
        all_queries_avg_activity_pct: Mean daily activity percentage for queries of any category
        daily: Per-day utilization the averages were computed from
        total_query_count: Number of queries analyzed
    """
    model_config = ConfigDict(frozen=True)

    per_category: FrozenMapping[WorkloadCategory, CategoryStats] = Field(description="Statistics per category")
    per_day_avg_activity_pct: FrozenMapping[WorkloadCategory, Decimal] = Field(description="Average daily activity percentage")
    per_day_avg_active_minutes: FrozenMapping[WorkloadCategory, Decimal] = Field(description="Average daily active minutes")
    all_queries_avg_activity_pct: Decimal = Field(default=Decimal("0.0"), description="Average daily activity percentage for any category")
    daily: tuple[DailyUtilization, ...] = Field(default=(), description="Per-day utilization breakdown")
    total_query_count: int = Field(description="Number of queries analyzed")


class CompletionState(str, Enum):
    """Terminal state of a query as reported by the workload manager."""
    COMPLETED = "completed"
    EVICTED_ABORTED = "evicted_aborted"
    USER_ABORTED = "user_aborted"
    UNKNOWN = "unknown"


class QueueQueryRecord(BaseModel):
    """
    Workload-manager facts about one query, as used by the queue health report.

    Attributes:
        query_id: Unique identifier for the query
        dbname: Database the query ran against
        start_time: When the query started
        query_text: SQL text of the query
        service_class: WLM service class the query was routed to
        queue_name: Name of the WLM queue for the service class
        from_result_cache: Whether the query was answered from the result cache
        concurrency_scaling_status: 1 when the query ran on a burst cluster
        final_state: WLM final state (e.g. Completed, Evicted)
        rule_action: Query monitoring rule action taken (e.g. abort, log)
        aborted: 1 when the query was aborted by the user, otherwise 0
    """
    model_config = ConfigDict(frozen=True)

    query_id: str = Field(description="Unique identifier for the query")
    dbname: str = Field(description="Database the query ran against")
    start_time: datetime = Field(description="When the query started")
    query_text: str = Field(default="", description="SQL text of the query")
    service_class: int | None = Field(default=None, description="WLM service class")
    queue_name: str | None = Field(default=None, description="WLM queue name")
    from_result_cache: bool = Field(default=False, description="Answered from the result cache")
    concurrency_scaling_status: int | None = Field(default=None, description="Concurrency scaling status flag")
    final_state: str | None = Field(default=None, description="WLM final state")
    rule_action: str | None = Field(default=None, description="Query monitoring rule action")
    aborted: int = Field(default=0, description="User abort flag")


class QueueHealthEntry(BaseModel):
    """Hourly query counts for one queue / database / statement type combination."""
    model_config = ConfigDict(frozen=True)

    workload_exec_hour: datetime = Field(description="Hour the queries started in")
    service_class_category: str | None = Field(default=None, description="Service class category")
    service_class: int | None = Field(default=None, description="WLM service class")
    queue_name: str | None = Field(default=None, description="WLM queue name or result_cache")
    concurrency_scaling_status: str = Field(description="burst or main")
    dbname: str = Field(description="Database name")
    query_type: str = Field(description="Statement type")
    total_query_count: int = Field(default=0, description="Completed, user-aborted and evicted queries")
    completed_query_count: int = Field(default=0, description="Completed queries")
    user_aborted_count: int = Field(default=0, description="Queries aborted by the user")


class ConsumerQuery(BaseModel):
    """
    One query issued on behalf of a data-share consumer request.

    Attributes:
        query_id: Identifier of the consumer-side query
        request_date: Date the consumer request started
        dbname: Database of the query
        db_username: Database user issuing the request
        request_duration_secs: Time between first and last consumer usage record
        request_interval_secs: Time between the end of the request and the query start
        query_execution_secs: Query execution time
        total_execution_secs: Time from request start to query end
        unique_transaction: Distinct transactions in the request
        total_usage_consumer_count: Number of consumer usage records
        request_error_count: Number of consumer usage records carrying an error
    """
    model_config = ConfigDict(frozen=True)

    query_id: str = Field(description="Identifier of the consumer-side query")
    request_date: date = Field(description="Date the consumer request started")
    dbname: str = Field(description="Database of the query")
    db_username: str = Field(description="Database user issuing the request")
    request_duration_secs: float = Field(default=0.0, description="Request duration in seconds")
    request_interval_secs: float = Field(default=0.0, description="Gap between request end and query start in seconds")
    query_execution_secs: float = Field(default=0.0, description="Query execution time in seconds")
    total_execution_secs: float = Field(default=0.0, description="Request start to query end in seconds")
    unique_transaction: int = Field(default=0, description="Distinct transactions")
    total_usage_consumer_count: int = Field(default=0, description="Consumer usage records")
    request_error_count: int = Field(default=0, description="Consumer usage records with an error")


class ConsumerUsageSummary(BaseModel):
    """Aggregated data-share consumer usage for one (date, database, user)."""
    model_config = ConfigDict(frozen=True)

    request_date: date = Field(description="Request date")
    dbname: str = Field(description="Database name")
    db_username: str = Field(description="Database user")
    query_count: int = Field(description="Number of queries")
    avg_query_execution_secs: float = Field(description="Average query execution seconds")
    total_query_execution_secs: float = Field(description="Total query execution seconds")
    avg_execution_secs: float = Field(description="Average request-start-to-query-end seconds")
    total_execution_secs: float = Field(description="Total request-start-to-query-end seconds")
    avg_request_duration_secs: float = Field(description="Average request duration seconds")
    p80_request_secs: float | None = Field(default=None, description="80th percentile request duration")
    p90_request_secs: float | None = Field(default=None, description="90th percentile request duration")
    p99_request_secs: float | None = Field(default=None, description="99th percentile request duration")
    total_request_duration_secs: float = Field(description="Total request duration seconds")
    avg_request_interval_secs: float = Field(description="Average request interval seconds")
    total_request_interval_secs: float = Field(description="Total request interval seconds")
    total_unique_transaction: int = Field(description="Total distinct transactions")
    total_usage_consumer_count: int = Field(description="Total consumer usage records")
    total_request_error_count: int = Field(description="Total consumer usage errors")
