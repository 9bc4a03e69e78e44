#!/usr/bin/env python3
"""
Workload Utilization Report Example

This script demonstrates the workload analyzer:
- Reading finished queries from a SQL warehouse's query history
- Classifying them into small / medium / large workloads
- Printing execution-time statistics and daily activity percentages

Use --demo to run against generated records without a warehouse.
"""

import argparse
import logging
import random
from datetime import datetime, timedelta, timezone

from workload_analyzer import (
    AggregateReport,
    AnalyzerConfig,
    QueryHistorySource,
    QueryRecord,
    SourceConfig,
    WorkloadAnalyzer,
)
from workload_analyzer.errors import APIError, MalformedRecordError


def setup_logging(verbose: bool = False):
    """Configure logging for the script."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def print_section_header(title: str):
    """Print a formatted section header."""
    print("\n" + "=" * 80)
    print(f" {title}")
    print("=" * 80)


def demo_records(now: datetime, lookback_days: int, count: int = 500) -> list[QueryRecord]:
    """Generate a reproducible set of records spread over the window."""
    rng = random.Random(42)
    records = []
    for i in range(count):
        start = now - timedelta(seconds=rng.randint(60, lookback_days * 86400))
        duration = timedelta(seconds=rng.randint(1, 600))
        records.append(
            QueryRecord(
                query_id=f"demo-{i}",
                start_time=start,
                end_time=start + duration,
                total_exec_time_micros=int(duration.total_seconds() * 1_000_000 * rng.uniform(0.5, 1.0)),
                max_scan_bytes=rng.choice([10**6, 5 * 10**7, 3 * 10**8, 10**11, 7 * 10**11]),
            )
        )
    return records


def print_category_report(report: AggregateReport):
    """Print execution-time statistics per workload category."""
    print_section_header("EXECUTION TIME BY WORKLOAD SIZE")
    print(f"\n{'Category':<10} {'Queries':>8} {'Total (s)':>14} {'Avg (s)':>10} {'Min (s)':>10} {'Max (s)':>10} {'Share':>8}")
    print("-" * 76)
    for category, stats in report.per_category.items():
        print(
            f"{category.value:<10} {stats.count:>8} {stats.sum_sec:>14} {stats.avg_sec:>10} "
            f"{stats.min_sec:>10} {stats.max_sec:>10} {str(stats.pct_of_total) + '%':>8}"
        )
    print(f"\nTotal queries: {report.total_query_count}")


def print_utilization_report(report: AggregateReport):
    """Print daily activity per workload category."""
    print_section_header("DAILY ACTIVITY")
    print(f"\n{'Day':<12} {'All':>8} {'Small':>8} {'Medium':>8} {'Large':>8}")
    print("-" * 48)
    for day in report.daily:
        pct = [day.activity_pct[c] for c in report.per_category]
        print(f"{day.day.isoformat():<12} {str(day.all_activity_pct) + '%':>8} " + " ".join(f"{str(p) + '%':>8}" for p in pct))

    print("\nAverage per day:")
    for category in report.per_category:
        print(
            f"  {category.value:<8} {report.per_day_avg_activity_pct[category]}% active, "
            f"{report.per_day_avg_active_minutes[category]} minutes"
        )


def main():
    """Main entry point for the workload report script."""
    parser = argparse.ArgumentParser(
        description="Workload utilization report over warehouse query history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--profile", default="DEFAULT", help="Databricks CLI profile name (default: DEFAULT)")
    parser.add_argument("--warehouse-id", help="SQL warehouse used to read query history")
    parser.add_argument("--lookback-days", type=int, default=7, help="Analysis window in days (default: 7)")
    parser.add_argument("--demo", action="store_true", help="Analyze generated records instead of a warehouse")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args()

    setup_logging(args.verbose)

    analyzer = WorkloadAnalyzer(AnalyzerConfig(lookback_days=args.lookback_days))
    now = datetime.now(timezone.utc)

    print("=" * 80)
    print(" WORKLOAD UTILIZATION REPORT")
    print("=" * 80)
    print(f"\nGenerated: {now.strftime('%Y-%m-%d %H:%M:%S')} UTC")
    print(f"Window: last {args.lookback_days} day(s)")

    try:
        if args.demo:
            report = analyzer.analyze(demo_records(now, args.lookback_days), now=now)
        else:
            source = QueryHistorySource(SourceConfig(profile=args.profile), warehouse_id=args.warehouse_id)
            report = analyzer.analyze_source(source, now=now)
    except MalformedRecordError as e:
        print(f"\nRejected {len(e.rejected)} record(s):")
        for query_id, reason in e.rejected:
            print(f"  {query_id}: {reason}")
        return
    except APIError as e:
        print(f"\nError reading query history: {e}")
        return

    print_category_report(report)
    print_utilization_report(report)

    print("\n" + "=" * 80)
    print(" REPORT COMPLETE")
    print("=" * 80)


if __name__ == "__main__":
    main()
