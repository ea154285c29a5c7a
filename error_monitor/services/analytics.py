"""
Dashboard analytics over the error listing.
"""

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from error_monitor.models.analytics import (
    ErrorAnalytics,
    TrendChange,
    TrendPoint,
    TypeCount,
    WorkflowStats,
)
from error_monitor.models.error import ErrorRecord

TREND_DAYS = 7
TOP_WORKFLOWS = 5


def calculate_trend_change(current: int, previous: int) -> TrendChange:
    """
    Percentage change between two periods.

    Fewer errors than before counts as positive.
    """
    if previous == 0:
        return TrendChange(value=100.0 if current > 0 else 0.0, is_positive=False)

    change = (current - previous) / previous * 100
    return TrendChange(value=abs(round(change, 1)), is_positive=change < 0)


def _success_rate(error_count: int) -> float:
    # No execution totals are available; estimate from error volume
    penalty = min(error_count * 2, 30)
    return float(max(60, 95 - penalty))


def _daily_trends(errors: List[ErrorRecord], now: datetime) -> List[TrendPoint]:
    today = now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    trends = []
    for days_ago in range(TREND_DAYS - 1, -1, -1):
        day_start = today - timedelta(days=days_ago)
        day_end = day_start + timedelta(days=1)
        count = sum(1 for error in errors if day_start <= error.timestamp < day_end)
        trends.append(TrendPoint(timestamp=day_start, count=count))
    return trends


def _top_workflows(errors: List[ErrorRecord]) -> List[WorkflowStats]:
    counts: Counter = Counter()
    last_seen: Dict[str, datetime] = {}

    for error in errors:
        name = error.workflow_name
        counts[name] += 1
        if name not in last_seen or error.timestamp > last_seen[name]:
            last_seen[name] = error.timestamp

    return [
        WorkflowStats(
            workflow_name=name,
            error_count=count,
            last_error=last_seen[name],
            success_rate=_success_rate(count),
        )
        for name, count in counts.most_common(TOP_WORKFLOWS)
    ]


def calculate_analytics(errors: List[ErrorRecord], now: Optional[datetime] = None) -> ErrorAnalytics:
    """
    Compute the analytics page figures.

    Args:
        errors: Error listing
        now: Reference time (defaults to the current UTC time)

    Returns:
        ErrorAnalytics
    """
    now = now or datetime.now(timezone.utc)
    last_24h = now - timedelta(hours=24)
    previous_24h = now - timedelta(hours=48)

    recent_count = sum(1 for error in errors if error.timestamp >= last_24h)
    previous_count = sum(1 for error in errors if previous_24h <= error.timestamp < last_24h)

    workflow_counts = Counter(error.workflow_name for error in errors)
    most_affected = workflow_counts.most_common(1)[0][0] if workflow_counts else "N/A"

    type_counts = Counter(error.error_type.value for error in errors)

    return ErrorAnalytics(
        total_errors=len(errors),
        resolved_errors=sum(1 for error in errors if error.resolved),
        error_rate=round(recent_count / 24, 1),
        most_affected_workflow=most_affected,
        trends=_daily_trends(errors, now),
        errors_by_type=[
            TypeCount(type=error_type, count=count)
            for error_type, count in type_counts.most_common()
        ],
        top_workflows=_top_workflows(errors),
        trend_change=calculate_trend_change(recent_count, previous_count),
    )
