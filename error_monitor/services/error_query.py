"""Filtering and pagination of the error listing."""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional

from error_monitor.models.error import ErrorRecord, ErrorSeverity, ErrorType


class TimeRange(str, Enum):
    """Lookback windows offered by the dashboard."""
    LAST_HOUR = "1h"
    LAST_DAY = "24h"
    LAST_WEEK = "7d"
    LAST_MONTH = "30d"
    ALL = "all"


_WINDOWS = {
    TimeRange.LAST_HOUR: timedelta(hours=1),
    TimeRange.LAST_DAY: timedelta(hours=24),
    TimeRange.LAST_WEEK: timedelta(days=7),
    TimeRange.LAST_MONTH: timedelta(days=30),
}


def filter_errors(
    errors: List[ErrorRecord],
    fixed: Optional[bool] = None,
    severity: Optional[ErrorSeverity] = None,
    error_type: Optional[ErrorType] = None,
    workflow_id: Optional[str] = None,
    search: Optional[str] = None,
    time_range: Optional[TimeRange] = None,
    now: Optional[datetime] = None,
) -> List[ErrorRecord]:
    """
    Apply the listing filters, keeping the input order.

    Args:
        errors: Full listing
        fixed: Keep only resolved (True) or unresolved (False) errors
        severity: Keep only this severity
        error_type: Keep only this error type
        workflow_id: Keep only errors of this workflow
        search: Case-insensitive match on workflow name, message or node name
        time_range: Keep only errors inside this lookback window
        now: Reference time for ``time_range``

    Returns:
        Matching errors
    """
    query = search.strip().lower() if search else ""
    threshold = None
    if time_range is not None and time_range in _WINDOWS:
        threshold = (now or datetime.now(timezone.utc)) - _WINDOWS[time_range]

    def matches(error: ErrorRecord) -> bool:
        if fixed is not None and error.resolved != fixed:
            return False
        if severity is not None and error.severity != severity:
            return False
        if error_type is not None and error.error_type != error_type:
            return False
        if workflow_id is not None and error.workflow_id != workflow_id:
            return False
        if threshold is not None and error.timestamp < threshold:
            return False
        if query and not (
            query in error.workflow_name.lower()
            or query in error.error_message.lower()
            or query in error.node_name.lower()
        ):
            return False
        return True

    return [error for error in errors if matches(error)]


def paginate(errors: List[ErrorRecord], limit: Optional[int] = None, offset: int = 0) -> List[ErrorRecord]:
    """Slice one page; ``limit=None`` returns everything after ``offset``."""
    start = max(offset, 0)
    if limit is None:
        return errors[start:]
    return errors[start:start + max(limit, 0)]
