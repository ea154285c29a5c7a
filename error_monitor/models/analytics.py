"""Error analytics data models."""

from datetime import datetime
from typing import List, Optional

from error_monitor.models.error import CamelModel


class TrendPoint(CamelModel):
    """Error count for one day."""

    timestamp: datetime
    count: int


class TypeCount(CamelModel):
    """Error count for one error type."""

    type: str
    count: int


class WorkflowStats(CamelModel):
    """Error statistics for one workflow."""

    workflow_name: str
    error_count: int
    last_error: datetime
    success_rate: float


class TrendChange(CamelModel):
    """Relative change between two periods."""

    value: float
    is_positive: bool


class ErrorAnalytics(CamelModel):
    """Dashboard analytics computed over the error listing."""

    total_errors: int
    resolved_errors: int
    error_rate: float
    most_affected_workflow: str
    # Resolution timestamps are not recorded, so this stays unset
    avg_resolution_time: Optional[float] = None
    trends: List[TrendPoint]
    errors_by_type: List[TypeCount]
    top_workflows: List[WorkflowStats]
    trend_change: TrendChange
