"""Data models for the workflow error monitor."""

from .analytics import ErrorAnalytics, TrendChange, TrendPoint, TypeCount, WorkflowStats
from .api_response import (
    ActionResponse,
    DebugErrorDump,
    ErrorListResponse,
    FailureResponse,
    IngestionResponse,
)
from .error import ErrorRecord, ErrorSeverity, ErrorType, ErrorUpdate
from .upstream import CloseCustomField, CloseStatus, CloseUser, N8NWorkflow

__all__ = [
    # Error models
    "ErrorRecord",
    "ErrorUpdate",
    "ErrorType",
    "ErrorSeverity",
    # Analytics models
    "ErrorAnalytics",
    "TrendChange",
    "TrendPoint",
    "TypeCount",
    "WorkflowStats",
    # API response models
    "IngestionResponse",
    "ErrorListResponse",
    "DebugErrorDump",
    "ActionResponse",
    "FailureResponse",
    # Upstream models
    "N8NWorkflow",
    "CloseCustomField",
    "CloseUser",
    "CloseStatus",
]
