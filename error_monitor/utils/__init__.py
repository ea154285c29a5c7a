"""
Utility modules for the workflow error monitor.
"""

from error_monitor.utils.logging import (
    get_logger,
    setup_logging,
    log_api_call,
    log_ingestion_batch,
    log_error_with_context,
)
from error_monitor.utils.metrics import (
    track_api_call,
    emit_metric,
    emit_ingestion_metrics,
)
from error_monitor.utils.resilience import (
    TransientError,
    retry_with_backoff,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "log_api_call",
    "log_ingestion_batch",
    "log_error_with_context",
    "track_api_call",
    "emit_metric",
    "emit_ingestion_metrics",
    "TransientError",
    "retry_with_backoff",
]
