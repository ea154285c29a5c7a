"""
Metrics emission for observability.

Metrics are written as structured log lines; a collector can scrape them
from the JSON log stream.
"""

import time
from typing import Any, Optional
from contextlib import asynccontextmanager

from error_monitor.utils.logging import get_logger, log_api_call

logger = get_logger(__name__)


@asynccontextmanager
async def track_api_call(
    service: str,
    endpoint: str,
    method: str = "GET",
    logger_adapter=None,
):
    """
    Context manager to track upstream API call timing.

    Usage:
        async with track_api_call("n8n", "/api/v1/workflows", "GET", logger) as call:
            response = await client.get(url)
            call["status_code"] = response.status_code

    Args:
        service: Service name
        endpoint: Endpoint path
        method: HTTP method
        logger_adapter: Logger for logging API calls (module logger if None)

    Yields:
        Mutable dict the caller may fill with ``status_code``
    """
    start_time = time.time()
    call: dict = {}
    error = None

    try:
        yield call
    except Exception as e:
        error = e
        raise
    finally:
        duration_ms = (time.time() - start_time) * 1000

        log_api_call(
            logger_adapter or logger,
            service=service,
            endpoint=endpoint,
            method=method,
            status_code=call.get("status_code"),
            duration_ms=duration_ms,
            error=str(error) if error else None
        )
        emit_metric(
            "upstream_call_duration_ms",
            round(duration_ms, 2),
            service=service,
            endpoint=endpoint,
            success=error is None,
        )


def emit_metric(metric_name: str, value: float, **tags: Any) -> None:
    """
    Emit a metric.

    Args:
        metric_name: Metric name
        value: Metric value
        **tags: Metric tags/labels
    """
    logger.info(
        f"Metric: {metric_name}",
        extra={
            "metric_name": metric_name,
            "metric_value": value,
            "metric_tags": tags,
        }
    )


def emit_ingestion_metrics(received: int, accepted: int, rejected: int, failed: Optional[int] = None) -> None:
    """Emit the counters describing one ingestion request."""
    emit_metric("errors_received", received)
    emit_metric("errors_accepted", accepted)
    emit_metric("errors_rejected", rejected)
    if failed:
        emit_metric("errors_persist_failed", failed)
