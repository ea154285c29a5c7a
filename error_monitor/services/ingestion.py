"""
Normalization of inbound error payloads.

Two payload shapes are accepted:

- the n8n error-workflow payload (``workflow`` + ``execution`` objects, or an
  ``error_summary`` object), mapped field by field with fallbacks;
- the canonical ``ErrorRecord`` shape, copied with defaults filled in.

Everything else is rejected. One bad item never fails the rest of a batch.
"""

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from error_monitor.models.error import (
    ErrorRecord,
    ErrorSeverity,
    ErrorType,
    as_utc,
    coerce_error_type,
    coerce_severity,
)
from error_monitor.utils.logging import get_logger

logger = get_logger(__name__)

CANONICAL_REQUIRED_FIELDS = ("workflowId", "workflowName", "nodeName", "errorMessage")

# Checked in order; the first matching group wins
_ERROR_TYPE_KEYWORDS = (
    (ErrorType.TIMEOUT, ("timeout", "timed out")),
    (ErrorType.CONNECTION, ("connection", "connect", "network")),
    (ErrorType.VALIDATION, ("validation", "invalid", "permission")),
    (ErrorType.RUNTIME, ("runtime", "execution")),
)

_SEVERITY_KEYWORDS = (
    (ErrorSeverity.CRITICAL, ("error", "critical")),
    (ErrorSeverity.HIGH, ("warning", "high")),
    (ErrorSeverity.LOW, ("info", "low")),
)

_ID_ALPHABET = string.ascii_lowercase + string.digits


class PayloadFormat(str, Enum):
    """Structural shape of one inbound item."""
    FOREIGN = "n8n"
    CANONICAL = "canonical"
    UNKNOWN = "unknown"


@dataclass
class NormalizedBatch:
    """Result of normalizing one request body."""

    received: int = 0
    accepted: List[ErrorRecord] = field(default_factory=list)
    rejected: List[Any] = field(default_factory=list)


def _now_ms(now: datetime) -> int:
    return int(now.timestamp() * 1000)


def _random_suffix(length: int) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def generate_error_id(now: datetime) -> str:
    return f"error-{_now_ms(now)}-{_random_suffix(7)}"


def generate_execution_id(now: datetime) -> str:
    return f"exec-{_now_ms(now)}"


def classify_payload(item: Any) -> PayloadFormat:
    """
    Decide which shape an inbound item has.

    Args:
        item: One decoded JSON value

    Returns:
        FOREIGN for n8n payloads, CANONICAL for items carrying the four
        required string fields, UNKNOWN otherwise
    """
    if not isinstance(item, dict):
        return PayloadFormat.UNKNOWN

    has_run_context = isinstance(item.get("workflow"), dict) and isinstance(item.get("execution"), dict)
    if has_run_context or isinstance(item.get("error_summary"), dict):
        return PayloadFormat.FOREIGN

    if all(isinstance(item.get(name), str) for name in CANONICAL_REQUIRED_FIELDS):
        return PayloadFormat.CANONICAL

    return PayloadFormat.UNKNOWN


def map_error_level_to_severity(level: Optional[str]) -> ErrorSeverity:
    """Map an n8n error level (free text) to a severity; unknown levels are MEDIUM."""
    if not isinstance(level, str) or not level:
        return ErrorSeverity.MEDIUM

    level_lower = level.lower()
    for severity, keywords in _SEVERITY_KEYWORDS:
        if any(keyword in level_lower for keyword in keywords):
            return severity
    return ErrorSeverity.MEDIUM


def determine_error_type(message: Optional[str]) -> ErrorType:
    """Classify an error by keywords in its message."""
    if not isinstance(message, str) or not message:
        return ErrorType.OTHER

    message_lower = message.lower()
    for error_type, keywords in _ERROR_TYPE_KEYWORDS:
        if any(keyword in message_lower for keyword in keywords):
            return error_type
    return ErrorType.OTHER


def coerce_timestamp(value: Any, default: datetime) -> datetime:
    """
    Parse a timestamp from any representation a webhook might send.

    Accepts datetimes, ISO 8601 strings (``Z`` suffix included), and epoch
    milliseconds as numbers or numeric strings. Anything else, including
    out-of-range numbers, yields ``default``.
    """
    if isinstance(value, datetime):
        return as_utc(value)

    if isinstance(value, bool) or value is None:
        return default

    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)

        if isinstance(value, str):
            text = value.strip()
            if not text:
                return default
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            try:
                return as_utc(datetime.fromisoformat(text))
            except ValueError:
                return datetime.fromtimestamp(float(text) / 1000, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return default

    return default


def _ident(*candidates: Any) -> Optional[str]:
    """First usable identifier; n8n sends numeric ids on older instances."""
    for candidate in candidates:
        if isinstance(candidate, bool):
            continue
        if isinstance(candidate, int):
            return str(candidate)
        if isinstance(candidate, str) and candidate:
            return candidate
    return None


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text(*candidates: Any) -> Optional[str]:
    """First non-empty string among ``candidates``."""
    for candidate in candidates:
        if isinstance(candidate, str) and candidate:
            return candidate
    return None


def transform_foreign_error(payload: Dict[str, Any], now: datetime) -> ErrorRecord:
    """
    Map an n8n error-workflow payload to an ErrorRecord.

    Args:
        payload: Item classified as FOREIGN
        now: Ingestion time, used for defaults

    Returns:
        Canonical error record
    """
    workflow = _dict(payload.get("workflow"))
    execution = _dict(payload.get("execution"))
    error = _dict(execution.get("error"))
    node = _dict(error.get("node"))
    summary = _dict(payload.get("error_summary"))

    workflow_id = _ident(workflow.get("id"), summary.get("workflow_id")) or "unknown"
    workflow_name = _text(workflow.get("name"), summary.get("workflow_name")) or "Unknown Workflow"
    execution_id = (
        _ident(execution.get("id"), summary.get("execution_id"))
        or generate_execution_id(now)
    )
    node_name = _text(node.get("name"), execution.get("lastNodeExecuted")) or "Unknown Node"
    error_message = _text(error.get("message"), error.get("description")) or "Unknown error occurred"

    # Top-level time first, then the summary time, then ingestion time
    timestamp = coerce_timestamp(
        payload.get("timestamp"),
        coerce_timestamp(summary.get("error_occurred_at"), now),
    )

    level = _text(error.get("level"))
    node_type = _text(node.get("type"))

    return ErrorRecord(
        id=f"error-{execution_id}-{_now_ms(now)}-{_random_suffix(4)}",
        workflow_id=workflow_id,
        workflow_name=workflow_name,
        node_name=node_name,
        error_message=error_message,
        error_type=determine_error_type(error_message),
        severity=map_error_level_to_severity(level),
        timestamp=timestamp,
        execution_id=execution_id,
        retry_count=0,
        stack_trace=_text(error.get("stack")),
        input_data=node.get("parameters"),
        output_data={
            "executionUrl": execution.get("url"),
            "mode": execution.get("mode"),
            "nodeType": node_type,
            "nodeId": node.get("id"),
        },
        resolved=False,
        error_level=level or "warning",
        node_type=node_type,
    )


def normalize_canonical_error(payload: Dict[str, Any], now: datetime) -> ErrorRecord:
    """
    Fill defaults into an item already in canonical shape.

    Args:
        payload: Item classified as CANONICAL
        now: Ingestion time, used for defaults

    Returns:
        Canonical error record
    """
    return ErrorRecord(
        id=_ident(payload.get("id")) or generate_error_id(now),
        workflow_id=payload["workflowId"],
        workflow_name=payload["workflowName"],
        node_name=payload["nodeName"],
        error_message=payload["errorMessage"],
        error_type=(
            determine_error_type(payload["errorMessage"])
            if payload.get("errorType") is None
            else coerce_error_type(payload["errorType"])
        ),
        severity=coerce_severity(payload.get("severity")),
        timestamp=coerce_timestamp(payload.get("timestamp"), now),
        execution_id=_ident(payload.get("executionId")) or generate_execution_id(now),
        retry_count=payload.get("retryCount", 0),
        stack_trace=_text(payload.get("stackTrace")),
        input_data=payload.get("inputData"),
        output_data=payload.get("outputData"),
        resolved=payload.get("resolved") is True,
        error_level=_text(payload.get("errorLevel")),
        node_type=_text(payload.get("nodeType")),
    )


def normalize_item(item: Any, now: datetime) -> Optional[ErrorRecord]:
    """Normalize one item; None means the item is rejected."""
    payload_format = classify_payload(item)

    try:
        if payload_format is PayloadFormat.FOREIGN:
            return transform_foreign_error(item, now)
        if payload_format is PayloadFormat.CANONICAL:
            return normalize_canonical_error(item, now)
    except Exception as e:
        logger.warning(
            f"Dropping {payload_format.value} error payload that failed to normalize: {e}",
            extra={"payload_format": payload_format.value}
        )
    return None


def normalize_batch(body: Any, now: Optional[datetime] = None) -> NormalizedBatch:
    """
    Normalize a request body holding one error object or a list of them.

    Args:
        body: Decoded JSON request body
        now: Ingestion time (defaults to the current UTC time)

    Returns:
        NormalizedBatch partitioning the items into accepted and rejected
    """
    now = now or datetime.now(timezone.utc)
    items = body if isinstance(body, list) else [body]

    batch = NormalizedBatch(received=len(items))
    for item in items:
        record = normalize_item(item, now)
        if record is None:
            batch.rejected.append(item)
        else:
            batch.accepted.append(record)

    return batch
