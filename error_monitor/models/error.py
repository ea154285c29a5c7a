"""Workflow error data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class ErrorType(str, Enum):
    """Coarse classification of what went wrong."""
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    VALIDATION = "validation"
    RUNTIME = "runtime"
    OTHER = "other"


class ErrorSeverity(str, Enum):
    """Operator-facing severity of an error."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def coerce_error_type(value: Any) -> ErrorType:
    """Resolve any value to an ErrorType, defaulting to OTHER."""
    if isinstance(value, ErrorType):
        return value
    if isinstance(value, str):
        try:
            return ErrorType(value.strip().lower())
        except ValueError:
            pass
    return ErrorType.OTHER


def coerce_severity(value: Any) -> ErrorSeverity:
    """Resolve any value to an ErrorSeverity, defaulting to MEDIUM."""
    if isinstance(value, ErrorSeverity):
        return value
    if isinstance(value, str):
        try:
            return ErrorSeverity(value.strip().lower())
        except ValueError:
            pass
    return ErrorSeverity.MEDIUM


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    """Base model that speaks camelCase JSON and accepts snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorRecord(CamelModel):
    """A single workflow execution error, in canonical form."""

    id: str
    workflow_id: str
    workflow_name: str
    node_name: str
    error_message: str
    error_type: ErrorType = ErrorType.OTHER
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    timestamp: datetime
    execution_id: str
    retry_count: int = 0
    stack_trace: Optional[str] = None
    input_data: Optional[Any] = None
    output_data: Optional[Any] = None
    resolved: bool = False
    # Details carried over from the n8n payload
    error_level: Optional[str] = None
    node_type: Optional[str] = None

    @field_validator("error_type", mode="before")
    @classmethod
    def _default_error_type(cls, value: Any) -> ErrorType:
        return coerce_error_type(value)

    @field_validator("severity", mode="before")
    @classmethod
    def _default_severity(cls, value: Any) -> ErrorSeverity:
        return coerce_severity(value)

    @field_validator("retry_count", mode="before")
    @classmethod
    def _non_negative_retry_count(cls, value: Any) -> int:
        if isinstance(value, bool):
            return 0
        try:
            count = int(value)
        except (TypeError, ValueError, OverflowError):
            return 0
        return max(count, 0)

    @field_validator("timestamp")
    @classmethod
    def _utc_timestamp(cls, value: datetime) -> datetime:
        return as_utc(value)


class ErrorUpdate(CamelModel):
    """Partial update of an error record; only fields that were sent are applied."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    workflow_id: Optional[str] = None
    workflow_name: Optional[str] = None
    node_name: Optional[str] = None
    error_message: Optional[str] = None
    error_type: Optional[ErrorType] = None
    severity: Optional[ErrorSeverity] = None
    timestamp: Optional[datetime] = None
    execution_id: Optional[str] = None
    retry_count: Optional[int] = None
    stack_trace: Optional[str] = None
    input_data: Optional[Any] = None
    output_data: Optional[Any] = None
    resolved: Optional[bool] = None
    error_level: Optional[str] = None
    node_type: Optional[str] = None

    @field_validator("error_type", mode="before")
    @classmethod
    def _default_error_type(cls, value: Any) -> Optional[ErrorType]:
        return None if value is None else coerce_error_type(value)

    @field_validator("severity", mode="before")
    @classmethod
    def _default_severity(cls, value: Any) -> Optional[ErrorSeverity]:
        return None if value is None else coerce_severity(value)

    @field_validator("timestamp")
    @classmethod
    def _utc_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        return None if value is None else as_utc(value)

    # Fields the record always carries; an explicit null cannot be applied
    @field_validator(
        "workflow_id", "workflow_name", "node_name", "error_message",
        "error_type", "severity", "timestamp", "execution_id",
        "retry_count", "resolved",
    )
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("must not be null")
        return value

    def changes(self) -> dict:
        """Fields explicitly present in the request, keyed by snake_case name."""
        return self.model_dump(exclude_unset=True)
