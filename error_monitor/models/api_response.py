"""API response data models."""

from typing import Any, List, Optional

from pydantic import BaseModel

from error_monitor.models.error import CamelModel, ErrorRecord


class IngestionResponse(CamelModel):
    """Response from the error ingestion webhook."""

    success: bool
    received: int
    processed: int
    rejected: int
    message: str
    rejected_errors: Optional[List[Any]] = None
    warning: Optional[str] = None
    persistence_failures: Optional[int] = None


class ErrorListResponse(BaseModel):
    """One page of the error listing."""

    errors: List[ErrorRecord]
    total: int
    limit: int
    offset: int


class DebugErrorDump(BaseModel):
    """Debug listing of stored errors."""

    count: int
    errors: List[ErrorRecord]


class ActionResponse(BaseModel):
    """Outcome of a mutating request."""

    success: bool
    message: str


class FailureResponse(BaseModel):
    """Body of a failed request."""

    success: bool = False
    error: str
    message: Optional[str] = None
