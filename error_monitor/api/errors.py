"""
Error listing, resolution tracking and analytics endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from error_monitor.api.dependencies import get_error_cache
from error_monitor.models.analytics import ErrorAnalytics
from error_monitor.models.api_response import ActionResponse, ErrorListResponse, FailureResponse
from error_monitor.models.error import ErrorSeverity, ErrorType, ErrorUpdate
from error_monitor.services.analytics import calculate_analytics
from error_monitor.services.error_cache import ErrorCache
from error_monitor.services.error_query import TimeRange, filter_errors, paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/errors", tags=["errors"])


def _failure(status_code: int, error: str, message: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=FailureResponse(error=error, message=message).model_dump(exclude_none=True),
    )


@router.get("", response_model=ErrorListResponse)
async def list_errors(
    limit: Optional[int] = Query(None, ge=0),
    offset: int = Query(0, ge=0),
    fixed: Optional[bool] = Query(None),
    severity: Optional[ErrorSeverity] = Query(None),
    error_type: Optional[ErrorType] = Query(None, alias="errorType"),
    workflow_id: Optional[str] = Query(None, alias="workflowId"),
    search: Optional[str] = Query(None),
    time_range: Optional[TimeRange] = Query(None, alias="timeRange"),
    cache: ErrorCache = Depends(get_error_cache),
) -> ErrorListResponse:
    """
    List errors, newest first.

    Served from the read cache; a store outage yields the last good listing
    rather than an error.

    Args:
        limit: Page size (all remaining errors when omitted)
        offset: Number of errors to skip
        fixed: Filter on the resolved flag
        severity: Filter on severity
        error_type: Filter on error type
        workflow_id: Filter on workflow
        search: Text search over workflow name, message and node name
        time_range: Lookback window

    Returns:
        One page of errors with the filtered total
    """
    errors = await cache.list_errors()
    filtered = filter_errors(
        errors,
        fixed=fixed,
        severity=severity,
        error_type=error_type,
        workflow_id=workflow_id,
        search=search,
        time_range=time_range,
    )
    page = paginate(filtered, limit=limit, offset=offset)

    return ErrorListResponse(
        errors=page,
        total=len(filtered),
        limit=limit if limit is not None else len(filtered),
        offset=offset,
    )


@router.patch("", response_model=ActionResponse)
async def update_error(
    request: Request,
    cache: ErrorCache = Depends(get_error_cache),
):
    """
    Update an error, typically to mark it resolved.

    Body: ``{"id": "...", <camelCase fields to change>}``

    Returns:
        Success message; 400 without an id, 404 when the store reports the
        error missing or the update failed
    """
    try:
        body = await request.json()
    except ValueError as e:
        return _failure(400, "Invalid request body", str(e))

    if not isinstance(body, dict):
        return _failure(400, "Invalid request body", "Expected a JSON object")

    fields = dict(body)
    error_id = fields.pop("id", None)
    if error_id is None or error_id == "":
        return _failure(400, "Error ID is required")

    try:
        update = ErrorUpdate.model_validate(fields)
    except ValidationError as e:
        return _failure(400, "Invalid update", str(e))

    error_id = str(error_id)
    updated = await cache.update_error(error_id, update.changes())

    if not updated:
        logger.warning(f"Update failed or error not found: {error_id}")
        return _failure(
            404,
            "Error not found or update failed",
            f"Could not update error {error_id}. Check that it exists and that the database is reachable.",
        )

    logger.info(f"Error {error_id} updated")
    return ActionResponse(success=True, message="Error updated successfully")


@router.delete("/{error_id}", response_model=ActionResponse)
async def delete_error(error_id: str, cache: ErrorCache = Depends(get_error_cache)):
    """
    Delete one error.

    Returns:
        Success message, or 404 when not found or the delete failed
    """
    deleted = await cache.delete_error(error_id)
    if not deleted:
        return _failure(404, "Error not found or delete failed")

    logger.info(f"Error {error_id} deleted")
    return ActionResponse(success=True, message="Error deleted successfully")


@router.get("/analytics", response_model=ErrorAnalytics)
async def get_analytics(cache: ErrorCache = Depends(get_error_cache)) -> ErrorAnalytics:
    """
    Analytics over all errors: totals, rate, trends and top workflows.
    """
    errors = await cache.list_errors()
    return calculate_analytics(errors)
