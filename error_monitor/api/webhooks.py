"""
Webhook endpoint receiving workflow errors from n8n.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from error_monitor.api.dependencies import get_error_cache, verify_api_key
from error_monitor.models.api_response import (
    ActionResponse,
    DebugErrorDump,
    FailureResponse,
    IngestionResponse,
)
from error_monitor.services.error_cache import ErrorCache
from error_monitor.services.ingestion import normalize_batch
from error_monitor.utils.logging import get_logger, log_ingestion_batch
from error_monitor.utils.metrics import emit_ingestion_metrics

logger = get_logger(__name__)

router = APIRouter(prefix="/api/webhook", tags=["webhooks"])

DEBUG_DUMP_LIMIT = 100

REJECTED_WARNING = "Some errors were rejected due to validation failures"
PERSISTENCE_WARNING = "Some errors could not be saved"


@router.post("/errors", response_model=IngestionResponse, response_model_exclude_none=True)
async def receive_errors(
    request: Request,
    cache: ErrorCache = Depends(get_error_cache),
):
    """
    Receive one error or a list of errors.

    This endpoint:
    1. Parses the JSON body (400 if it is not valid JSON)
    2. Normalizes each item from the n8n or canonical shape
    3. Persists accepted errors concurrently, each independently
    4. Reports accepted and rejected counts, echoing rejected items

    Args:
        request: FastAPI request object
        cache: Error cache

    Returns:
        IngestionResponse (HTTP 200 whenever the body parsed)
    """
    try:
        body = await request.json()
    except ValueError as e:
        logger.warning(f"Rejected webhook call with unparseable body: {e}")
        return JSONResponse(
            status_code=400,
            content=FailureResponse(error="Invalid request body", message=str(e)).model_dump(),
        )

    batch = normalize_batch(body)

    failed = 0
    if batch.accepted:
        result = await cache.create_errors(batch.accepted)
        failed = len(result.failed)

    log_ingestion_batch(
        logger,
        received=batch.received,
        accepted=len(batch.accepted),
        rejected=len(batch.rejected),
        persisted=len(batch.accepted) - failed,
    )
    emit_ingestion_metrics(batch.received, len(batch.accepted), len(batch.rejected), failed)

    warnings = []
    if batch.rejected:
        warnings.append(REJECTED_WARNING)
    if failed:
        warnings.append(PERSISTENCE_WARNING)

    return IngestionResponse(
        success=True,
        received=batch.received,
        processed=len(batch.accepted),
        rejected=len(batch.rejected),
        message=f"Successfully processed {len(batch.accepted)} error(s)",
        rejected_errors=batch.rejected or None,
        warning="; ".join(warnings) or None,
        persistence_failures=failed or None,
    )


@router.get("/errors", response_model=DebugErrorDump, dependencies=[Depends(verify_api_key)])
async def dump_errors(cache: ErrorCache = Depends(get_error_cache)) -> DebugErrorDump:
    """
    Debug listing of the most recent errors.

    Returns:
        Total count and the first 100 errors
    """
    errors = await cache.list_errors()
    return DebugErrorDump(count=len(errors), errors=errors[:DEBUG_DUMP_LIMIT])


@router.delete("/errors", response_model=ActionResponse, dependencies=[Depends(verify_api_key)])
async def clear_errors(cache: ErrorCache = Depends(get_error_cache)):
    """
    Delete every stored error. For testing only.

    Returns:
        Success message
    """
    try:
        await cache.clear_all()
    except Exception as e:
        logger.error(f"Error clearing errors: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=FailureResponse(error="Failed to clear errors", message=str(e)).model_dump(),
        )

    logger.warning("All errors cleared via debug endpoint")
    return ActionResponse(success=True, message="All errors cleared")
