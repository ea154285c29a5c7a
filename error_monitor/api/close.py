"""
Close CRM metadata lookup endpoints.
"""

import logging
from typing import Awaitable, Callable, List

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from error_monitor.api.dependencies import get_close_client
from error_monitor.services.close_client import CloseClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/close", tags=["close"])


async def _respond(label: str, fetch: Callable[[], Awaitable[List[BaseModel]]]):
    try:
        items = await fetch()
    except Exception as e:
        logger.error(f"Error fetching Close {label}: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return {"success": True, "data": [item.model_dump(mode="json") for item in items]}


@router.get("/custom-fields")
async def lead_custom_fields(client: CloseClient = Depends(get_close_client)):
    """Lead custom field definitions."""
    return await _respond("lead custom fields", client.fetch_lead_custom_fields)


@router.get("/opportunity-custom-fields")
async def opportunity_custom_fields(client: CloseClient = Depends(get_close_client)):
    """Opportunity custom field definitions."""
    return await _respond("opportunity custom fields", client.fetch_opportunity_custom_fields)


@router.get("/users")
async def users(client: CloseClient = Depends(get_close_client)):
    """Users of the Close organization."""
    return await _respond("users", client.fetch_users)


@router.get("/lead-statuses")
async def lead_statuses(client: CloseClient = Depends(get_close_client)):
    return await _respond("lead statuses", client.fetch_lead_statuses)


@router.get("/opportunity-statuses")
async def opportunity_statuses(client: CloseClient = Depends(get_close_client)):
    return await _respond("opportunity statuses", client.fetch_opportunity_statuses)
