"""
n8n workflow lookup endpoints.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from error_monitor.api.dependencies import get_n8n_client
from error_monitor.models.api_response import FailureResponse
from error_monitor.services.n8n_client import N8NClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["workflows"])


@router.get("/workflows")
async def list_workflows(client: N8NClient = Depends(get_n8n_client)):
    """
    List all n8n workflows.

    Returns:
        ``{"workflows": [...], "total": n}``; 500 when n8n cannot be reached
    """
    try:
        workflows = await client.fetch_all_workflows()
    except Exception as e:
        logger.error(f"Error fetching workflows: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=FailureResponse(error="Failed to fetch workflows", message=str(e)).model_dump(),
        )

    return {
        "workflows": [workflow.model_dump(mode="json") for workflow in workflows],
        "total": len(workflows),
    }


@router.get("/workflows/{workflow_id}")
async def get_workflow(workflow_id: str, client: N8NClient = Depends(get_n8n_client)):
    """Fetch one n8n workflow."""
    workflow = await client.fetch_workflow_by_id(workflow_id)
    if workflow is None:
        return JSONResponse(
            status_code=404,
            content=FailureResponse(error=f"Workflow {workflow_id} not found").model_dump(exclude_none=True),
        )
    return workflow.model_dump(mode="json")


@router.get("/test-n8n")
async def check_n8n_configuration(client: N8NClient = Depends(get_n8n_client)) -> dict:
    """Report whether the n8n API is configured, without exposing the key."""
    return client.configuration_status()
