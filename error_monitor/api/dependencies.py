"""
FastAPI dependencies shared by the routers.

Long-lived components are built once at startup and kept on ``app.state``;
routes reach them through these getters so tests can swap in fresh
instances with ``app.dependency_overrides``.
"""

from fastapi import Header, HTTPException, Request

from error_monitor.config import settings
from error_monitor.services.close_client import CloseClient
from error_monitor.services.error_cache import ErrorCache
from error_monitor.services.n8n_client import N8NClient


def get_error_cache(request: Request) -> ErrorCache:
    return request.app.state.error_cache


def get_n8n_client(request: Request) -> N8NClient:
    return request.app.state.n8n_client


def get_close_client(request: Request) -> CloseClient:
    return request.app.state.close_client


async def verify_api_key(x_api_key: str = Header(None)) -> None:
    """
    Verify API key for admin endpoints.

    Only enforced when ADMIN_API_KEY is configured.

    Args:
        x_api_key: API key from request header

    Raises:
        HTTPException: If API key is invalid or missing
    """
    expected_key = settings.admin_api_key
    if not expected_key:
        return

    if not x_api_key:
        raise HTTPException(status_code=401, detail="API key required")

    if x_api_key != expected_key:
        raise HTTPException(status_code=401, detail="Invalid API key")
