"""
Close CRM API client for the metadata lookups shown on the search-ids page.

Close authenticates with HTTP Basic auth: the API key is the username and
the password is empty.
"""

from typing import List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from error_monitor.models.upstream import CloseCustomField, CloseStatus, CloseUser
from error_monitor.services.upstream import (
    UpstreamClient,
    UpstreamNotConfiguredError,
    extract_collection,
)
from error_monitor.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.close.com/api/v1"

M = TypeVar("M", bound=BaseModel)


class CloseClient(UpstreamClient):
    """Read-only access to Close custom fields, statuses and users."""

    service = "close"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or ""
        super().__init__(
            base_url=base_url,
            auth=httpx.BasicAuth(self.api_key, ""),
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
        )

    async def _fetch_collection(self, path: str, model: Type[M], label: str) -> List[M]:
        if not self.api_key:
            logger.error("CLOSE_API_KEY is not configured")
            raise UpstreamNotConfiguredError("Close API key is not configured")

        data = await self._get_json(path)
        items = [model.model_validate(item) for item in extract_collection(data, "data", "results")]

        logger.info(f"Fetched {len(items)} Close {label}")
        return items

    async def fetch_lead_custom_fields(self) -> List[CloseCustomField]:
        return await self._fetch_collection("/custom_field/lead/", CloseCustomField, "lead custom fields")

    async def fetch_opportunity_custom_fields(self) -> List[CloseCustomField]:
        return await self._fetch_collection(
            "/custom_field/opportunity/", CloseCustomField, "opportunity custom fields"
        )

    async def fetch_users(self) -> List[CloseUser]:
        return await self._fetch_collection("/user/", CloseUser, "users")

    async def fetch_lead_statuses(self) -> List[CloseStatus]:
        return await self._fetch_collection("/status/lead/", CloseStatus, "lead statuses")

    async def fetch_opportunity_statuses(self) -> List[CloseStatus]:
        return await self._fetch_collection("/status/opportunity/", CloseStatus, "opportunity statuses")


def get_close_client() -> CloseClient:
    """
    Factory function to create CloseClient with settings from config.
    """
    from error_monitor.config import settings

    return CloseClient(
        api_key=settings.close_api_key,
        base_url=settings.close_base_url,
        timeout=settings.upstream_timeout_seconds,
        max_retries=settings.upstream_max_retries,
    )
