"""
n8n public API client.

Only workflow lookups are needed: the dashboard lists workflows so operators
can match errors to the automation that produced them.
"""

from typing import Any, List, Optional

import httpx

from error_monitor.models.upstream import N8NWorkflow
from error_monitor.services.upstream import UpstreamClient, UpstreamError, extract_collection
from error_monitor.utils.logging import get_logger


logger = get_logger(__name__)

PAGE_SIZE = 250
MAX_PAGES = 100


class N8NClient(UpstreamClient):
    """
    Reads workflows from an n8n instance.

    When the API key or base URL is missing the client stays usable and
    reports no workflows.
    """

    service = "n8n"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str],
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or ""
        super().__init__(
            base_url=base_url or "",
            headers={"X-N8N-API-KEY": self.api_key},
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.base_url)

    def configuration_status(self) -> dict:
        """Summary for the connection check endpoint; never reveals the full key."""
        return {
            "configured": {
                "hasApiKey": bool(self.api_key),
                "baseUrl": self.base_url or None,
                "apiKeyPreview": f"{self.api_key[:10]}..." if self.api_key else "NOT SET",
            },
            "testUrl": f"{self.base_url}/api/v1/workflows" if self.base_url else None,
            "instructions": "Set N8N_API_KEY and N8N_BASE_URL in the environment or .env",
        }

    @staticmethod
    def _parse_page(data: Any) -> tuple[List[Any], Optional[str]]:
        """Workflows and next cursor from one page, whatever shape it came in."""
        if isinstance(data, dict) and isinstance(data.get("workflow"), dict):
            return [data["workflow"]], None

        workflows = extract_collection(data, "data", "workflows")
        next_cursor = None
        if isinstance(data, dict):
            next_cursor = data.get("nextCursor") or data.get("cursor") or None
        return workflows, next_cursor

    async def fetch_all_workflows(self) -> List[N8NWorkflow]:
        """
        Fetch every workflow, following cursor pagination.

        Returns:
            List of workflows; empty when the client is not configured

        Raises:
            UpstreamError: If a page cannot be fetched
        """
        if not self.is_configured:
            logger.warning("n8n API not configured, returning no workflows")
            return []

        workflows: List[N8NWorkflow] = []
        cursor: Optional[str] = None

        for page in range(1, MAX_PAGES + 1):
            params = {"limit": PAGE_SIZE}
            if cursor:
                params["cursor"] = cursor

            data = await self._get_json("/api/v1/workflows", params=params)
            page_workflows, cursor = self._parse_page(data)
            workflows.extend(N8NWorkflow.model_validate(item) for item in page_workflows)

            logger.debug(f"Fetched n8n workflow page {page}: {len(page_workflows)} workflow(s)")

            if not cursor:
                break
        else:
            logger.warning(f"Stopped n8n pagination after {MAX_PAGES} pages")

        active = sum(1 for workflow in workflows if workflow.active)
        logger.info(f"Fetched {len(workflows)} n8n workflows ({active} active)")
        return workflows

    async def fetch_workflow_by_id(self, workflow_id: str) -> Optional[N8NWorkflow]:
        """
        Fetch one workflow.

        Returns:
            The workflow, or None when not configured, not found or the call fails
        """
        if not self.is_configured:
            logger.warning("n8n API not configured")
            return None

        try:
            data = await self._get_json(f"/api/v1/workflows/{workflow_id}")
            return N8NWorkflow.model_validate(data)
        except (UpstreamError, ValueError) as e:
            logger.error(f"Failed to fetch n8n workflow {workflow_id}: {e}")
            return None


def get_n8n_client() -> N8NClient:
    """
    Factory function to create N8NClient with settings from config.
    """
    from error_monitor.config import settings

    return N8NClient(
        api_key=settings.n8n_api_key,
        base_url=settings.n8n_base_url,
        timeout=settings.upstream_timeout_seconds,
        max_retries=settings.upstream_max_retries,
    )
