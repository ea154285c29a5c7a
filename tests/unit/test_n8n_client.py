"""
Unit tests for the n8n API client.
"""

import httpx
import pytest
from unittest.mock import AsyncMock, patch

from error_monitor.services.n8n_client import N8NClient, PAGE_SIZE
from error_monitor.services.upstream import TransientUpstreamError, UpstreamError


def _client(handler, api_key="n8n-key-1234567890", base_url="https://n8n.example.com", max_retries=3):
    return N8NClient(
        api_key=api_key,
        base_url=base_url,
        max_retries=max_retries,
        transport=httpx.MockTransport(handler),
    )


def _workflow(workflow_id, active=True):
    return {"id": workflow_id, "name": f"Workflow {workflow_id}", "active": active, "nodes": []}


@pytest.fixture
def no_sleep():
    """Skip backoff delays."""
    with patch("error_monitor.utils.resilience.asyncio.sleep", new=AsyncMock()) as mock_sleep:
        yield mock_sleep


class TestFetchAllWorkflows:
    """Test workflow listing."""

    @pytest.mark.asyncio
    async def test_follows_cursor(self):
        requests = []

        def handler(request):
            requests.append(request)
            if "cursor" not in request.url.params:
                return httpx.Response(200, json={"data": [_workflow("1"), _workflow("2", False)], "nextCursor": "abc"})
            return httpx.Response(200, json={"data": [_workflow("3")], "nextCursor": None})

        client = _client(handler)
        workflows = await client.fetch_all_workflows()
        await client.close()

        assert [w.id for w in workflows] == ["1", "2", "3"]
        assert requests[0].headers["X-N8N-API-KEY"] == "n8n-key-1234567890"
        assert requests[0].url.path == "/api/v1/workflows"
        assert requests[0].url.params["limit"] == str(PAGE_SIZE)
        assert requests[1].url.params["cursor"] == "abc"

    @pytest.mark.asyncio
    async def test_accepts_bare_list(self):
        client = _client(lambda request: httpx.Response(200, json=[_workflow(7)]))

        workflows = await client.fetch_all_workflows()

        assert [w.id for w in workflows] == ["7"]

    @pytest.mark.asyncio
    async def test_unknown_fields_are_kept(self):
        client = _client(lambda request: httpx.Response(
            200, json={"data": [dict(_workflow("1"), versionId="v9")]}
        ))

        workflow = (await client.fetch_all_workflows())[0]

        assert workflow.model_dump()["versionId"] == "v9"

    @pytest.mark.asyncio
    async def test_not_configured_returns_empty(self):
        def handler(request):
            raise AssertionError("no request expected")

        client = _client(handler, api_key=None)

        assert client.is_configured is False
        assert await client.fetch_all_workflows() == []

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, no_sleep):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(401, json={"message": "unauthorized"})

        client = _client(handler)

        with pytest.raises(UpstreamError) as exc_info:
            await client.fetch_all_workflows()

        assert exc_info.value.status_code == 401
        assert len(calls) == 1
        no_sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self, no_sleep):
        responses = iter([
            httpx.Response(503, text="unavailable"),
            httpx.Response(200, json={"data": [_workflow("1")]}),
        ])
        client = _client(lambda request: next(responses))

        workflows = await client.fetch_all_workflows()

        assert len(workflows) == 1
        assert no_sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, no_sleep):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        client = _client(handler, max_retries=2)

        with pytest.raises(TransientUpstreamError):
            await client.fetch_all_workflows()

        assert no_sleep.await_count == 1


class TestFetchWorkflowById:
    """Test single workflow lookup."""

    @pytest.mark.asyncio
    async def test_found(self):
        client = _client(lambda request: httpx.Response(200, json=_workflow("42")))

        workflow = await client.fetch_workflow_by_id("42")

        assert workflow.name == "Workflow 42"

    @pytest.mark.asyncio
    async def test_not_found_is_none(self):
        client = _client(lambda request: httpx.Response(404, json={"message": "not found"}))

        assert await client.fetch_workflow_by_id("missing") is None


class TestConfigurationStatus:
    """Test the connection check summary."""

    def test_configured(self):
        status = _client(lambda request: httpx.Response(200)).configuration_status()

        assert status["configured"]["hasApiKey"] is True
        assert status["configured"]["apiKeyPreview"] == "n8n-key-12..."
        assert status["testUrl"] == "https://n8n.example.com/api/v1/workflows"

    def test_not_configured(self):
        status = _client(lambda request: httpx.Response(200), api_key=None, base_url=None).configuration_status()

        assert status["configured"]["hasApiKey"] is False
        assert status["configured"]["apiKeyPreview"] == "NOT SET"
        assert status["testUrl"] is None
