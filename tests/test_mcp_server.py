"""
Tests for the MCP server tools.

The shared ConnectedPapersClient is replaced with a mock; no HTTP is sent.

## Test Perspectives Table

| Case ID | Input / Precondition | Perspective (Equivalence / Boundary) | Expected Result | Notes |
|---------|---------------------|---------------------------------------|-----------------|-------|
| TC-MCP-N-01 | list_tools | Equivalence - registry | Four tools with schemas | - |
| TC-MCP-N-02 | get_graph, fresh graph | Equivalence - normal | Summary with counts and start paper | - |
| TC-MCP-N-03 | get_graph fresh_only=true | Equivalence - flag | Passed to client | - |
| TC-MCP-N-04 | get_paper_info | Equivalence - normal | Full start-paper record | - |
| TC-MCP-N-05 | get_remaining_usages | Equivalence - normal | remaining_usages | - |
| TC-MCP-N-06 | get_free_access_papers | Equivalence - normal | IDs and count | - |
| TC-MCP-N-07 | Shared client | Equivalence - lifecycle | Created once, closed on shutdown | - |
| TC-MCP-B-01 | get_graph while queued | Boundary - no graph | ok with status only | - |
| TC-MCP-B-02 | Author without name | Boundary - null | "Unknown" | - |
| TC-MCP-A-01 | Missing / blank id | Abnormal - params | INVALID_PARAMS | - |
| TC-MCP-A-02 | Non-boolean fresh_only | Abnormal - params | INVALID_PARAMS | - |
| TC-MCP-A-03 | get_paper_info without graph | Abnormal - state | GRAPH_NOT_AVAILABLE | - |
| TC-MCP-A-04 | get_paper_info start node absent | Abnormal - state | PAPER_NOT_FOUND | - |
| TC-MCP-A-05 | Client raises HttpStatusError | Abnormal - upstream | UPSTREAM_HTTP_ERROR with status | - |
| TC-MCP-A-06 | Client raises RuntimeError | Abnormal - internal | INTERNAL_ERROR with error_id | - |
| TC-MCP-A-07 | Unknown tool | Abnormal - dispatch | INVALID_PARAMS | - |
"""

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from connected_papers.apis.connected_papers import ConnectedPapersClient
from connected_papers.apis.errors import HttpStatusError, TransportError
from connected_papers.mcp import server
from connected_papers.utils.schemas import GraphResponse
from tests.conftest import NEIGHBOUR_ID, START_ID, make_graph_payload

# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def mock_client(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Mock ConnectedPapersClient installed as the server's shared client."""
    client = MagicMock(spec=ConnectedPapersClient)
    client.get_graph = AsyncMock(return_value=GraphResponse.model_validate(make_graph_payload()))
    client.get_remaining_usages = AsyncMock(return_value=42)
    client.get_free_access_papers = AsyncMock(return_value=[START_ID, NEIGHBOUR_ID])
    monkeypatch.setattr(server, "_get_client", lambda: client)
    return client


async def _call(name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    contents = await server.call_tool(name, arguments)
    assert len(contents) == 1
    return json.loads(contents[0].text)


# =============================================================================
# Tests
# =============================================================================


@pytest.mark.asyncio
class TestToolRegistry:
    """Tests for tool listing and client lifecycle."""

    async def test_list_tools(self) -> None:
        """TC-MCP-N-01: All tools are listed with object schemas."""
        tools = await server.list_tools()

        assert [t.name for t in tools] == [
            "get_graph",
            "get_paper_info",
            "get_remaining_usages",
            "get_free_access_papers",
        ]
        assert tools[0].inputSchema["required"] == ["id"]
        assert all(t.inputSchema["type"] == "object" for t in tools)

    async def test_shared_client(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """TC-MCP-N-07: One client per process, released on shutdown."""
        monkeypatch.setattr(server, "_client", None)

        first = server._get_client()
        second = server._get_client()
        await server._close_client()

        assert first is second
        assert isinstance(first, ConnectedPapersClient)
        assert server._client is None


@pytest.mark.asyncio
class TestGetGraphTool:
    """Tests for get_graph."""

    async def test_graph_summary(self, mock_client: MagicMock) -> None:
        """TC-MCP-N-02 / TC-MCP-B-02: Counts, parameters and start paper are summarized."""
        # When: Calling the tool
        result = await _call("get_graph", {"id": START_ID})

        # Then: Summary of the fresh graph
        mock_client.get_graph.assert_awaited_once_with(START_ID, False)
        assert result["ok"] is True
        assert result["status"] == "FRESH_GRAPH"
        assert result["remaining_requests"] == 99
        graph = result["graph"]
        assert graph["start_id"] == START_ID
        assert graph["nodes_count"] == 2
        assert graph["edges_count"] == 1
        assert graph["references_count"] == 1
        assert graph["citations_count"] == 0
        assert graph["parameters"]["num_neighbors"] == 12
        assert graph["creation_time"] == "1704067200"
        paper = result["start_paper"]
        assert paper["title"] == "Origin paper"
        assert paper["authors"] == ["Ada Lovelace", "Unknown"]
        assert paper["citations_length"] == 42

    async def test_fresh_only(self, mock_client: MagicMock) -> None:
        """TC-MCP-N-03: fresh_only is forwarded and the id trimmed."""
        await _call("get_graph", {"id": f"  {START_ID} ", "fresh_only": True})

        mock_client.get_graph.assert_awaited_once_with(START_ID, True)

    async def test_queued(self, mock_client: MagicMock) -> None:
        """TC-MCP-B-01: Without a graph only the status is returned."""
        mock_client.get_graph.return_value = GraphResponse.model_validate(
            make_graph_payload("QUEUED", with_graph=False, progress=0.0, remaining_requests=None)
        )

        result = await _call("get_graph", {"id": START_ID})

        assert result == {"ok": True, "status": "QUEUED", "progress": 0.0}

    @pytest.mark.parametrize("arguments", [{}, {"id": ""}, {"id": "   "}, {"id": 123}])
    async def test_invalid_id(self, mock_client: MagicMock, arguments: dict) -> None:
        """TC-MCP-A-01: The id must be a non-empty string."""
        result = await _call("get_graph", arguments)

        assert result["ok"] is False
        assert result["error_code"] == "INVALID_PARAMS"
        assert result["details"]["param_name"] == "id"
        mock_client.get_graph.assert_not_awaited()

    async def test_invalid_fresh_only(self, mock_client: MagicMock) -> None:
        """TC-MCP-A-02: fresh_only must be a boolean."""
        result = await _call("get_graph", {"id": START_ID, "fresh_only": "yes"})

        assert result["error_code"] == "INVALID_PARAMS"
        assert result["details"]["param_name"] == "fresh_only"

    async def test_upstream_http_error(self, mock_client: MagicMock) -> None:
        """TC-MCP-A-05: API errors are reported with their details."""
        mock_client.get_graph.side_effect = HttpStatusError(401, "Invalid API key")

        result = await _call("get_graph", {"id": START_ID})

        assert result["ok"] is False
        assert result["error_code"] == "UPSTREAM_HTTP_ERROR"
        assert result["error"] == "Failed to get graph: HTTP 401"
        assert result["details"]["status"] == 401

    async def test_internal_error(self, mock_client: MagicMock) -> None:
        """TC-MCP-A-06: Unexpected exceptions become INTERNAL_ERROR."""
        mock_client.get_graph.side_effect = RuntimeError("boom")

        result = await _call("get_graph", {"id": START_ID})

        assert result["ok"] is False
        assert result["error_code"] == "INTERNAL_ERROR"
        assert result["error"] == "Internal error: RuntimeError"
        assert result["error_id"].startswith("err_")


@pytest.mark.asyncio
class TestGetPaperInfoTool:
    """Tests for get_paper_info."""

    async def test_paper_info(self, mock_client: MagicMock) -> None:
        """TC-MCP-N-04: The full start-paper record is returned."""
        result = await _call("get_paper_info", {"id": START_ID})

        assert result["ok"] is True
        assert result["id"] == START_ID
        assert result["title"] == "Origin paper"
        assert result["abstract"] == "An abstract."
        assert result["journal_volume"] == "1"
        assert result["authors"][0] == {"name": "Ada Lovelace", "ids": ["1741101"]}

    async def test_graph_not_available(self, mock_client: MagicMock) -> None:
        """TC-MCP-A-03: A graph still being built is reported as unavailable."""
        mock_client.get_graph.return_value = GraphResponse.model_validate(
            make_graph_payload("IN_PROGRESS", with_graph=False, progress=55.0)
        )

        result = await _call("get_paper_info", {"id": START_ID})

        assert result["error_code"] == "GRAPH_NOT_AVAILABLE"
        assert result["error"] == "Graph not available. Status: IN_PROGRESS"
        assert result["details"]["progress"] == 55.0

    async def test_paper_not_in_graph(self, mock_client: MagicMock) -> None:
        """TC-MCP-A-04: A graph without the start node is PAPER_NOT_FOUND."""
        mock_client.get_graph.return_value = GraphResponse.model_validate(
            make_graph_payload(start_id="missing-paper")
        )

        result = await _call("get_paper_info", {"id": "missing-paper"})

        assert result["error_code"] == "PAPER_NOT_FOUND"
        assert result["details"] == {"paper_id": "missing-paper"}


@pytest.mark.asyncio
class TestAccountTools:
    """Tests for usage and free-access tools."""

    async def test_remaining_usages(self, mock_client: MagicMock) -> None:
        """TC-MCP-N-05: Remaining usages are returned."""
        assert await _call("get_remaining_usages", {}) == {"ok": True, "remaining_usages": 42}

    async def test_free_access_papers(self, mock_client: MagicMock) -> None:
        """TC-MCP-N-06: Free papers are returned with their count."""
        result = await _call("get_free_access_papers", {})

        assert result == {"ok": True, "free_access_papers": [START_ID, NEIGHBOUR_ID], "count": 2}

    async def test_transport_error(self, mock_client: MagicMock) -> None:
        """TC-MCP-A-05: Transport failures map to UPSTREAM_TRANSPORT_ERROR."""
        mock_client.get_remaining_usages.side_effect = TransportError("ConnectError: refused")

        result = await _call("get_remaining_usages", {})

        assert result["error_code"] == "UPSTREAM_TRANSPORT_ERROR"
        assert result["error"] == "Failed to get remaining usages: ConnectError: refused"

    async def test_unknown_tool(self, mock_client: MagicMock) -> None:
        """TC-MCP-A-07: Unknown tool names are invalid parameters."""
        result = await _call("delete_graph", {})

        assert result["error_code"] == "INVALID_PARAMS"
        assert result["error"] == "Unknown tool: delete_graph"
