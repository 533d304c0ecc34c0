"""
Tests for the command-line entry point.

## Test Perspectives Table

| Case ID | Input / Precondition | Perspective (Equivalence / Boundary) | Expected Result | Notes |
|---------|---------------------|---------------------------------------|-----------------|-------|
| TC-CLI-N-01 | graph <id> --fresh-only --stream | Equivalence - parsing | Namespace fields | - |
| TC-CLI-N-02 | graph <id> | Equivalence - output | Graph JSON on stdout, exit 0 | - |
| TC-CLI-N-03 | graph <id> --stream | Equivalence - output | One JSON line per item | - |
| TC-CLI-N-04 | usage / free-papers | Equivalence - output | JSON on stdout | - |
| TC-CLI-N-05 | main dispatch | Equivalence - wiring | Exit status from run_command | - |
| TC-CLI-A-01 | No subcommand | Abnormal - parsing | SystemExit | - |
| TC-CLI-A-02 | Upstream 401 | Abnormal - API error | Exit 1, error JSON on stderr | - |
"""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from connected_papers.apis.connected_papers import ConnectedPapersClient
from connected_papers.main import build_parser, main, run_command
from tests.conftest import START_ID, ChunkStream, make_graph_payload

# =============================================================================
# Test Fixtures
# =============================================================================


def _client(mock_transport, handler) -> ConnectedPapersClient:
    return ConnectedPapersClient("test-key", transport=mock_transport(handler))


# =============================================================================
# Tests
# =============================================================================


class TestParser:
    """Tests for argument parsing."""

    def test_graph_arguments(self) -> None:
        """TC-CLI-N-01: graph options are parsed."""
        args = build_parser().parse_args(["--log-level", "DEBUG", "graph", START_ID, "--fresh-only", "--stream"])

        assert args.command == "graph"
        assert args.paper_id == START_ID
        assert args.fresh_only is True
        assert args.stream is True
        assert args.log_level == "DEBUG"

    def test_command_required(self) -> None:
        """TC-CLI-A-01: A subcommand is required."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


@pytest.mark.asyncio
class TestRunCommand:
    """Tests for run_command with a mocked transport."""

    async def test_graph(self, mock_transport, capsys) -> None:
        """TC-CLI-N-02: The graph response is printed as JSON."""
        client = _client(mock_transport, lambda request: httpx.Response(200, json=make_graph_payload()))
        args = build_parser().parse_args(["graph", START_ID])

        status = await run_command(args, client)

        assert status == 0
        output = json.loads(capsys.readouterr().out)
        assert output["status"] == "FRESH_GRAPH"
        assert output["graph_json"]["start_id"] == START_ID

    async def test_graph_stream(self, mock_transport, capsys) -> None:
        """TC-CLI-N-03: Streamed items are printed one per line."""
        body = (
            json.dumps({"status": "QUEUED"}) + "\n" + json.dumps(make_graph_payload()) + "\n"
        ).encode("utf-8")
        client = _client(
            mock_transport, lambda request: httpx.Response(200, stream=ChunkStream([body]))
        )
        args = build_parser().parse_args(["graph", START_ID, "--stream"])

        status = await run_command(args, client)

        assert status == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert [json.loads(line)["status"] for line in lines] == ["QUEUED", "FRESH_GRAPH"]

    async def test_usage(self, mock_transport, capsys) -> None:
        """TC-CLI-N-04: Remaining usages are printed."""
        client = _client(mock_transport, lambda request: httpx.Response(200, json={"remaining": 5}))

        status = await run_command(build_parser().parse_args(["usage"]), client)

        assert status == 0
        assert json.loads(capsys.readouterr().out) == {"remaining_usages": 5}

    async def test_free_papers(self, mock_transport, capsys) -> None:
        """TC-CLI-N-04: Free papers are printed with their count."""
        client = _client(mock_transport, lambda request: httpx.Response(200, json={"papers": ["a", "b"]}))

        status = await run_command(build_parser().parse_args(["free-papers"]), client)

        assert status == 0
        assert json.loads(capsys.readouterr().out) == {"free_access_papers": ["a", "b"], "count": 2}

    async def test_api_error(self, mock_transport, capsys) -> None:
        """TC-CLI-A-02: API errors exit with 1 and a JSON error on stderr."""
        client = _client(mock_transport, lambda request: httpx.Response(401, text="Invalid API key"))

        status = await run_command(build_parser().parse_args(["usage"]), client)

        assert status == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert '"error_code": "http_status"' in captured.err


class TestMain:
    """Tests for main()."""

    def test_exit_status(self) -> None:
        """TC-CLI-N-05: main exits with run_command's status."""
        with (
            patch("connected_papers.main.initialize") as initialize,
            patch("connected_papers.main.run_command", new=AsyncMock(return_value=1)) as run,
        ):
            with pytest.raises(SystemExit) as exc_info:
                main(["--log-level", "ERROR", "usage"])

        assert exc_info.value.code == 1
        initialize.assert_called_once_with("ERROR")
        assert run.await_args.args[0].command == "usage"
