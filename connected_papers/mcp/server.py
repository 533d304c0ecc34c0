"""
MCP Server implementation for connected-papers.
Provides Connected Papers tools that can be called by an LLM client over stdio.

Tools:
- get_graph: graph status, summary counts, build parameters and start paper
- get_paper_info: full record of the start paper of a graph
- get_remaining_usages: remaining API requests for the key
- get_free_access_papers: papers whose graphs need no API key
"""

import asyncio
import json
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from connected_papers.apis.connected_papers import ConnectedPapersClient
from connected_papers.apis.errors import ApiError
from connected_papers.mcp.errors import (
    GraphNotAvailableError,
    InvalidParamsError,
    MCPError,
    PaperNotFoundError,
    generate_error_id,
)
from connected_papers.utils.dotenv import load_dotenv_if_present
from connected_papers.utils.logging import LogContext, ensure_logging_configured, get_logger
from connected_papers.utils.schemas import GraphNode, GraphResponse
from connected_papers.version import __version__

ensure_logging_configured()
logger = get_logger(__name__)

# Create MCP server instance
app = Server(
    "connected-papers",
    version=__version__,
    instructions=(
        "MCP Server for Connected Papers. Provides tools to query paper graphs, "
        "get paper information, check API usage, and access free papers."
    ),
)

_client: ConnectedPapersClient | None = None


def _get_client() -> ConnectedPapersClient:
    """Get the shared API client (lazy initialization)."""
    global _client
    if _client is None:
        _client = ConnectedPapersClient()
    return _client


async def _close_client() -> None:
    global _client
    if _client is not None:
        await _client.close()
        _client = None


# ============================================================
# Tool Definitions
# ============================================================

_PAPER_ID_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {
            "type": "string",
            "description": "The (Semantic Scholar primary) ID of the paper",
        },
        "fresh_only": {
            "type": "boolean",
            "description": "If true, force a fresh graph rebuild (ignore cached graphs)",
            "default": False,
        },
    },
    "required": ["id"],
}

TOOLS = [
    Tool(
        name="get_graph",
        title="Get Paper Graph",
        description=(
            "Get the graph of a paper by its Semantic Scholar ID. "
            "Returns graph structure, status, and metadata."
        ),
        inputSchema=_PAPER_ID_SCHEMA,
    ),
    Tool(
        name="get_paper_info",
        title="Get Paper Info",
        description=(
            "Get detailed information about a paper from its graph, "
            "including title, authors, abstract, and metadata."
        ),
        inputSchema=_PAPER_ID_SCHEMA,
    ),
    Tool(
        name="get_remaining_usages",
        title="Get Remaining Usages",
        description="Get the remaining number of API requests available for your API key.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="get_free_access_papers",
        title="Get Free Access Papers",
        description="Get a list of paper IDs that have free access (no API key required).",
        inputSchema={"type": "object", "properties": {}},
    ),
]


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return TOOLS


@app.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls.

    Args:
        name: Tool name.
        arguments: Tool arguments.

    Returns:
        List of text content responses.
    """
    logger.info("Tool called", tool=name, arguments=arguments)

    try:
        with LogContext(tool=name):
            result = await _dispatch_tool(name, arguments or {})
        return [TextContent(type="text", text=json.dumps(result, ensure_ascii=False, indent=2))]
    except MCPError as e:
        logger.warning(
            "Tool MCP error",
            tool=name,
            error_code=e.code.value,
            error=e.message,
        )
        return [TextContent(type="text", text=json.dumps(e.to_dict(), ensure_ascii=False, indent=2))]
    except Exception as e:
        error_id = generate_error_id()
        logger.error(
            "Tool internal error",
            tool=name,
            error=str(e),
            error_id=error_id,
            exc_info=True,
        )
        error_result = {
            "ok": False,
            "error_code": "INTERNAL_ERROR",
            "error": f"Internal error: {type(e).__name__}",
            "error_id": error_id,
        }
        return [TextContent(type="text", text=json.dumps(error_result, ensure_ascii=False, indent=2))]


async def _dispatch_tool(name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    """Dispatch tool call to appropriate handler.

    Args:
        name: Tool name.
        arguments: Tool arguments.

    Returns:
        Tool result.
    """
    handlers = {
        "get_graph": _handle_get_graph,
        "get_paper_info": _handle_get_paper_info,
        "get_remaining_usages": _handle_get_remaining_usages,
        "get_free_access_papers": _handle_get_free_access_papers,
    }

    handler = handlers.get(name)
    if handler is None:
        raise InvalidParamsError(f"Unknown tool: {name}", param_name="name", received=name)

    return await handler(arguments)


# ============================================================
# Formatting
# ============================================================


def _author_names(node: GraphNode) -> list[str] | None:
    if node.authors is None:
        return None
    return [author.name or "Unknown" for author in node.authors]


def format_graph_response(response: GraphResponse) -> dict[str, Any]:
    """Summarize a graph response: status, counts, parameters and start paper."""
    result: dict[str, Any] = {"ok": True, "status": response.status.value}

    if response.progress is not None:
        result["progress"] = response.progress
    if response.remaining_requests is not None:
        result["remaining_requests"] = response.remaining_requests

    graph = response.graph_json
    if graph is None:
        return result

    result["graph"] = {
        "start_id": graph.start_id,
        "nodes_count": len(graph.nodes),
        "edges_count": len(graph.edges),
        "citations_count": len(graph.citations),
        "references_count": len(graph.references),
        "authors_count": len(graph.authors),
        "parameters": graph.parameters.model_dump(),
        "current_corpus_date": graph.current_corpus_date,
        "creation_time": graph.creation_time,
    }

    start_paper = graph.start_paper
    if start_paper is not None:
        result["start_paper"] = {
            "id": start_paper.id,
            "title": start_paper.title,
            "authors": _author_names(start_paper),
            "year": start_paper.year,
            "venue": start_paper.venue,
            "journal_name": start_paper.journal_name,
            "doi": start_paper.doi,
            "arxiv_id": start_paper.arxiv_id,
            "abstract": start_paper.abstract,
            "url": start_paper.url,
            "is_open_access": start_paper.is_open_access,
            "citations_length": start_paper.citations_length,
            "references_length": start_paper.references_length,
        }

    return result


# ============================================================
# Tool Handlers
# ============================================================


def _paper_args(args: dict[str, Any]) -> tuple[str, bool]:
    paper_id = args.get("id")
    if not isinstance(paper_id, str) or not paper_id.strip():
        raise InvalidParamsError(
            "id must be a non-empty string",
            param_name="id",
            expected="string",
            received=paper_id,
        )
    fresh_only = args.get("fresh_only", False)
    if not isinstance(fresh_only, bool):
        raise InvalidParamsError(
            "fresh_only must be a boolean",
            param_name="fresh_only",
            expected="boolean",
            received=fresh_only,
        )
    return paper_id.strip(), fresh_only


async def _handle_get_graph(args: dict[str, Any]) -> dict[str, Any]:
    """Handle get_graph tool call."""
    paper_id, fresh_only = _paper_args(args)

    with LogContext(paper_id=paper_id):
        try:
            response = await _get_client().get_graph(paper_id, fresh_only)
        except ApiError as e:
            raise MCPError.from_api_error(e, context="Failed to get graph") from e

    return format_graph_response(response)


async def _handle_get_paper_info(args: dict[str, Any]) -> dict[str, Any]:
    """Handle get_paper_info tool call.

    Returns the full start-paper record, or an error when the graph
    or the paper is missing.
    """
    paper_id, fresh_only = _paper_args(args)

    with LogContext(paper_id=paper_id):
        try:
            response = await _get_client().get_graph(paper_id, fresh_only)
        except ApiError as e:
            raise MCPError.from_api_error(e, context="Failed to get paper info") from e

    graph = response.graph_json
    if graph is None:
        raise GraphNotAvailableError(paper_id, response.status.value, response.progress)

    paper = graph.start_paper
    if paper is None:
        raise PaperNotFoundError(paper_id)

    result = paper.model_dump()
    result["ok"] = True
    return result


async def _handle_get_remaining_usages(args: dict[str, Any]) -> dict[str, Any]:
    """Handle get_remaining_usages tool call."""
    try:
        remaining = await _get_client().get_remaining_usages()
    except ApiError as e:
        raise MCPError.from_api_error(e, context="Failed to get remaining usages") from e
    return {"ok": True, "remaining_usages": remaining}


async def _handle_get_free_access_papers(args: dict[str, Any]) -> dict[str, Any]:
    """Handle get_free_access_papers tool call."""
    try:
        papers = await _get_client().get_free_access_papers()
    except ApiError as e:
        raise MCPError.from_api_error(e, context="Failed to get free access papers") from e
    return {"ok": True, "free_access_papers": papers, "count": len(papers)}


# ============================================================
# Entry point
# ============================================================


async def run_server() -> None:
    """Run the MCP server."""
    load_dotenv_if_present()
    client = _get_client()
    logger.info(
        "Starting connected-papers MCP server",
        tools=len(TOOLS),
        api_key_configured=client.has_api_key,
    )

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    finally:
        await _close_client()
        logger.info("connected-papers MCP server stopped")


def main() -> None:
    """Main entry point."""
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
