"""
Main entry point for connected-papers.

Commands:
    connected-papers graph <paper_id> [--fresh-only] [--stream]
    connected-papers usage
    connected-papers free-papers
    connected-papers mcp

Results are printed as JSON on stdout; logs and errors go to stderr.
"""

import argparse
import asyncio
import json
import sys
from typing import Any

from connected_papers.apis.connected_papers import ConnectedPapersClient
from connected_papers.apis.errors import ApiError
from connected_papers.utils.config import get_settings
from connected_papers.utils.dotenv import load_dotenv_if_present
from connected_papers.utils.logging import configure_logging, get_logger


def initialize(log_level: str | None = None) -> None:
    """Initialize logging and environment."""
    settings = get_settings()
    configure_logging(log_level=log_level or settings.general.log_level)
    load_dotenv_if_present()

    logger = get_logger(__name__)
    logger.debug(
        "connected-papers initializing",
        version=settings.general.version,
        log_level=log_level or settings.general.log_level,
    )


def _print_json(data: Any, *, indent: int | None = 2) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=indent), flush=True)


async def run_graph(client: ConnectedPapersClient, paper_id: str, fresh_only: bool, stream: bool) -> None:
    """Print the graph response, or one JSON line per streamed item."""
    if not stream:
        response = await client.get_graph(paper_id, fresh_only)
        _print_json(response.model_dump(mode="json"))
        return

    async with client.get_graph_stream(paper_id, fresh_only) as items:
        async for item in items:
            _print_json(item.model_dump(mode="json"), indent=None)


async def run_command(args: argparse.Namespace, client: ConnectedPapersClient | None = None) -> int:
    """Run one CLI command.

    Returns:
        Process exit status (0 on success, 1 on API error).
    """
    logger = get_logger(__name__)
    owns_client = client is None
    if client is None:
        client = ConnectedPapersClient()

    try:
        if args.command == "graph":
            await run_graph(client, args.paper_id, args.fresh_only, args.stream)
        elif args.command == "usage":
            _print_json({"remaining_usages": await client.get_remaining_usages()})
        elif args.command == "free-papers":
            papers = await client.get_free_access_papers()
            _print_json({"free_access_papers": papers, "count": len(papers)})
        return 0
    except ApiError as e:
        logger.error("Command failed", command=args.command, error=e.message, kind=e.kind.value)
        print(json.dumps(e.to_dict(), ensure_ascii=False), file=sys.stderr)
        return 1
    finally:
        if owns_client:
            await client.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="connected-papers",
        description="Connected Papers API client",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (DEBUG, INFO, WARNING, ERROR); defaults to settings",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    graph = subparsers.add_parser("graph", help="Fetch the graph of a paper")
    graph.add_argument("paper_id", help="Semantic Scholar paper ID")
    graph.add_argument(
        "--fresh-only",
        action="store_true",
        help="Ask for a rebuilt graph instead of a cached one",
    )
    graph.add_argument(
        "--stream",
        action="store_true",
        help="Print incremental responses as JSON lines",
    )

    subparsers.add_parser("usage", help="Show remaining API requests")
    subparsers.add_parser("free-papers", help="List papers with free access")
    subparsers.add_parser("mcp", help="Run the MCP server on stdio")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    initialize(args.log_level)

    if args.command == "mcp":
        from connected_papers.mcp.server import run_server

        asyncio.run(run_server())
        return

    sys.exit(asyncio.run(run_command(args)))


if __name__ == "__main__":
    main()
