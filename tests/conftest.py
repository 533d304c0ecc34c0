"""
Pytest fixtures and configuration for connected-papers tests.

All HTTP traffic is served by httpx.MockTransport; no test touches the network.

Markers:
- @pytest.mark.unit: Single class/function, no external dependencies (default)
- @pytest.mark.integration: Several components wired together, HTTP mocked
"""

import os
from collections.abc import AsyncIterator, Callable, Iterable
from pathlib import Path
from typing import Any

import httpx
import pytest

# Point configuration at the repository config/ before anything loads it
os.environ.setdefault("CPAPERS_CONFIG_DIR", str(Path(__file__).resolve().parent.parent / "config"))

from connected_papers.utils.config import get_apis_config, get_settings  # noqa: E402
from connected_papers.utils.logging import configure_logging  # noqa: E402

START_ID = "9397e7acd062245d37350f5c05faf56e9cfae0d6"
NEIGHBOUR_ID = "649def34f8be52c8b66281af98ae884c09aef38b"


# =============================================================================
# Pytest Hooks
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests with no external dependencies (fast, <1s/test)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests with mocked external dependencies (<5s/test)"
    )


def pytest_collection_modifyitems(config, items):
    """Tests without explicit markers are classified as unit tests."""
    for item in items:
        if not any(m.name in ("unit", "integration") for m in item.iter_markers()):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging() -> None:
    """Route structlog through stdlib on stderr, quiet below WARNING."""
    configure_logging(log_level="WARNING", json_format=False)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterable[None]:
    """Drop real API keys and config overrides; reset cached config."""
    for key in list(os.environ):
        if key.startswith("CPAPERS_") and key != "CPAPERS_CONFIG_DIR":
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("CONNECTED_PAPERS_API_KEY", raising=False)
    monkeypatch.delenv("SEMANTIC_SCHOLAR_API_KEY", raising=False)
    get_settings.cache_clear()
    get_apis_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_apis_config.cache_clear()


# =============================================================================
# Payload Builders
# =============================================================================


def make_node(paper_id: str, title: str, **overrides: Any) -> dict[str, Any]:
    """Build a graph node as the graph endpoint sends it."""
    node = {
        "id": paper_id,
        "paperId": paper_id,
        "paper_id": paper_id,
        "corpus_id": 215416146,
        "title": title,
        "authors": [{"name": "Ada Lovelace", "ids": ["1741101"]}, {"name": None, "ids": []}],
        "year": 2020,
        "venue": "ACL",
        "journal_name": "Proceedings of ACL",
        "journal_volume": 1,
        "journal_pages": "1-10",
        "doi": "10.18653/v1/N18-3011",
        "pmid": None,
        "arxiv_id": "2106.15928",
        "mag_id": 112218234,
        "abstract": "An abstract.",
        "tldr": "A summary.",
        "url": f"https://www.semanticscholar.org/paper/{paper_id}",
        "pdf_urls": ["https://arxiv.org/pdf/2106.15928"],
        "is_open_access": True,
        "fields_of_study": ["Computer Science"],
        "publication_types": ["JournalArticle"],
        "publication_date": "2020-05-01",
        "citations_length": 42,
        "references_length": 17,
        "number_of_authors": 2,
        "path": [0.1, 0.2],
    }
    node.update(overrides)
    return node


def make_graph_payload(
    status: str = "FRESH_GRAPH",
    *,
    with_graph: bool = True,
    progress: float | None = None,
    remaining_requests: int | None = 99,
    start_id: str = START_ID,
) -> dict[str, Any]:
    """Build a graph endpoint response body."""
    payload: dict[str, Any] = {"status": status}
    if progress is not None:
        payload["progress"] = progress
    if remaining_requests is not None:
        payload["remaining_requests"] = remaining_requests
    if with_graph:
        payload["graph_json"] = {
            "start_id": start_id,
            "nodes": {
                START_ID: make_node(START_ID, "Origin paper"),
                NEIGHBOUR_ID: make_node(NEIGHBOUR_ID, "Neighbour paper"),
            },
            "edges": [[START_ID, NEIGHBOUR_ID, 0.42]],
            "citations": [],
            "references": [{"id": NEIGHBOUR_ID}],
            "authors": [],
            "parameters": {
                "paper_id": START_ID,
                "total_nodes": 40,
                "num_commons": 3,
                "max_load": 200,
                "num_neighbors": 12,
                "spring_iterations": 300,
            },
            "current_corpus_date": "2024-01-01",
            "creation_time": 1704067200,
        }
    return payload


# =============================================================================
# HTTP Fixtures
# =============================================================================


class ChunkStream(httpx.AsyncByteStream):
    """Response body delivered as fixed chunks, optionally failing at the end.

    Records whether the body was closed and how many chunks were pulled.
    """

    def __init__(self, chunks: Iterable[bytes], error: Exception | None = None):
        self.chunks = list(chunks)
        self.error = error
        self.pulled = 0
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            self.pulled += 1
            yield chunk
        if self.error is not None:
            raise self.error

    async def aclose(self) -> None:
        self.closed = True


async def iter_chunks(*chunks: bytes) -> AsyncIterator[bytes]:
    """Async byte source for GraphStreamReader."""
    for chunk in chunks:
        yield chunk


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    """Requests seen by the mock transport."""
    return []


@pytest.fixture
def mock_transport(
    recorded_requests: list[httpx.Request],
) -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.MockTransport]:
    """Factory wrapping a handler so every request is recorded."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.MockTransport:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        return httpx.MockTransport(recording_handler)

    return factory
