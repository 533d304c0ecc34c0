"""
connected-papers: async client for the Connected Papers API,
with Semantic Scholar Graph API utilities.
"""

from connected_papers.apis import (
    ApiError,
    ConnectedPapersClient,
    GraphStreamReader,
    HttpStatusError,
    MalformedPayloadError,
    MissingApiKeyError,
    SemanticScholarClient,
    TransportError,
)
from connected_papers.utils.schemas import (
    Graph,
    GraphNode,
    GraphResponse,
    GraphResponseStatus,
    StreamItem,
)
from connected_papers.version import __version__

__all__ = [
    "__version__",
    "ConnectedPapersClient",
    "SemanticScholarClient",
    "GraphStreamReader",
    "ApiError",
    "HttpStatusError",
    "MalformedPayloadError",
    "MissingApiKeyError",
    "TransportError",
    "Graph",
    "GraphNode",
    "GraphResponse",
    "GraphResponseStatus",
    "StreamItem",
]
