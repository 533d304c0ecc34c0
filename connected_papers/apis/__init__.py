"""
API clients for connected-papers.

Provides async clients for:
- Connected Papers (paper graphs, usage, free-access papers)
- Semantic Scholar Graph API (paper lookup and search)
"""

from connected_papers.apis.base import BaseApiClient
from connected_papers.apis.connected_papers import ConnectedPapersClient
from connected_papers.apis.errors import (
    ApiError,
    ApiErrorKind,
    HttpStatusError,
    InvalidParameterError,
    MalformedPayloadError,
    MissingApiKeyError,
    TransportError,
)
from connected_papers.apis.semantic_scholar import SemanticScholarClient
from connected_papers.apis.stream import GraphStreamReader

__all__ = [
    "BaseApiClient",
    "ConnectedPapersClient",
    "SemanticScholarClient",
    "GraphStreamReader",
    "ApiError",
    "ApiErrorKind",
    "HttpStatusError",
    "InvalidParameterError",
    "MalformedPayloadError",
    "MissingApiKeyError",
    "TransportError",
]
