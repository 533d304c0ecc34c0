"""
Connected Papers API client.

Graph, usage and free-access endpoints of
https://rest.prod.connectedpapers.com/papers-api
"""

import json
import os
import re
from collections.abc import AsyncIterator
from typing import Any

import httpx
from pydantic import ValidationError

from connected_papers.apis.base import BaseApiClient
from connected_papers.apis.errors import (
    HttpStatusError,
    MalformedPayloadError,
    MissingApiKeyError,
)
from connected_papers.apis.stream import GraphStreamReader
from connected_papers.utils.dotenv import load_dotenv_if_present
from connected_papers.utils.logging import get_logger
from connected_papers.utils.schemas import GraphResponse

logger = get_logger(__name__)

API_KEY_ENV = "CONNECTED_PAPERS_API_KEY"

STREAM_ACCEPT = "application/x-ndjson, text/event-stream"

_INTEGER = re.compile(r"-?\d+", re.ASCII)


class ConnectedPapersClient(BaseApiClient):
    """Connected Papers API client.

    The API key is sent in the X-Api-Key header on every call.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(
            "connected_papers",
            api_key,
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "ConnectedPapersClient":
        """Create a client from CONNECTED_PAPERS_API_KEY.

        A project-local .env is loaded first when present.

        Raises:
            MissingApiKeyError: The variable is unset or empty.
        """
        load_dotenv_if_present()
        api_key = os.environ.get(API_KEY_ENV)
        if not api_key:
            raise MissingApiKeyError(API_KEY_ENV)
        return cls(api_key, **kwargs)

    @staticmethod
    def _graph_path(paper_id: str, fresh_only: bool) -> str:
        return f"/graph/{int(fresh_only)}/{paper_id}"

    async def get_graph(self, paper_id: str, fresh_only: bool = False) -> GraphResponse:
        """Fetch the graph of a paper.

        Args:
            paper_id: Semantic Scholar paper ID of the origin paper
            fresh_only: Ask for a rebuilt graph instead of a cached one

        Returns:
            GraphResponse (check .status before using .graph_json)

        Raises:
            TransportError, HttpStatusError, MalformedPayloadError
        """
        logger.debug("Fetching graph", paper_id=paper_id, fresh_only=fresh_only)
        data = await self._request_json("GET", self._graph_path(paper_id, fresh_only))
        try:
            response = GraphResponse.model_validate(data)
        except ValidationError as e:
            raise MalformedPayloadError(
                f"unexpected graph response: {e.error_count()} validation error(s)",
                payload=json.dumps(data),
            ) from e

        logger.info(
            "Graph fetched",
            paper_id=paper_id,
            status=response.status.value,
            remaining_requests=response.remaining_requests,
        )
        return response

    def get_graph_stream(self, paper_id: str, fresh_only: bool = False) -> GraphStreamReader:
        """Stream incremental graph responses for a paper.

        Nothing is sent until the first item is pulled. A non-2xx status
        is raised as HttpStatusError from that first pull.

        Example:
            async with client.get_graph_stream(paper_id) as stream:
                async for item in stream:
                    print(item.status, item.progress)
        """
        return GraphStreamReader(self._iter_graph_chunks(paper_id, fresh_only))

    async def _iter_graph_chunks(self, paper_id: str, fresh_only: bool) -> AsyncIterator[bytes]:
        session = await self._get_session()
        url = self._url(self._graph_path(paper_id, fresh_only))
        headers = {"Accept": STREAM_ACCEPT, **self._auth_headers()}

        async with session.stream("GET", url, headers=headers) as response:
            if not response.is_success:
                body = await response.aread()
                raise HttpStatusError(
                    response.status_code,
                    body.decode("utf-8", errors="replace"),
                    url=url,
                )
            logger.debug("Graph stream opened", paper_id=paper_id, fresh_only=fresh_only)
            async for chunk in response.aiter_bytes():
                yield chunk

    async def get_remaining_usages(self) -> int:
        """Get the remaining number of API requests for the key.

        Accepts {"remaining": N} (missing key counts as 0), a bare JSON
        number, or a plain-text ASCII integer body.
        """
        response = await self._request("GET", "/remaining-usages")
        if not response.is_success:
            raise HttpStatusError(response.status_code, response.text, url=str(response.url))

        text = response.text.strip()
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            data = text

        if isinstance(data, dict):
            remaining = data.get("remaining", 0)
        else:
            remaining = data

        if isinstance(remaining, bool):
            raise MalformedPayloadError("remaining usages is not an integer", payload=text)
        if isinstance(remaining, int):
            return remaining
        if isinstance(remaining, str) and _INTEGER.fullmatch(remaining.strip()):
            return int(remaining.strip())
        raise MalformedPayloadError("remaining usages is not an integer", payload=text)

    async def get_free_access_papers(self) -> list[str]:
        """Get the IDs of papers whose graphs need no API key."""
        data = await self._request_json("GET", "/free-access-papers")
        if not isinstance(data, dict):
            raise MalformedPayloadError("expected a JSON object", payload=json.dumps(data))

        papers = data.get("papers") or []
        if not isinstance(papers, list) or not all(isinstance(p, str) for p in papers):
            raise MalformedPayloadError("papers is not a list of strings", payload=json.dumps(data))
        return papers
