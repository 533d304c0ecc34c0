"""
Semantic Scholar Graph API client.

https://api.semanticscholar.org/graph/v1

Works without an API key (shared rate limit); SEMANTIC_SCHOLAR_API_KEY
is sent as x-api-key when set.
"""

import json
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from connected_papers.apis.base import BaseApiClient
from connected_papers.apis.errors import InvalidParameterError, MalformedPayloadError
from connected_papers.apis.semantic_scholar.models import (
    AutocompletePaper,
    CitationLink,
    Paper,
    PaperBulkSearchResponse,
    PaperSearchResponse,
    TitleMatch,
)
from connected_papers.apis.semantic_scholar.params import (
    MAX_AUTOCOMPLETE_QUERY,
    MAX_BATCH_IDS,
    CitationParams,
    PaperBulkSearchParams,
    PaperField,
    PaperId,
    PaperSearchParams,
    PaperTitleSearchParams,
    join_unique,
)
from connected_papers.utils.logging import get_logger

logger = get_logger(__name__)


def _validate(model: type[BaseModel], data: Any) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedPayloadError(
            f"unexpected {model.__name__} shape: {e.error_count()} validation error(s)",
            payload=json.dumps(data),
        ) from e


def _fields_param(fields: Sequence[PaperField] | None) -> dict[str, str] | None:
    if not fields:
        return None
    return {"fields": join_unique(fields)}


class SemanticScholarClient(BaseApiClient):
    """Semantic Scholar Graph API client."""

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
            "semantic_scholar",
            api_key,
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def autocomplete(self, query: str) -> list[AutocompletePaper]:
        """Suggest paper completions for a partial query.

        The query is truncated to its first 100 characters.
        """
        data = await self._request_json(
            "GET",
            "/paper/autocomplete",
            params={"query": query[:MAX_AUTOCOMPLETE_QUERY]},
        )
        matches = data.get("matches") if isinstance(data, dict) else None
        return [_validate(AutocompletePaper, m) for m in matches or []]

    async def get_paper(
        self,
        paper_id: PaperId | str,
        fields: Sequence[PaperField] | None = None,
    ) -> Paper | None:
        """Get paper details.

        Args:
            paper_id: S2 paper ID or prefixed external ID (DOI:, ARXIV:, ...)
            fields: Fields to return (API default: paperId and title)

        Returns:
            Paper, or None when the paper does not exist
        """
        data = await self._request_json(
            "GET",
            f"/paper/{paper_id}",
            params=_fields_param(fields),
            allow_not_found=True,
        )
        if data is None:
            logger.debug("Paper not found", paper_id=str(paper_id))
            return None
        return _validate(Paper, data)

    async def get_papers(
        self,
        paper_ids: Sequence[PaperId | str],
        fields: Sequence[PaperField] | None = None,
    ) -> list[Paper | None]:
        """Get details for up to 500 papers at once.

        Returns:
            One entry per requested ID, in request order (None when unknown)
        """
        if not paper_ids:
            raise InvalidParameterError("ids is empty", param_name="ids")
        if len(paper_ids) > MAX_BATCH_IDS:
            raise InvalidParameterError(
                f"at most {MAX_BATCH_IDS} ids per batch",
                param_name="ids",
                received=len(paper_ids),
            )

        data = await self._request_json(
            "POST",
            "/paper/batch",
            params=_fields_param(fields),
            json_body={"ids": [str(p) for p in paper_ids]},
        )
        if not isinstance(data, list):
            raise MalformedPayloadError("expected a JSON array", payload=json.dumps(data))
        return [None if item is None else _validate(Paper, item) for item in data]

    async def search(self, params: PaperSearchParams) -> PaperSearchResponse:
        """Relevance-ranked paper search."""
        data = await self._request_json("GET", "/paper/search", params=params.to_params())
        result = _validate(PaperSearchResponse, data)
        logger.debug("Paper search", query=params.query, total=result.total, returned=len(result.data))
        return result

    async def search_bulk(self, params: PaperBulkSearchParams) -> PaperBulkSearchResponse:
        """Bulk paper search with boolean query syntax.

        Pass the returned token to params.next_page() to fetch the next batch.
        """
        data = await self._request_json("GET", "/paper/search/bulk", params=params.to_params())
        return _validate(PaperBulkSearchResponse, data)

    async def search_title(self, params: PaperTitleSearchParams) -> TitleMatch | None:
        """Find the paper whose title best matches the query.

        Returns:
            TitleMatch, or None when nothing matches
        """
        data = await self._request_json(
            "GET",
            "/paper/search/match",
            params=params.to_params(),
            allow_not_found=True,
        )
        if data is None:
            return None
        matches = data.get("data") if isinstance(data, dict) else None
        if not matches:
            return None

        if not isinstance(matches[0], dict):
            raise MalformedPayloadError("expected a paper object", payload=json.dumps(data))
        first = dict(matches[0])
        score = first.pop("matchScore", None)
        return TitleMatch(score=score, paper=_validate(Paper, first))

    async def get_references(
        self,
        paper_id: PaperId | str,
        params: CitationParams | None = None,
    ) -> list[CitationLink]:
        """Get references (papers cited by this paper)."""
        return await self._get_links(paper_id, "references", "citedPaper", params)

    async def get_citations(
        self,
        paper_id: PaperId | str,
        params: CitationParams | None = None,
    ) -> list[CitationLink]:
        """Get citations (papers that cite this paper)."""
        return await self._get_links(paper_id, "citations", "citingPaper", params)

    async def _get_links(
        self,
        paper_id: PaperId | str,
        endpoint: str,
        paper_key: str,
        params: CitationParams | None,
    ) -> list[CitationLink]:
        query = (params or CitationParams()).to_params()
        data = await self._request_json("GET", f"/paper/{paper_id}/{endpoint}", params=query or None)
        entries = (data.get("data") if isinstance(data, dict) else None) or []

        links: list[CitationLink] = []
        for entry in entries:
            # The API returns null entries and entries without a paper
            if entry is None:
                continue
            if not isinstance(entry, dict):
                raise MalformedPayloadError(
                    f"expected a {endpoint} entry object", payload=json.dumps(data)
                )
            if not entry.get(paper_key):
                continue
            links.append(
                CitationLink(
                    paper=_validate(Paper, entry[paper_key]),
                    is_influential=entry.get("isInfluential"),
                    contexts=entry.get("contexts") or [],
                    intents=entry.get("intents") or [],
                )
            )
        return links
