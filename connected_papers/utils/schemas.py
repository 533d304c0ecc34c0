"""
Pydantic schemas for Connected Papers graph responses.

Responses are immutable once constructed. Unknown keys sent by the
server are ignored so additions on the remote side do not break parsing.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class GraphResponseStatus(str, Enum):
    """Status reported by the graph endpoint."""

    BAD_ID = "BAD_ID"
    ERROR = "ERROR"
    NOT_IN_DB = "NOT_IN_DB"
    OLD_GRAPH = "OLD_GRAPH"
    FRESH_GRAPH = "FRESH_GRAPH"
    IN_PROGRESS = "IN_PROGRESS"
    QUEUED = "QUEUED"
    BAD_TOKEN = "BAD_TOKEN"
    BAD_REQUEST = "BAD_REQUEST"
    OUT_OF_REQUESTS = "OUT_OF_REQUESTS"
    OVERLOADED = "OVERLOADED"

    @property
    def is_terminal(self) -> bool:
        """True when the server will not change its answer for this request."""
        return self not in (
            GraphResponseStatus.OLD_GRAPH,
            GraphResponseStatus.IN_PROGRESS,
            GraphResponseStatus.QUEUED,
            GraphResponseStatus.OVERLOADED,
        )


class GraphAuthor(_FrozenModel):
    """Author entry of a graph node."""

    name: str | None = Field(None, description="Display name")
    ids: list[str | None] = Field(default_factory=list, description="Semantic Scholar author IDs")


class GraphNode(_FrozenModel):
    """One paper in a Connected Papers graph."""

    id: str = Field(..., description="Node ID (Semantic Scholar paper ID)")
    paper_id: str | None = Field(None, description="Semantic Scholar paper ID")
    corpus_id: int | None = Field(None, description="Semantic Scholar corpus ID")
    title: str | None = Field(None, description="Paper title")
    authors: list[GraphAuthor] | None = Field(None, description="Author list")
    year: int | None = Field(None, description="Publication year")
    venue: str | None = Field(None, description="Publication venue")
    journal_name: str | None = Field(None, description="Journal name")
    journal_volume: str | None = Field(None, description="Journal volume")
    journal_pages: str | None = Field(None, description="Journal pages")
    doi: str | None = Field(None, description="DOI")
    pmid: str | None = Field(None, description="PubMed ID")
    arxiv_id: str | None = Field(None, description="arXiv ID")
    mag_id: str | None = Field(None, description="Microsoft Academic Graph ID")
    abstract: str | None = Field(None, description="Abstract")
    tldr: str | None = Field(None, description="Machine-generated summary")
    url: str | None = Field(None, description="Semantic Scholar URL")
    pdf_urls: list[str] | None = Field(None, description="PDF links")
    is_open_access: bool | None = Field(None, description="Open access flag")
    fields_of_study: list[str] | None = Field(None, description="Fields of study")
    publication_types: list[str] | None = Field(None, description="Publication types")
    publication_date: str | None = Field(None, description="Publication date (YYYY-MM-DD)")
    citations_length: int | None = Field(None, description="Number of citing papers")
    references_length: int | None = Field(None, description="Number of referenced papers")
    number_of_authors: int | None = Field(None, description="Number of authors")

    @field_validator("journal_volume", "journal_pages", "pmid", "mag_id", mode="before")
    @classmethod
    def _stringify_identifiers(cls, value: Any) -> Any:
        # Sent as numbers for some papers
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return value


class GraphParameters(_FrozenModel):
    """Parameters the graph was built with."""

    paper_id: str | None = Field(None, description="Origin paper ID")
    total_nodes: int | None = Field(None, description="Number of nodes requested")
    num_commons: int | None = Field(None, description="Shared citations threshold")
    max_load: int | None = Field(None, description="Maximum papers loaded")
    num_neighbors: int | None = Field(None, description="Neighbours per node")
    spring_iterations: int | None = Field(None, description="Layout iterations")


class Graph(_FrozenModel):
    """Citation graph built around a start paper."""

    start_id: str = Field(..., description="ID of the origin paper")
    nodes: dict[str, GraphNode] = Field(default_factory=dict, description="Nodes keyed by ID")
    edges: list[Any] = Field(default_factory=list, description="Similarity edges")
    citations: list[Any] = Field(default_factory=list, description="Prior works")
    references: list[Any] = Field(default_factory=list, description="Derivative works")
    authors: list[Any] = Field(default_factory=list, description="Author index")
    parameters: GraphParameters = Field(default_factory=GraphParameters)
    current_corpus_date: str | None = Field(None, description="Corpus snapshot date")
    creation_time: str | None = Field(None, description="Graph build time")

    @field_validator("current_corpus_date", "creation_time", mode="before")
    @classmethod
    def _stringify_timestamp(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @property
    def start_paper(self) -> GraphNode | None:
        """Node of the origin paper, if present."""
        return self.nodes.get(self.start_id)


class GraphResponse(_FrozenModel):
    """Response of the graph endpoint."""

    status: GraphResponseStatus = Field(..., description="Build status")
    graph_json: Graph | None = Field(None, description="Graph, when available")
    progress: float | None = Field(None, description="Build progress of an in-flight graph")
    remaining_requests: int | None = Field(None, description="Remaining requests on the API key")


# One incremental unit of the streaming endpoint
StreamItem = GraphResponse
