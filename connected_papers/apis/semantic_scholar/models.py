"""
Pydantic models for Semantic Scholar Graph API responses.

Field names follow Python conventions; the camelCase wire names are
generated aliases. Every field is optional because the API only returns
the fields that were requested.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _S2Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ExternalIds(_S2Model):
    corpus_id: int | None = Field(None, alias="CorpusId")
    arxiv: str | None = Field(None, alias="ArXiv")
    mag: str | None = Field(None, alias="MAG")
    acl: str | None = Field(None, alias="ACL")
    pubmed: str | None = Field(None, alias="PubMed")
    pubmed_central: str | None = Field(None, alias="PubMedCentral")
    dblp: str | None = Field(None, alias="DBLP")
    doi: str | None = Field(None, alias="DOI")
    medline: str | None = Field(None, alias="Medline")


class Author(_S2Model):
    author_id: str | None = None
    external_ids: dict[str, Any] | None = None
    url: str | None = None
    name: str | None = None
    affiliations: list[str] | None = None
    homepage: str | None = None
    paper_count: int | None = None
    citation_count: int | None = None
    h_index: int | None = None


class Journal(_S2Model):
    name: str | None = None
    volume: str | None = None
    pages: str | None = None


class OpenAccessPdf(_S2Model):
    url: str | None = None
    status: str | None = None
    license: str | None = None
    disclaimer: str | None = None


class PublicationVenue(_S2Model):
    id: str | None = None
    name: str | None = None
    type: str | None = None
    alternate_names: list[str] | None = None
    url: str | None = None


class S2FieldOfStudy(_S2Model):
    category: str | None = None
    source: str | None = None


class Embedding(_S2Model):
    model: str | None = None
    vector: list[float] | None = None


class Tldr(_S2Model):
    model: str | None = None
    text: str | None = None


class CitationStyles(_S2Model):
    bibtex: str | None = None


class Paper(_S2Model):
    """Paper record. Only the requested fields are populated."""

    paper_id: str | None = Field(None, description="Semantic Scholar paper ID")
    corpus_id: int | None = None
    external_ids: ExternalIds | None = None
    url: str | None = None
    title: str | None = None
    abstract: str | None = None
    venue: str | None = None
    publication_venue: PublicationVenue | None = None
    year: int | None = None
    reference_count: int | None = None
    citation_count: int | None = None
    influential_citation_count: int | None = None
    is_open_access: bool | None = None
    open_access_pdf: OpenAccessPdf | None = None
    fields_of_study: list[str] | None = Field(None, description="Field of study names")
    s2_fields_of_study: list[S2FieldOfStudy] | None = None
    publication_types: list[str] | None = None
    publication_date: str | None = Field(None, description="YYYY-MM-DD")
    journal: Journal | None = None
    citation_styles: CitationStyles | None = None
    authors: list[Author] | None = None
    citations: list["Paper"] | None = None
    references: list["Paper"] | None = None
    embedding: Embedding | None = None
    tldr: Tldr | None = None


class AutocompletePaper(_S2Model):
    """Minimal match returned by `/paper/autocomplete`."""

    id: str
    title: str
    authors_year: str = Field("", description="e.g. 'Smith et al., 2019'")

    @property
    def authors(self) -> str:
        return self.authors_year.split(",")[0]

    @property
    def year(self) -> int | None:
        parts = self.authors_year.split(",")
        if len(parts) < 2:
            return None
        try:
            return int(parts[1].strip())
        except ValueError:
            return None


class PaperSearchResponse(_S2Model):
    total: int | None = None
    offset: int | None = None
    next: int | None = None
    data: list[Paper] = Field(default_factory=list)


class PaperBulkSearchResponse(_S2Model):
    total: int | None = None
    token: str | None = Field(None, description="Continuation token; None on the last batch")
    data: list[Paper] = Field(default_factory=list)


class TitleMatch(BaseModel):
    """Closest title match with its score."""

    score: float | None = None
    paper: Paper


class CitationLink(BaseModel):
    """One edge of a citation or reference listing."""

    paper: Paper
    is_influential: bool | None = None
    contexts: list[str] = Field(default_factory=list)
    intents: list[str] = Field(default_factory=list)
