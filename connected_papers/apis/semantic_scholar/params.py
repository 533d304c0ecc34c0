"""
Request parameters for the Semantic Scholar Graph API.

Parameter objects validate on construction (InvalidParameterError) and
render themselves into query-string dicts with to_params().
"""

import calendar
import re
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from connected_papers.apis.errors import InvalidParameterError
from connected_papers.apis.semantic_scholar.query import QueryNode

MAX_SEARCH_LIMIT = 100
MAX_BATCH_IDS = 500
MAX_AUTOCOMPLETE_QUERY = 100


class PaperField(str, Enum):
    """Paper fields selectable with the `fields` parameter."""

    CORPUS_ID = "corpusId"
    EXTERNAL_IDS = "externalIds"
    URL = "url"
    TITLE = "title"
    ABSTRACT = "abstract"
    VENUE = "venue"
    PUBLICATION_VENUE = "publicationVenue"
    YEAR = "year"
    REFERENCE_COUNT = "referenceCount"
    CITATION_COUNT = "citationCount"
    INFLUENTIAL_CITATION_COUNT = "influentialCitationCount"
    IS_OPEN_ACCESS = "isOpenAccess"
    OPEN_ACCESS_PDF = "openAccessPdf"
    FIELDS_OF_STUDY = "fieldsOfStudy"
    S2_FIELDS_OF_STUDY = "s2FieldsOfStudy"
    PUBLICATION_TYPES = "publicationTypes"
    PUBLICATION_DATE = "publicationDate"
    JOURNAL = "journal"
    CITATION_STYLES = "citationStyles"
    AUTHORS = "authors"
    CITATIONS = "citations"
    REFERENCES = "references"
    EMBEDDING = "embedding"
    TLDR = "tldr"


# Nested data is not served by /paper/search/bulk
BULK_UNSUPPORTED_FIELDS = frozenset(
    {PaperField.CITATIONS, PaperField.REFERENCES, PaperField.EMBEDDING, PaperField.TLDR}
)


class FieldOfStudy(str, Enum):
    COMPUTER_SCIENCE = "Computer Science"
    MEDICINE = "Medicine"
    CHEMISTRY = "Chemistry"
    BIOLOGY = "Biology"
    MATERIALS_SCIENCE = "Materials Science"
    PHYSICS = "Physics"
    GEOLOGY = "Geology"
    PSYCHOLOGY = "Psychology"
    ART = "Art"
    HISTORY = "History"
    GEOGRAPHY = "Geography"
    SOCIOLOGY = "Sociology"
    BUSINESS = "Business"
    POLITICAL_SCIENCE = "Political Science"
    ECONOMICS = "Economics"
    PHILOSOPHY = "Philosophy"
    MATHEMATICS = "Mathematics"
    ENGINEERING = "Engineering"
    ENVIRONMENTAL_SCIENCE = "Environmental Science"
    AGRICULTURAL_AND_FOOD_SCIENCES = "Agricultural and Food Sciences"
    EDUCATION = "Education"
    LAW = "Law"
    LINGUISTICS = "Linguistics"


class PublicationType(str, Enum):
    REVIEW = "Review"
    JOURNAL_ARTICLE = "JournalArticle"
    CASE_REPORT = "CaseReport"
    CLINICAL_TRIAL = "ClinicalTrial"
    CONFERENCE = "Conference"
    DATASET = "Dataset"
    EDITORIAL = "Editorial"
    LETTERS_AND_COMMENTS = "LettersAndComments"
    META_ANALYSIS = "MetaAnalysis"
    NEWS = "News"
    STUDY = "Study"
    BOOK = "Book"
    BOOK_SECTION = "BookSection"


class SortField(str, Enum):
    PAPER_ID = "paperId"
    PUBLICATION_DATE = "publicationDate"
    CITATION_COUNT = "citationCount"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Sort:
    """Bulk search ordering, rendered as `field:order`."""

    by: SortField = SortField.PAPER_ID
    order: SortOrder = SortOrder.ASC

    def __str__(self) -> str:
        return f"{self.by.value}:{self.order.value}"


def join_unique(values: Iterable[Any]) -> str:
    """Join enum members or strings with commas, dropping repeats in first-seen order."""
    rendered = [v.value if isinstance(v, Enum) else str(v) for v in values]
    return ",".join(dict.fromkeys(rendered))


@dataclass(frozen=True)
class PaperId:
    """A paper identifier in any of the formats the API accepts.

    Example:
        PaperId.doi("10.18653/v1/N18-3011")  # DOI:10.18653/v1/N18-3011
    """

    value: str
    prefix: str | None = None

    @classmethod
    def s2(cls, paper_id: str) -> "PaperId":
        return cls(paper_id)

    @classmethod
    def corpus(cls, corpus_id: int) -> "PaperId":
        return cls(str(corpus_id), "CorpusId")

    @classmethod
    def doi(cls, doi: str) -> "PaperId":
        return cls(doi, "DOI")

    @classmethod
    def arxiv(cls, arxiv_id: str) -> "PaperId":
        return cls(arxiv_id, "ARXIV")

    @classmethod
    def mag(cls, mag_id: int) -> "PaperId":
        return cls(str(mag_id), "MAG")

    @classmethod
    def acl(cls, acl_id: str) -> "PaperId":
        return cls(acl_id, "ACL")

    @classmethod
    def pubmed(cls, pmid: int) -> "PaperId":
        return cls(str(pmid), "PMID")

    @classmethod
    def pubmed_central(cls, pmcid: int) -> "PaperId":
        return cls(str(pmcid), "PMCID")

    @classmethod
    def url(cls, url: str) -> "PaperId":
        return cls(url, "URL")

    def __str__(self) -> str:
        if self.prefix is None:
            return self.value
        return f"{self.prefix}:{self.value}"


@dataclass(frozen=True)
class YearRange:
    """Inclusive publication year range.

    Renders as `2019`, `2016-2020`, `2010-` or `-2015`.
    """

    start: int | None = None
    end: int | None = None

    def __post_init__(self) -> None:
        if self.start is None and self.end is None:
            raise InvalidParameterError("year range needs a start or an end", param_name="year")
        if self.start is not None and self.end is not None and self.start > self.end:
            raise InvalidParameterError(
                "start year must be less than or equal to end year",
                param_name="year",
                received=f"{self.start}-{self.end}",
            )

    @classmethod
    def at(cls, year: int) -> "YearRange":
        return cls(year, year)

    @classmethod
    def since(cls, year: int) -> "YearRange":
        return cls(start=year)

    @classmethod
    def until(cls, year: int) -> "YearRange":
        return cls(end=year)

    def __str__(self) -> str:
        if self.start is not None and self.start == self.end:
            return str(self.start)
        start = "" if self.start is None else str(self.start)
        end = "" if self.end is None else str(self.end)
        return f"{start}-{end}"


@dataclass(frozen=True)
class PartialDate:
    """A date with optional day: `YYYY-MM` or `YYYY-MM-DD`."""

    year: int
    month: int
    day: int | None = None

    def __post_init__(self) -> None:
        if not 1 <= self.year <= 9999:
            raise InvalidParameterError(
                "year must be between 1 and 9999", param_name="publicationDate", received=self.year
            )
        if not 1 <= self.month <= 12:
            raise InvalidParameterError(
                "month must be between 1 and 12", param_name="publicationDate", received=self.month
            )
        if self.day is not None:
            _, max_day = calendar.monthrange(self.year, self.month)
            if not 1 <= self.day <= max_day:
                raise InvalidParameterError(
                    f"invalid day for {self.year:04d}-{self.month:02d}",
                    param_name="publicationDate",
                    received=self.day,
                )

    @classmethod
    def parse(cls, text: str) -> "PartialDate":
        match = re.fullmatch(r"(\d{4})-(\d{2})(?:-(\d{2}))?", text.strip())
        if match is None:
            raise InvalidParameterError(
                "date must be YYYY-MM or YYYY-MM-DD", param_name="publicationDate", received=text
            )
        year, month, day = match.groups()
        return cls(int(year), int(month), int(day) if day else None)

    def __str__(self) -> str:
        if self.day is None:
            return f"{self.year:04d}-{self.month:02d}"
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True)
class PublicationDateRange:
    """Inclusive publication date range, rendered as `start:end` (either side optional)."""

    start: PartialDate | None = None
    end: PartialDate | None = None

    def __post_init__(self) -> None:
        if self.start is None and self.end is None:
            raise InvalidParameterError(
                "date range needs a start or an end", param_name="publicationDate"
            )

    def __str__(self) -> str:
        start = "" if self.start is None else str(self.start)
        end = "" if self.end is None else str(self.end)
        return f"{start}:{end}"


@dataclass(frozen=True, kw_only=True)
class _FilterParams:
    """Filters shared by the search endpoints."""

    fields: tuple[PaperField, ...] = ()
    publication_types: tuple[PublicationType, ...] = ()
    open_access_pdf: bool = False
    min_citation_count: int | None = None
    year: YearRange | None = None
    fields_of_study: tuple[FieldOfStudy, ...] = ()
    venues: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept lists, normalize to tuples
        for name in ("fields", "publication_types", "fields_of_study", "venues"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        if self.min_citation_count is not None and self.min_citation_count < 0:
            raise InvalidParameterError(
                "minCitationCount must be non-negative",
                param_name="minCitationCount",
                received=self.min_citation_count,
            )

    def _filter_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.fields:
            params["fields"] = join_unique(self.fields)
        if self.publication_types:
            params["publicationTypes"] = join_unique(self.publication_types)
        if self.open_access_pdf:
            # Flag parameter, sent without a value
            params["openAccessPdf"] = ""
        if self.min_citation_count is not None:
            params["minCitationCount"] = str(self.min_citation_count)
        if self.year is not None:
            params["year"] = str(self.year)
        if self.fields_of_study:
            params["fieldsOfStudy"] = join_unique(self.fields_of_study)
        if self.venues:
            params["venue"] = ",".join(self.venues)
        return params


@dataclass(frozen=True, kw_only=True)
class PaperSearchParams(_FilterParams):
    """Relevance search (`GET /paper/search`).

    Plain-text query, no special syntax. Up to 1,000 ranked results are
    reachable through offset/limit paging.
    """

    query: str
    publication_date_or_year: str | None = None
    offset: int | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.query.strip():
            raise InvalidParameterError("query must be set", param_name="query")
        if self.limit is not None and not 0 < self.limit <= MAX_SEARCH_LIMIT:
            raise InvalidParameterError(
                f"limit must be between 1 and {MAX_SEARCH_LIMIT}",
                param_name="limit",
                received=self.limit,
            )
        if self.offset is not None and self.offset < 0:
            raise InvalidParameterError(
                "offset must be non-negative", param_name="offset", received=self.offset
            )

    def to_params(self) -> dict[str, str]:
        params = {"query": self.query, **self._filter_params()}
        if self.publication_date_or_year:
            params["publicationDateOrYear"] = self.publication_date_or_year
        if self.offset is not None:
            params["offset"] = str(self.offset)
        if self.limit is not None:
            params["limit"] = str(self.limit)
        return params


@dataclass(frozen=True, kw_only=True)
class PaperBulkSearchParams(_FilterParams):
    """Bulk search (`GET /paper/search/bulk`).

    Boolean query language (see query.py), up to 1,000 papers per call,
    with a continuation token for the next batch.
    """

    query: QueryNode | str
    token: str | None = None
    sort: Sort | None = None
    publication_date: PublicationDateRange | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if not str(self.query).strip():
            raise InvalidParameterError("query must be set", param_name="query")
        unsupported = [f.value for f in self.fields if f in BULK_UNSUPPORTED_FIELDS]
        if unsupported:
            raise InvalidParameterError(
                f"{', '.join(unsupported)} not supported by bulk search",
                param_name="fields",
                received=unsupported,
            )

    def to_params(self) -> dict[str, str]:
        params = {"query": str(self.query), **self._filter_params()}
        if self.token:
            params["token"] = self.token
        if self.sort is not None:
            params["sort"] = str(self.sort)
        if self.publication_date is not None:
            params["publicationDate"] = str(self.publication_date)
        return params

    def next_page(self, token: str) -> "PaperBulkSearchParams":
        """Same search continued from a response token."""
        return replace(self, token=token)


@dataclass(frozen=True, kw_only=True)
class PaperTitleSearchParams(_FilterParams):
    """Closest title match (`GET /paper/search/match`)."""

    query: str
    publication_date: PublicationDateRange | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.query.strip():
            raise InvalidParameterError("query must be set", param_name="query")

    def to_params(self) -> dict[str, str]:
        params = {"query": self.query, **self._filter_params()}
        if self.publication_date is not None:
            params["publicationDate"] = str(self.publication_date)
        return params


@dataclass(frozen=True, kw_only=True)
class CitationParams:
    """Paging and fields for `/paper/{id}/citations` and `/paper/{id}/references`."""

    fields: tuple[PaperField, ...] = field(default_factory=tuple)
    offset: int | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        if self.limit is not None and not 0 < self.limit <= 1000:
            raise InvalidParameterError(
                "limit must be between 1 and 1000", param_name="limit", received=self.limit
            )

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.fields:
            params["fields"] = join_unique(self.fields)
        if self.offset is not None:
            params["offset"] = str(self.offset)
        if self.limit is not None:
            params["limit"] = str(self.limit)
        return params
