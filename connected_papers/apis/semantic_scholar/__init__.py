"""
Semantic Scholar Graph API utilities.
"""

from connected_papers.apis.semantic_scholar.client import SemanticScholarClient
from connected_papers.apis.semantic_scholar.models import (
    Author,
    AutocompletePaper,
    CitationLink,
    ExternalIds,
    Paper,
    PaperBulkSearchResponse,
    PaperSearchResponse,
    TitleMatch,
)
from connected_papers.apis.semantic_scholar.params import (
    CitationParams,
    FieldOfStudy,
    PaperBulkSearchParams,
    PaperField,
    PaperId,
    PaperSearchParams,
    PaperTitleSearchParams,
    PartialDate,
    PublicationDateRange,
    PublicationType,
    Sort,
    SortField,
    SortOrder,
    YearRange,
)
from connected_papers.apis.semantic_scholar.query import (
    And,
    Fuzzy,
    Not,
    Or,
    Phrase,
    Prefix,
    Proximity,
    QueryNode,
    Term,
)

__all__ = [
    "SemanticScholarClient",
    "Author",
    "AutocompletePaper",
    "CitationLink",
    "ExternalIds",
    "Paper",
    "PaperBulkSearchResponse",
    "PaperSearchResponse",
    "TitleMatch",
    "CitationParams",
    "FieldOfStudy",
    "PaperBulkSearchParams",
    "PaperField",
    "PaperId",
    "PaperSearchParams",
    "PaperTitleSearchParams",
    "PartialDate",
    "PublicationDateRange",
    "PublicationType",
    "Sort",
    "SortField",
    "SortOrder",
    "YearRange",
    "And",
    "Fuzzy",
    "Not",
    "Or",
    "Phrase",
    "Prefix",
    "Proximity",
    "QueryNode",
    "Term",
]
