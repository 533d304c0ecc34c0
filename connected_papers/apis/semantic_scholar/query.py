"""
Boolean query language of `/paper/search/bulk`.

Nodes render to the API syntax with str():

    (Term("fish") & Phrase("fish ladder")) | ~Prefix("outflow")
    -> fish + "fish ladder" | -outflow*

Syntax:
- `+` AND, `|` OR, `-` NOT
- `"..."` phrase, `word*` prefix
- `word~N` edit distance, `"phrase"~N` term proximity (N defaults to 2)
- parentheses for precedence
"""

from dataclasses import dataclass


class QueryNode:
    """Base of all query nodes. Combine with &, | and ~."""

    def __and__(self, other: "QueryNode") -> "And":
        if isinstance(self, And):
            return And((*self.nodes, other))
        return And((self, other))

    def __or__(self, other: "QueryNode") -> "Or":
        if isinstance(self, Or):
            return Or((*self.nodes, other))
        return Or((self, other))

    def __invert__(self) -> "Not":
        return Not(self)


@dataclass(frozen=True)
class Term(QueryNode):
    word: str

    def __str__(self) -> str:
        return self.word


@dataclass(frozen=True)
class Phrase(QueryNode):
    text: str

    def __str__(self) -> str:
        return f'"{self.text}"'


@dataclass(frozen=True)
class Prefix(QueryNode):
    word: str

    def __str__(self) -> str:
        return f"{self.word}*"


@dataclass(frozen=True)
class Fuzzy(QueryNode):
    """Word matched within an edit distance (server default 2)."""

    word: str
    distance: int | None = None

    def __str__(self) -> str:
        if self.distance is None:
            return f"{self.word}~"
        return f"{self.word}~{self.distance}"


@dataclass(frozen=True)
class Proximity(QueryNode):
    """Phrase whose terms may be up to `distance` terms apart."""

    text: str
    distance: int

    def __str__(self) -> str:
        return f'"{self.text}"~{self.distance}'


@dataclass(frozen=True)
class And(QueryNode):
    nodes: tuple[QueryNode, ...]

    def __str__(self) -> str:
        # OR binds looser than AND
        return " + ".join(f"({node})" if isinstance(node, Or) else str(node) for node in self.nodes)


@dataclass(frozen=True)
class Or(QueryNode):
    nodes: tuple[QueryNode, ...]

    def __str__(self) -> str:
        return " | ".join(str(node) for node in self.nodes)


@dataclass(frozen=True)
class Not(QueryNode):
    node: QueryNode

    def __str__(self) -> str:
        if isinstance(self.node, And | Or):
            return f"-({self.node})"
        return f"-{self.node}"
