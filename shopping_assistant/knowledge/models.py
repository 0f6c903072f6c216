"""Knowledge documents and retrieval results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Union

Scalar = Union[str, int, float, bool]


@dataclass(frozen=True, slots=True)
class KnowledgeDocument:
    """One indexed document; in practice one row of the source table."""

    text: str
    metadata: dict[str, Scalar] = field(default_factory=dict)

    @property
    def source(self) -> str | None:
        value = self.metadata.get("source")
        return str(value) if value is not None else None


@dataclass(frozen=True, slots=True)
class ScoredDocument:
    document: KnowledgeDocument
    score: float


@dataclass(slots=True)
class RetrievalResult:
    """Matches for one query, best first, already thresholded and truncated."""

    query: str
    matches: list[ScoredDocument] = field(default_factory=list)

    def __iter__(self) -> Iterator[ScoredDocument]:
        return iter(self.matches)

    def __len__(self) -> int:
        return len(self.matches)

    @property
    def documents(self) -> list[KnowledgeDocument]:
        return [match.document for match in self.matches]
