"""Retrieval request/response models."""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .document import Document, Link, QAPair


class Posting(BaseModel):
    """Occurrences of one term inside one section."""

    model_config = ConfigDict(frozen=True)

    doc_index: int
    section_index: int
    tf: int


class SearchHit(BaseModel):
    """A ranked section returned by the query engine."""

    model_config = ConfigDict(frozen=True)

    doc_id: str
    section_id: str
    score: float
    heading: str = ""
    level: int = 1
    section_index: int = 0

    def as_tuple(self) -> tuple:
        return (self.doc_id, self.section_id, self.score)


class SectionRef(BaseModel):
    """Pointer to a section returned by structural queries."""

    doc_id: str
    section_id: str
    heading: str
    level: int
    section_index: int


class QuestionRef(BaseModel):
    """A question/answer pair together with its document."""

    doc_id: str
    section_id: str
    question: str
    answer: str

    @classmethod
    def from_pair(cls, document: Document, pair: QAPair) -> "QuestionRef":
        section = document.sections[pair.section_index]
        return cls(
            doc_id=document.id,
            section_id=section.section_id,
            question=pair.question,
            answer=pair.answer,
        )


class SearchRequest(BaseModel):
    """Payload of a free-text search."""

    query: str = Field(..., min_length=1)
    scope: Optional[Union[str, List[str]]] = None
    limit: Optional[int] = Field(default=None, ge=1)


class SearchResponse(BaseModel):
    """Ranked hits for one query."""

    query: str
    hits: List[SearchHit]


class RelatedResponse(BaseModel):
    """Neighbours of a document in the link graph."""

    doc_id: str
    related: List[str]


class DanglingLink(BaseModel):
    """A link whose target matched no loaded document."""

    doc_id: str
    link: Link


class RebuildResponse(BaseModel):
    """Summary of a finished rebuild."""

    state: str
    documents: int
    sections: int
    terms: int
    dangling_links: int
