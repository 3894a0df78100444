"""Typed models shared across the application."""

from .document import CodeBlock, Corpus, Document, Link, QAPair, Section
from .retrieval import (
    DanglingLink,
    Posting,
    QuestionRef,
    RebuildResponse,
    RelatedResponse,
    SearchHit,
    SearchRequest,
    SearchResponse,
    SectionRef,
)

__all__ = [
    "CodeBlock",
    "Corpus",
    "DanglingLink",
    "Document",
    "Link",
    "Posting",
    "QAPair",
    "QuestionRef",
    "RebuildResponse",
    "RelatedResponse",
    "SearchHit",
    "SearchRequest",
    "SearchResponse",
    "Section",
    "SectionRef",
]
