"""Query engine and index service."""

from .query import (
    backlinks,
    find_by_heading,
    find_by_tag,
    get_document,
    list_questions,
    related,
    search,
)
from .service import IndexService, IndexState

__all__ = [
    "IndexService",
    "IndexState",
    "backlinks",
    "find_by_heading",
    "find_by_tag",
    "get_document",
    "list_questions",
    "related",
    "search",
]
