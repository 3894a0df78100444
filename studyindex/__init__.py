"""Index and search a tree of Markdown study notes."""

from studyindex.errors import (
    BuildCancelledError,
    IndexBuildError,
    LoadError,
    NotFoundError,
    NotReadyError,
    ParseError,
    StudyIndexError,
)
from studyindex.indexing.build_index import Index, build_index
from studyindex.ingestion.load_corpus import dangling_links, load
from studyindex.ingestion.parse_markdown import parse_document
from studyindex.retrieval import (
    IndexService,
    IndexState,
    backlinks,
    find_by_heading,
    find_by_tag,
    get_document,
    list_questions,
    related,
    search,
)

__version__ = "0.1.0"

__all__ = [
    "BuildCancelledError",
    "Index",
    "IndexBuildError",
    "IndexService",
    "IndexState",
    "LoadError",
    "NotFoundError",
    "NotReadyError",
    "ParseError",
    "StudyIndexError",
    "backlinks",
    "build_index",
    "dangling_links",
    "find_by_heading",
    "find_by_tag",
    "get_document",
    "list_questions",
    "load",
    "parse_document",
    "related",
    "search",
]
