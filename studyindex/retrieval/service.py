"""Holds the published index and swaps it atomically on rebuild."""

from __future__ import annotations

import logging
import os
import threading
from enum import Enum
from typing import Iterable, List, Optional, Set

from studyindex.errors import BuildCancelledError
from studyindex.indexing.build_index import Index, build_index
from studyindex.ingestion.load_corpus import load
from studyindex.models.document import Document
from studyindex.models.retrieval import QuestionRef, SearchHit, SectionRef
from studyindex.retrieval import query as queries

logger = logging.getLogger(__name__)


class IndexState(str, Enum):
    UNBUILT = "unbuilt"
    READY = "ready"


class IndexService:
    """Serves queries against the last successfully built index.

    Rebuilds are serialized and publish a brand-new ``Index`` with a single
    reference assignment; a failed or cancelled rebuild leaves the previous
    index in place.
    """

    def __init__(
        self,
        root_path: Optional[os.PathLike | str] = None,
        extensions: Optional[Iterable[str]] = None,
    ) -> None:
        self.root_path = root_path
        self.extensions = list(extensions) if extensions is not None else None
        self._index: Optional[Index] = None
        self._rebuild_lock = threading.Lock()

    @property
    def state(self) -> IndexState:
        return IndexState.READY if self._index is not None else IndexState.UNBUILT

    def snapshot(self) -> Index:
        """The current index, stable for as long as the caller holds it."""
        return queries.ensure_ready(self._index)

    def rebuild(
        self,
        root_path: Optional[os.PathLike | str] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Index:
        with self._rebuild_lock:
            corpus = load(root_path if root_path is not None else self.root_path, self.extensions)
            index = build_index(corpus, cancel=cancel)
            if cancel is not None and cancel.is_set():
                raise BuildCancelledError("index build cancelled")
            self._index = index
        logger.info("Published index with %s documents", len(index))
        return index

    def search(self, query_text: str, scope=None, limit: Optional[int] = None) -> List[SearchHit]:
        return queries.search(self._index, query_text, scope=scope, limit=limit)

    def related(self, doc_id: str) -> Set[str]:
        return queries.related(self._index, doc_id)

    def backlinks(self, doc_id: str) -> Set[str]:
        return queries.backlinks(self._index, doc_id)

    def get_document(self, doc_id: str) -> Document:
        return queries.get_document(self._index, doc_id)

    def find_by_heading(self, text: str, scope=None) -> List[SectionRef]:
        return queries.find_by_heading(self._index, text, scope=scope)

    def find_by_tag(self, tag: str) -> List[str]:
        return queries.find_by_tag(self._index, tag)

    def list_questions(self, scope=None) -> List[QuestionRef]:
        return queries.list_questions(self._index, scope=scope)
