"""Build the in-memory inverted index and link graph over a corpus."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from studyindex.config import settings
from studyindex.errors import BuildCancelledError, IndexBuildError, LoadError, NotFoundError, ParseError
from studyindex.ingestion.load_corpus import load
from studyindex.models.document import Corpus, Document, Section
from studyindex.models.retrieval import Posting
from studyindex.utils.tokenization import term_frequencies

logger = logging.getLogger(__name__)


class Index:
    """Immutable term index over a fixed set of documents.

    Documents are kept in a dense tuple and postings point at sections by
    ``(doc_index, section_index)``, so the index never copies a document.
    """

    def __init__(
        self,
        documents: Tuple[Document, ...],
        postings: Mapping[str, Tuple[Posting, ...]],
        link_graph: Mapping[str, FrozenSet[str]],
        min_token_length: int,
        level_boosts: Mapping[int, float],
    ) -> None:
        self._documents = tuple(documents)
        self._positions = MappingProxyType(
            {document.id: position for position, document in enumerate(self._documents)}
        )
        self._postings = MappingProxyType(dict(postings))
        self._link_graph = MappingProxyType(dict(link_graph))
        backlinks: Dict[str, set] = {document.id: set() for document in self._documents}
        for source, targets in self._link_graph.items():
            for target in targets:
                backlinks[target].add(source)
        self._backlinks = MappingProxyType(
            {doc_id: frozenset(sources) for doc_id, sources in backlinks.items()}
        )
        self._min_token_length = min_token_length
        self._level_boosts = MappingProxyType(dict(level_boosts))

    def __len__(self) -> int:
        return len(self._documents)

    @property
    def documents(self) -> Tuple[Document, ...]:
        return self._documents

    @property
    def postings(self) -> Mapping[str, Tuple[Posting, ...]]:
        return self._postings

    @property
    def link_graph(self) -> Mapping[str, FrozenSet[str]]:
        return self._link_graph

    @property
    def backlink_graph(self) -> Mapping[str, FrozenSet[str]]:
        return self._backlinks

    @property
    def min_token_length(self) -> int:
        return self._min_token_length

    @property
    def term_count(self) -> int:
        return len(self._postings)

    @property
    def section_count(self) -> int:
        return sum(len(document.sections) for document in self._documents)

    def position(self, doc_id: str) -> int:
        try:
            return self._positions[doc_id]
        except KeyError:
            raise NotFoundError(doc_id) from None

    def document(self, doc_id: str) -> Document:
        return self._documents[self.position(doc_id)]

    def section(self, doc_index: int, section_index: int) -> Section:
        return self._documents[doc_index].sections[section_index]

    def level_boost(self, level: int) -> float:
        return self._level_boosts.get(level, 1.0)

    def stats(self) -> Dict[str, int]:
        return {
            "documents": len(self),
            "sections": self.section_count,
            "terms": self.term_count,
            "links": sum(len(targets) for targets in self._link_graph.values()),
            "dangling_links": sum(len(document.dangling_links()) for document in self._documents),
        }


def section_text(section: Section) -> str:
    """Text indexed for one section: heading plus body."""
    if section.synthetic:
        return section.body
    return f"{section.heading}\n{section.body}"


def build_link_graph(documents: Iterable[Document]) -> Dict[str, FrozenSet[str]]:
    documents = list(documents)
    ids = {document.id for document in documents}
    graph: Dict[str, FrozenSet[str]] = {}
    for document in documents:
        graph[document.id] = frozenset(
            link.resolved
            for link in document.links
            if link.resolved in ids and link.resolved != document.id
        )
    return graph


def add_document(
    postings: Dict[str, List[Posting]],
    doc_index: int,
    document: Document,
    min_token_length: int,
) -> None:
    for section in document.sections:
        counts = term_frequencies(section_text(section), min_token_length)
        for term, tf in counts.items():
            postings[term].append(
                Posting(doc_index=doc_index, section_index=section.index, tf=tf)
            )


def build_index(
    corpus: Union[Corpus, Iterable[Document]],
    cancel: Optional[threading.Event] = None,
    min_token_length: Optional[int] = None,
    level_boosts: Optional[Mapping[int, float]] = None,
) -> Index:
    """Build a fresh index; any failure leaves nothing behind."""
    if min_token_length is None:
        min_token_length = settings.min_token_length
    if level_boosts is None:
        level_boosts = settings.level_boosts

    try:
        documents = corpus.documents if isinstance(corpus, Corpus) else tuple(corpus)
        logger.info("Building index over %s documents", len(documents))
        seen = set()
        postings: Dict[str, List[Posting]] = defaultdict(list)
        for doc_index, document in enumerate(documents):
            if cancel is not None and cancel.is_set():
                raise BuildCancelledError("index build cancelled")
            if document.id in seen:
                raise IndexBuildError(f"duplicate document id {document.id!r}")
            seen.add(document.id)
            add_document(postings, doc_index, document, min_token_length)
        index = Index(
            documents=documents,
            postings={term: tuple(items) for term, items in postings.items()},
            link_graph=build_link_graph(documents),
            min_token_length=min_token_length,
            level_boosts=level_boosts,
        )
    except IndexBuildError:
        raise
    except Exception as exc:
        raise IndexBuildError(f"index build failed: {exc}") from exc

    logger.info(
        "Indexed %s sections and %s terms from %s documents",
        index.section_count,
        index.term_count,
        len(index),
    )
    return index


def main() -> None:
    logging.basicConfig(level=settings.log_level)
    try:
        index = build_index(load())
    except (LoadError, ParseError, IndexBuildError) as exc:
        logger.error("Index build failed: %s", exc)
        return
    for key, value in index.stats().items():
        logger.info("%s: %s", key, value)


if __name__ == "__main__":
    main()
