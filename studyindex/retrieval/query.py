"""Ranked free-text search and structural lookups over a built index."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from studyindex.errors import NotReadyError
from studyindex.indexing.build_index import Index
from studyindex.models.document import Document
from studyindex.models.retrieval import QuestionRef, SearchHit, SectionRef
from studyindex.utils.tokenization import normalize, unique_terms

logger = logging.getLogger(__name__)

Scope = Union[str, Iterable[str], None]


def ensure_ready(index: Optional[Index]) -> Index:
    if index is None:
        raise NotReadyError()
    return index


def scope_positions(index: Index, scope: Scope) -> Optional[Set[int]]:
    """Document positions allowed by ``scope``; ``None`` means the whole index."""
    if scope is None:
        return None
    doc_ids = [scope] if isinstance(scope, str) else list(scope)
    return {index.position(doc_id) for doc_id in doc_ids}


def search(
    index: Optional[Index],
    query_text: str,
    scope: Scope = None,
    limit: Optional[int] = None,
) -> List[SearchHit]:
    """Rank sections by summed term frequency, boosted by heading level.

    Ties are broken by document id, then by section order, so the result
    order is total.
    """
    index = ensure_ready(index)
    allowed = scope_positions(index, scope)
    terms = unique_terms(query_text, index.min_token_length)
    if not terms:
        return []

    frequencies: Dict[Tuple[int, int], int] = defaultdict(int)
    for term in terms:
        for posting in index.postings.get(term, ()):
            if allowed is not None and posting.doc_index not in allowed:
                continue
            frequencies[(posting.doc_index, posting.section_index)] += posting.tf

    hits: List[SearchHit] = []
    for (doc_index, section_index), tf in frequencies.items():
        document = index.documents[doc_index]
        section = document.sections[section_index]
        hits.append(
            SearchHit(
                doc_id=document.id,
                section_id=section.section_id,
                score=tf * index.level_boost(section.level),
                heading=section.heading,
                level=section.level,
                section_index=section_index,
            )
        )
    hits.sort(key=lambda hit: (-hit.score, hit.doc_id, hit.section_index))
    logger.debug("Query %r matched %s sections", query_text, len(hits))
    if limit is not None:
        return hits[:limit]
    return hits


def related(index: Optional[Index], doc_id: str) -> Set[str]:
    """Documents one outbound hop away from ``doc_id`` in the link graph."""
    index = ensure_ready(index)
    index.position(doc_id)
    return set(index.link_graph.get(doc_id, ()))


def backlinks(index: Optional[Index], doc_id: str) -> Set[str]:
    """Documents linking to ``doc_id``."""
    index = ensure_ready(index)
    index.position(doc_id)
    return set(index.backlink_graph.get(doc_id, ()))


def get_document(index: Optional[Index], doc_id: str) -> Document:
    return ensure_ready(index).document(doc_id)


def find_by_heading(index: Optional[Index], text: str, scope: Scope = None) -> List[SectionRef]:
    """Sections whose heading contains every token of ``text``."""
    index = ensure_ready(index)
    allowed = scope_positions(index, scope)
    wanted = set(unique_terms(text, index.min_token_length))
    if not wanted:
        return []
    matches: List[SectionRef] = []
    for position, document in enumerate(index.documents):
        if allowed is not None and position not in allowed:
            continue
        for section in document.sections:
            if section.synthetic:
                continue
            if wanted.issubset(unique_terms(section.heading, index.min_token_length)):
                matches.append(
                    SectionRef(
                        doc_id=document.id,
                        section_id=section.section_id,
                        heading=section.heading,
                        level=section.level,
                        section_index=section.index,
                    )
                )
    matches.sort(key=lambda ref: (ref.doc_id, ref.section_index))
    return matches


def find_by_tag(index: Optional[Index], tag: str) -> List[str]:
    index = ensure_ready(index)
    wanted = normalize(tag.strip())
    return sorted(document.id for document in index.documents if wanted in document.tags)


def list_questions(index: Optional[Index], scope: Scope = None) -> List[QuestionRef]:
    """Every question/answer pair, in document then section order."""
    index = ensure_ready(index)
    allowed = scope_positions(index, scope)
    questions: List[QuestionRef] = []
    for position, document in sorted(enumerate(index.documents), key=lambda item: item[1].id):
        if allowed is not None and position not in allowed:
            continue
        questions.extend(QuestionRef.from_pair(document, pair) for pair in document.qa_pairs)
    return questions
