"""Document-level data models."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, PrivateAttr

from studyindex.errors import NotFoundError


class CodeBlock(BaseModel):
    """Fenced code block captured inside a section."""

    model_config = ConfigDict(frozen=True)

    language: Optional[str] = None
    text: str


class Link(BaseModel):
    """Outbound cross-reference to another file of the corpus."""

    model_config = ConfigDict(frozen=True)

    text: str
    target: str
    resolved: Optional[str] = None


class QAPair(BaseModel):
    """Question and answer found in the study notes."""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str
    section_index: int


class Section(BaseModel):
    """A heading and the content it directly owns."""

    model_config = ConfigDict(frozen=True)

    index: int
    section_id: str
    level: int
    heading: str
    body: str = ""
    code_blocks: Tuple[CodeBlock, ...] = ()
    parent: Optional[int] = None
    synthetic: bool = False


class Document(BaseModel):
    """One parsed Markdown file."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    path: str = ""
    title: str = ""
    sections: Tuple[Section, ...] = ()
    links: Tuple[Link, ...] = ()
    qa_pairs: Tuple[QAPair, ...] = ()
    tags: Tuple[str, ...] = ()

    def children(self, section_index: int) -> List[Section]:
        return [section for section in self.sections if section.parent == section_index]

    def dangling_links(self) -> List[Link]:
        return [link for link in self.links if link.resolved is None]


class Corpus(BaseModel):
    """Every document loaded from one root directory, ordered by path."""

    model_config = ConfigDict(frozen=True)

    root: str
    documents: Tuple[Document, ...] = ()

    _by_id: Dict[str, Document] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context) -> None:
        self._by_id = {document.id: document for document in self.documents}

    def __len__(self) -> int:
        return len(self.documents)

    @property
    def ids(self) -> List[str]:
        return [document.id for document in self.documents]

    def get(self, doc_id: str) -> Document:
        try:
            return self._by_id[doc_id]
        except KeyError:
            raise NotFoundError(doc_id) from None

    def dangling_links(self) -> List[Tuple[str, Link]]:
        """Return ``(doc_id, link)`` for every link that matched no document."""
        return [
            (document.id, link)
            for document in self.documents
            for link in document.dangling_links()
        ]
