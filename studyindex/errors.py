"""Exceptions raised by the loading, indexing and query stages."""

from __future__ import annotations


class StudyIndexError(Exception):
    """Base class for every error raised by studyindex."""


class LoadError(StudyIndexError):
    """The corpus root or one of its files could not be read."""


class ParseError(StudyIndexError):
    """A file could not be turned into a document at all."""


class IndexBuildError(StudyIndexError):
    """Building the index failed; nothing was published."""


class BuildCancelledError(IndexBuildError):
    """The build was abandoned through its cancel event."""


class NotReadyError(StudyIndexError):
    """A query was issued before any index was built."""

    def __init__(self, message: str = "index not built yet") -> None:
        super().__init__(message)


class NotFoundError(StudyIndexError, KeyError):
    """A query referenced a document id absent from the index."""

    def __init__(self, doc_id: str) -> None:
        super().__init__(f"document not found: {doc_id}")
        self.doc_id = doc_id

    def __str__(self) -> str:
        return self.args[0]
