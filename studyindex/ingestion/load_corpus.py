"""Scan the notes directory, parse every file and resolve cross-links."""

from __future__ import annotations

import json
import logging
import os
import posixpath
from pathlib import Path
from typing import Collection, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import unquote

from studyindex.config import settings
from studyindex.errors import LoadError, ParseError
from studyindex.ingestion.parse_markdown import parse_document
from studyindex.models.document import Corpus, Document, Link

logger = logging.getLogger(__name__)

DIRECTORY_INDEX_NAMES = ("README", "readme", "index")


def normalize_extensions(extensions: Optional[Iterable[str]] = None) -> List[str]:
    if extensions is None:
        extensions = settings.file_extensions
    normalized = []
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        normalized.append(ext if ext.startswith(".") else f".{ext}")
    # longest first so ".en.md" wins over ".md"
    return sorted(set(normalized), key=lambda item: (-len(item), item))


def matched_extension(name: str, extensions: Sequence[str]) -> Optional[str]:
    lowered = name.lower()
    for ext in extensions:
        if lowered.endswith(ext) and len(lowered) > len(ext):
            return ext
    return None


def strip_extension(path: str, extensions: Sequence[str]) -> str:
    ext = matched_extension(posixpath.basename(path), extensions)
    return path[: -len(ext)] if ext else path


def normalize_document_id(relative_path: str, extensions: Sequence[str]) -> str:
    """Generate a deterministic identifier from the path below the root."""
    return strip_extension(relative_path.replace("\\", "/"), extensions)


def _is_hidden(relative: Path) -> bool:
    return any(part.startswith(".") for part in relative.parts)


def discover_files(
    root: Path,
    extensions: Sequence[str],
    skip_hidden: Optional[bool] = None,
) -> List[Tuple[str, Path]]:
    """Return ``(relative posix path, absolute path)`` for every matching file."""
    if skip_hidden is None:
        skip_hidden = settings.skip_hidden
    found: List[Tuple[str, Path]] = []
    try:
        for path in root.rglob("*"):
            relative = path.relative_to(root)
            if skip_hidden and _is_hidden(relative):
                continue
            if not matched_extension(path.name, extensions) or not path.is_file():
                continue
            found.append((relative.as_posix(), path))
    except OSError as exc:
        raise LoadError(f"cannot list corpus root {root}: {exc}") from exc
    found.sort(key=lambda item: item[0])
    logger.info("Discovered %s Markdown files under %s", len(found), root)
    return found


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"cannot read {path}: {exc}") from exc


def resolve_target(
    source_id: str,
    target: str,
    ids: Collection[str],
    extensions: Sequence[str],
) -> Optional[str]:
    """Match a raw link target against the loaded document ids."""
    path = unquote(target.split("#", 1)[0].split("?", 1)[0]).strip().replace("\\", "/")
    if not path:
        return None
    if path.startswith("/"):
        candidate = path.lstrip("/")
    else:
        candidate = posixpath.join(posixpath.dirname(source_id), path)
    candidate = posixpath.normpath(candidate) if candidate else candidate
    if candidate == ".." or candidate.startswith("../"):
        return None
    if candidate == ".":
        candidate = ""

    stem = strip_extension(candidate, extensions)
    if stem in ids:
        return stem
    for name in DIRECTORY_INDEX_NAMES:
        nested = posixpath.join(candidate, name) if candidate else name
        if nested in ids:
            return nested
    return None


def resolve_links(documents: Sequence[Document], extensions: Sequence[str]) -> List[Document]:
    ids = {document.id for document in documents}
    resolved: List[Document] = []
    for document in documents:
        links = tuple(
            Link(
                text=link.text,
                target=link.target,
                resolved=resolve_target(document.id, link.target, ids, extensions),
            )
            for link in document.links
        )
        resolved.append(document.model_copy(update={"links": links}))
    return resolved


def load(
    root_path: Optional[os.PathLike | str] = None,
    extensions: Optional[Iterable[str]] = None,
) -> Corpus:
    """Load and parse every note below ``root_path``."""
    root = Path(root_path) if root_path is not None else settings.corpus_root_path
    if not root.exists():
        raise LoadError(f"corpus root not found: {root}")
    if not root.is_dir():
        raise LoadError(f"corpus root is not a directory: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise LoadError(f"corpus root is not readable: {root}")

    exts = normalize_extensions(extensions)
    documents: List[Document] = []
    seen: dict = {}
    for relative, path in discover_files(root, exts):
        doc_id = normalize_document_id(relative, exts)
        if doc_id in seen:
            raise LoadError(f"{relative} and {seen[doc_id]} share the document id {doc_id!r}")
        seen[doc_id] = relative
        parsed = parse_document(read_text(path), path=relative)
        documents.append(parsed.model_copy(update={"id": doc_id}))

    documents = resolve_links(documents, exts)
    corpus = Corpus(root=str(root), documents=tuple(documents))
    logger.info("Loaded %s documents from %s", len(corpus), root)
    return corpus


def dangling_links(corpus: Corpus) -> List[Tuple[str, Link]]:
    return corpus.dangling_links()


def export_documents(documents: Iterable[Document], output_path: Path) -> int:
    """Persist parsed documents as JSON lines."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with output_path.open("w", encoding="utf-8") as handle:
        for count, document in enumerate(documents, start=1):
            handle.write(json.dumps(document.model_dump(), ensure_ascii=False) + "\n")
    logger.info("Wrote %s document rows to %s", count, output_path)
    return count


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(level=settings.log_level)
    try:
        corpus = load()
    except (LoadError, ParseError) as exc:
        logger.error("Corpus loading failed: %s", exc)
        return
    for doc_id, link in corpus.dangling_links():
        logger.warning("Dangling link in %s: %s", doc_id, link.target)
    export_documents(corpus.documents, settings.documents_export_path_obj)


if __name__ == "__main__":
    main()
