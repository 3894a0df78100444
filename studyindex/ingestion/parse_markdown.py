"""Parse Markdown study notes into structured documents."""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

from studyindex.errors import ParseError
from studyindex.models.document import CodeBlock, Document, Link, QAPair, Section
from studyindex.utils.tokenization import unique_slug

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"

HEADING_PATTERN = re.compile(
    r"^ {0,3}(?P<marks>#{1,6})(?:[ \t]+(?P<text>.*?))??(?:[ \t]+#+)?[ \t]*$"
)
FENCE_PATTERN = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
CLOSING_FENCE_PATTERN = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})[ \t]*$")
INLINE_CODE_PATTERN = re.compile(r"(`+).*?\1")
LINK_PATTERN = re.compile(
    r"(?<!!)\[(?P<text>[^\]]*)\]\(\s*(?P<target><[^>]*>|[^\s)]+)"
    r"(?:\s+(?:\"[^\"]*\"|'[^']*'))?\s*\)"
)
SCHEME_PATTERN = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|//)")

_BOLD = r"(?:\*\*|__)"
QUESTION_PATTERN = re.compile(
    rf"^\s*(?:[-*]\s+)?{_BOLD}?(?:soru|question|s|q)(?:\s*\d+)?\s*"
    rf"(?::{_BOLD}?|{_BOLD}:)\s*(?P<text>.*)$",
    re.IGNORECASE,
)
ANSWER_PATTERN = re.compile(
    rf"^\s*(?:[-*]\s+)?{_BOLD}?(?:cevap|yanıt|answer|c|a)\s*"
    rf"(?::{_BOLD}?|{_BOLD}:)\s*(?P<text>.*)$",
    re.IGNORECASE,
)


@dataclass
class _Fence:
    char: str
    length: int
    language: Optional[str]
    lines: List[str] = field(default_factory=list)


@dataclass
class _DraftSection:
    level: int
    heading: str
    parent: Optional[int]
    synthetic: bool = False
    lines: List[str] = field(default_factory=list)
    code_blocks: List[CodeBlock] = field(default_factory=list)
    prose: List[str] = field(default_factory=list)


def detect_heading(line: str) -> Optional[Tuple[int, str]]:
    """Return ``(level, text)`` if the line is an ATX heading."""
    match = HEADING_PATTERN.match(line)
    if not match:
        return None
    return len(match.group("marks")), (match.group("text") or "").strip()


def detect_fence(line: str) -> Optional[_Fence]:
    match = FENCE_PATTERN.match(line)
    if not match:
        return None
    marker = match.group("fence")
    info = match.group("info").strip()
    if marker[0] == "`" and "`" in info:
        return None
    language = info.split()[0] if info else None
    return _Fence(char=marker[0], length=len(marker), language=language)


def closes_fence(line: str, fence: _Fence) -> bool:
    match = CLOSING_FENCE_PATTERN.match(line)
    if not match:
        return False
    marker = match.group("fence")
    return marker[0] == fence.char and len(marker) >= fence.length


def is_external_target(target: str) -> bool:
    return bool(SCHEME_PATTERN.match(target)) or target.startswith("#")


def extract_links(line: str) -> Iterator[Link]:
    """Yield cross-document links written on a single line of prose."""
    prose = INLINE_CODE_PATTERN.sub("", line)
    for match in LINK_PATTERN.finditer(prose):
        target = match.group("target").strip()
        if target.startswith("<") and target.endswith(">"):
            target = target[1:-1].strip()
        if not target or is_external_target(target):
            continue
        yield Link(text=match.group("text").strip(), target=target)


def iter_structural_lines(lines: Iterable[str]) -> Iterator[Tuple[str, bool]]:
    """Yield each line with a flag telling whether it sits inside a code fence."""
    fence: Optional[_Fence] = None
    for line in lines:
        if fence is not None:
            if closes_fence(line, fence):
                fence = None
            yield line, True
            continue
        opening = detect_fence(line)
        if opening:
            fence = opening
            yield line, True
            continue
        yield line, False


def extract_qa_pairs(prose_lines: List[str], section_index: int) -> List[QAPair]:
    """Collect ``Soru:``/``Cevap:`` style pairs from the prose of one section."""
    pairs: List[QAPair] = []
    question: Optional[List[str]] = None
    answer: Optional[List[str]] = None

    def flush() -> None:
        if question is not None and answer is not None:
            answer_text = "\n".join(answer).strip()
            if answer_text:
                pairs.append(
                    QAPair(
                        question=" ".join(part for part in question if part).strip(),
                        answer=answer_text,
                        section_index=section_index,
                    )
                )

    for line in prose_lines:
        question_match = QUESTION_PATTERN.match(line)
        if question_match:
            flush()
            question = [question_match.group("text").strip()]
            answer = None
            continue
        if question is None:
            continue
        if answer is None:
            answer_match = ANSWER_PATTERN.match(line)
            if answer_match:
                answer = [answer_match.group("text")]
            elif line.strip():
                question.append(line.strip())
            continue
        answer.append(line)
    flush()
    return pairs


def build_tags(path: str, code_blocks: Iterable[CodeBlock]) -> Tuple[str, ...]:
    tags = {part.lower() for part in posixpath.dirname(path).split("/") if part}
    tags.update(block.language.lower() for block in code_blocks if block.language)
    return tuple(sorted(tags))


def parse_document(text: str, path: str = "") -> Document:
    """Parse one Markdown file into a ``Document`` without an id."""
    if "\x00" in text:
        raise ParseError(f"{path or '<text>'} contains NUL bytes and is not Markdown")

    drafts: List[_DraftSection] = []
    stack: List[int] = []
    links: List[Link] = []
    fence: Optional[_Fence] = None

    def open_section(level: int, heading: str, synthetic: bool = False) -> _DraftSection:
        while stack and drafts[stack[-1]].level >= level:
            stack.pop()
        if not stack and level > 1:
            open_section(1, UNTITLED, synthetic=True)
        draft = _DraftSection(
            level=level,
            heading=heading,
            parent=stack[-1] if stack else None,
            synthetic=synthetic,
        )
        drafts.append(draft)
        stack.append(len(drafts) - 1)
        return draft

    def current() -> _DraftSection:
        if not drafts:
            return open_section(1, UNTITLED, synthetic=True)
        return drafts[-1]

    for line in text.splitlines():
        if fence is not None:
            current().lines.append(line)
            if closes_fence(line, fence):
                current().code_blocks.append(
                    CodeBlock(language=fence.language, text="".join(f"{item}\n" for item in fence.lines))
                )
                fence = None
            else:
                fence.lines.append(line)
            continue

        if not drafts and not line.strip():
            continue

        opening = detect_fence(line)
        if opening:
            fence = opening
            current().lines.append(line)
            continue

        heading = detect_heading(line)
        if heading:
            level, heading_text = heading
            open_section(level, heading_text)
            links.extend(extract_links(heading_text))
            continue

        draft = current()
        draft.lines.append(line)
        draft.prose.append(line)
        links.extend(extract_links(line))

    if fence is not None:
        current().code_blocks.append(
            CodeBlock(language=fence.language, text="".join(f"{item}\n" for item in fence.lines))
        )

    sections: List[Section] = []
    qa_pairs: List[QAPair] = []
    slugs: List[str] = []
    for index, draft in enumerate(drafts):
        section_id = unique_slug(draft.heading, slugs)
        slugs.append(section_id)
        body = "".join(f"{line}\n" for line in draft.lines)
        sections.append(
            Section(
                index=index,
                section_id=section_id,
                level=draft.level,
                heading=draft.heading,
                body=body,
                code_blocks=tuple(draft.code_blocks),
                parent=draft.parent,
                synthetic=draft.synthetic,
            )
        )
        if not draft.synthetic and draft.heading.endswith("?"):
            qa_pairs.append(QAPair(question=draft.heading, answer=body.strip(), section_index=index))
        qa_pairs.extend(extract_qa_pairs(draft.prose, index))

    title = next(
        (section.heading for section in sections if section.level == 1 and not section.synthetic),
        "",
    )
    all_code = [block for section in sections for block in section.code_blocks]
    logger.debug("Parsed %s sections and %s links from %s", len(sections), len(links), path or "<text>")
    return Document(
        path=path,
        title=title,
        sections=tuple(sections),
        links=tuple(links),
        qa_pairs=tuple(qa_pairs),
        tags=build_tags(path, all_code),
    )


def strip_heading_markers(text: str) -> str:
    """Source text with each heading line reduced to its heading text.

    Leading blank lines are dropped; a document starts at its first
    non-blank line.
    """
    output: List[str] = []
    for line, in_code in iter_structural_lines(text.splitlines()):
        if not output and not line.strip():
            continue
        heading = None if in_code else detect_heading(line)
        output.append(heading[1] if heading else line)
    return "".join(f"{line}\n" for line in output)


def plain_text(document: Document) -> str:
    """Concatenate every section in order, headings without their markers."""
    parts: List[str] = []
    for section in document.sections:
        if not section.synthetic:
            parts.append(f"{section.heading}\n")
        parts.append(section.body)
    return "".join(parts)
