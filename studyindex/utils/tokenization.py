"""Tokenizer shared by index building and querying."""

from __future__ import annotations

import re
import unicodedata
from collections import Counter
from typing import Iterable, List, Optional

from studyindex.config import settings

TOKEN_SPLIT_PATTERN = re.compile(r"[^\w]+|_+")
SLUG_STRIP_PATTERN = re.compile(r"[^\w\- ]+")


def normalize(text: str) -> str:
    # \w does not match combining marks, so compose first
    text = unicodedata.normalize("NFC", text)
    # str.lower() turns the Turkish dotted capital into "i" plus a combining dot
    return text.replace("İ", "i").lower()


def tokenize(text: str, min_length: Optional[int] = None) -> List[str]:
    """Lowercase ``text`` and split it on non-alphanumeric boundaries."""
    if min_length is None:
        min_length = settings.min_token_length
    return [
        token
        for token in TOKEN_SPLIT_PATTERN.split(normalize(text))
        if token and len(token) >= min_length
    ]


def term_frequencies(text: str, min_length: Optional[int] = None) -> Counter:
    return Counter(tokenize(text, min_length))


def unique_terms(text: str, min_length: Optional[int] = None) -> List[str]:
    """Query terms in first-seen order, duplicates dropped."""
    seen: List[str] = []
    for token in tokenize(text, min_length):
        if token not in seen:
            seen.append(token)
    return seen


def slugify(text: str) -> str:
    """GitHub-style anchor for a heading."""
    slug = SLUG_STRIP_PATTERN.sub("", normalize(text.strip()))
    return re.sub(r"\s", "-", slug)


def unique_slug(text: str, taken: Iterable[str]) -> str:
    base = slugify(text) or "section"
    taken = set(taken)
    if base not in taken:
        return base
    suffix = 1
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"
