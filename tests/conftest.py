from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

import pytest


@pytest.fixture
def write_corpus(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Write ``{relative path: text}`` below a fresh corpus root."""

    def _write(files: Dict[str, str]) -> Path:
        root = tmp_path / "notes"
        root.mkdir(exist_ok=True)
        for relative, text in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return root

    return _write


@pytest.fixture
def cache_corpus(write_corpus) -> Path:
    return write_corpus(
        {
            "a.md": "# A\n\n## A1\n\nThe cache, a cache and another cache.\n",
            "b.md": "# B\n\nOne cache here.\n",
            "c.md": "# C\n\nNothing relevant.\n",
        }
    )


@pytest.fixture
def linked_corpus(write_corpus) -> Path:
    return write_corpus(
        {
            "a.md": "# A\n\nSee [B](b.md) and [missing](missing.md).\n",
            "b.md": "# B\n\nBack to [A](a.md#top) and [self](b.md).\n",
            "guides/x.md": (
                "# X\n\n[up](../b.md), [root](/a.md), [sibling](y), [dir](sub/)\n"
            ),
            "guides/y.md": "# Y\n",
            "guides/sub/README.md": "# Sub\n",
        }
    )
