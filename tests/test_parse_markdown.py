from __future__ import annotations

import pytest

from studyindex.errors import ParseError
from studyindex.ingestion.parse_markdown import (
    detect_heading,
    parse_document,
    plain_text,
    strip_heading_markers,
)

SAMPLE = """# ASP.NET Core

Giriş paragrafı.

## Middleware

Middleware pipeline açıklaması.

```csharp
app.Use(async (context, next) => await next());
# not a heading
```

### Sıralama

Detay.

## Middleware
İkinci.
"""


def test_sections_form_a_tree_by_level() -> None:
    document = parse_document(SAMPLE, path="aspnet/core.md")

    assert document.title == "ASP.NET Core"
    assert [(s.level, s.heading, s.parent) for s in document.sections] == [
        (1, "ASP.NET Core", None),
        (2, "Middleware", 0),
        (3, "Sıralama", 1),
        (2, "Middleware", 0),
    ]
    assert [s.section_id for s in document.sections] == [
        "aspnet-core",
        "middleware",
        "sıralama",
        "middleware-1",
    ]
    assert [s.index for s in document.children(0)] == [1, 3]


def test_body_excludes_nested_subsection_content() -> None:
    document = parse_document(SAMPLE)

    assert document.sections[0].body == "\nGiriş paragrafı.\n\n"
    assert "Detay" not in document.sections[1].body
    assert document.sections[2].body == "\nDetay.\n\n"
    assert document.sections[3].body == "İkinci.\n"


def test_code_blocks_keep_language_and_hide_headings() -> None:
    document = parse_document(SAMPLE)

    middleware = document.sections[1]
    assert len(middleware.code_blocks) == 1
    block = middleware.code_blocks[0]
    assert block.language == "csharp"
    assert block.text == "app.Use(async (context, next) => await next());\n# not a heading\n"
    assert all(section.heading != "not a heading" for section in document.sections)


def test_tags_come_from_directories_and_code_languages() -> None:
    document = parse_document(SAMPLE, path="aspnet/core.md")
    assert document.tags == ("aspnet", "csharp")


def test_round_trip_reproduces_body_without_heading_markers() -> None:
    document = parse_document(SAMPLE)
    assert plain_text(document) == strip_heading_markers(SAMPLE)
    assert "# not a heading" in plain_text(document)


def test_round_trip_with_preamble_and_orphans() -> None:
    text = "\n\nintro line\n### Deep\nbody\n# Real\n~~~\n## fenced\n~~~\n"
    document = parse_document(text)
    assert plain_text(document) == strip_heading_markers(text)


def test_orphan_heading_gets_untitled_ancestor() -> None:
    document = parse_document("### Deep\n\ntext\n")

    untitled, deep = document.sections
    assert untitled.synthetic is True
    assert (untitled.level, untitled.heading, untitled.parent) == (1, "Untitled", None)
    assert (deep.level, deep.heading, deep.parent) == (3, "Deep", 0)
    assert document.title == ""


def test_preamble_is_kept_in_untitled_section() -> None:
    document = parse_document("Some intro.\n\n# Title\n\nBody.\n")

    assert document.sections[0].synthetic is True
    assert document.sections[0].body == "Some intro.\n\n"
    assert document.sections[1].heading == "Title"
    assert document.sections[1].parent is None
    assert document.title == "Title"


def test_skipped_level_attaches_to_nearest_ancestor() -> None:
    document = parse_document("# A\n#### Deep\n## B\n")
    assert [s.parent for s in document.sections] == [None, 0, 0]
    assert all(not s.synthetic for s in document.sections)


@pytest.mark.parametrize("text", ["", "   \n\n\t\n"])
def test_empty_file_has_no_sections(text: str) -> None:
    document = parse_document(text)
    assert document.title == ""
    assert document.sections == ()
    assert document.links == ()


def test_links_skip_images_external_targets_and_code() -> None:
    text = (
        "# Links\n"
        "See [B](b.md) and [ext](https://example.com) and ![img](pic.png) and [anchor](#x).\n"
        "`[code](c.md)` and [Dir](../up/readme.md \"Title\") and [mail](mailto:a@b.c)\n"
        "```\n[fenced](y.md)\n```\n"
    )
    document = parse_document(text)
    assert [(link.text, link.target, link.resolved) for link in document.links] == [
        ("B", "b.md", None),
        ("Dir", "../up/readme.md", None),
    ]


def test_heading_detection_rules() -> None:
    assert detect_heading("## Title ##") == (2, "Title")
    assert detect_heading("   # Indented") == (1, "Indented")
    assert detect_heading("#hashtag") is None
    assert detect_heading("####### seven") is None
    assert detect_heading("#") == (1, "")
    assert detect_heading("## #") == (2, "")
    assert detect_heading("### ###   ") == (3, "")
    assert detect_heading("## # #") == (2, "#")
    assert detect_heading("## #tag") == (2, "#tag")


def test_closing_sequence_alone_gives_empty_heading() -> None:
    text = "# A\n\n## #\n\nbody\n"
    document = parse_document(text)

    assert [(s.level, s.heading, s.section_id) for s in document.sections] == [
        (1, "A", "a"),
        (2, "", "section"),
    ]
    assert plain_text(document) == strip_heading_markers(text)


def test_unterminated_fence_runs_to_end_of_file() -> None:
    document = parse_document("# A\n```python\nx = 1\n# comment\n")
    assert len(document.sections) == 1
    assert document.sections[0].code_blocks[0].text == "x = 1\n# comment\n"
    assert document.sections[0].code_blocks[0].language == "python"


def test_question_headings_and_soru_cevap_pairs() -> None:
    text = (
        "# Sorular\n\n"
        "## Middleware nedir?\n\n"
        "Pipeline içinde çalışan bileşen.\n\n"
        "## Diğer\n\n"
        "**Soru:** DI nedir?\n"
        "**Cevap:** Bağımlılıkların dışarıdan verilmesi.\n\n"
        "Soru: Cevapsız soru\n"
    )
    document = parse_document(text)

    assert [(p.question, p.answer, p.section_index) for p in document.qa_pairs] == [
        ("Middleware nedir?", "Pipeline içinde çalışan bileşen.", 1),
        ("DI nedir?", "Bağımlılıkların dışarıdan verilmesi.", 2),
    ]


def test_nul_bytes_raise_parse_error() -> None:
    with pytest.raises(ParseError):
        parse_document("# A\x00\n", path="broken.md")
