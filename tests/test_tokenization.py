import unicodedata

from studyindex.utils.tokenization import slugify, tokenize, unique_slug, unique_terms


def test_tokenize_lowercases_and_splits_on_punctuation() -> None:
    assert tokenize("ASP.NET Core: DI-container, IoC!") == [
        "asp",
        "net",
        "core",
        "di",
        "container",
        "ioc",
    ]


def test_tokenize_drops_short_tokens_and_underscores() -> None:
    assert tokenize("a b_c dd x1") == ["dd", "x1"]
    assert tokenize("a b dd", min_length=1) == ["a", "b", "dd"]


def test_tokenize_keeps_turkish_letters() -> None:
    assert tokenize("İstisna yönetimi ve Güvenlik") == ["istisna", "yönetimi", "ve", "güvenlik"]


def test_tokenize_composes_decomposed_text() -> None:
    decomposed = unicodedata.normalize("NFD", "Güvenlik şifreleme İstisna")
    assert tokenize(decomposed) == ["güvenlik", "şifreleme", "istisna"]
    assert slugify(decomposed) == "güvenlik-şifreleme-istisna"


def test_unique_terms_preserves_first_seen_order() -> None:
    assert unique_terms("cache Redis cache redis") == ["cache", "redis"]


def test_slugify_matches_heading_anchors() -> None:
    assert slugify("ASP.NET Core") == "aspnet-core"
    assert slugify("1. Middleware nedir?") == "1-middleware-nedir"


def test_unique_slug_appends_suffix() -> None:
    assert unique_slug("Intro", []) == "intro"
    assert unique_slug("Intro", ["intro"]) == "intro-1"
    assert unique_slug("Intro", ["intro", "intro-1"]) == "intro-2"
    assert unique_slug("???", []) == "section"
