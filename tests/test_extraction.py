from __future__ import annotations

from core.extraction import extract_delimited, is_tournament_content, normalize_name, tokenize


def test_extract_returns_delimited_content() -> None:
    assert extract_delimited("شاهدت *ناروتو/ساسكي* اليوم") == "ناروتو/ساسكي"


def test_extract_without_delimiters_is_empty() -> None:
    assert extract_delimited("hello there") == ""
    assert extract_delimited("only *one asterisk") == ""
    assert extract_delimited("") == ""


def test_extract_joins_multiple_spans_in_order() -> None:
    assert extract_delimited("*goku* and then *vegeta*") == "goku vegeta"


def test_extract_replaces_decorations_with_single_space() -> None:
    assert extract_delimited("*ناروتو🔥🔥ساسكي*") == "ناروتو ساسكي"
    assert extract_delimited("* ⚔️ luffy  ✨ *") == "luffy"


def test_extract_only_decorations_is_empty() -> None:
    assert extract_delimited("*🔥🔥*") == ""


def test_tokenize_splits_on_latin_and_arabic_separators() -> None:
    assert tokenize("a/b-c|d,e;f:g h") == ["a", "b", "c", "d", "e", "f", "g", "h"]
    assert tokenize("ناروتو،ساسكي؛ساكورا") == ["ناروتو", "ساسكي", "ساكورا"]


def test_tokenize_discards_empty_fragments() -> None:
    assert tokenize("//goku -- vegeta||") == ["goku", "vegeta"]
    assert tokenize("") == []


def test_normalize_folds_letter_variants() -> None:
    assert normalize_name("أحمد") == normalize_name("احمد")
    assert normalize_name("ساكورة") == normalize_name("ساكوره")
    assert normalize_name("مصطفى") == normalize_name("مصطفي")
    assert normalize_name("  Goku ") == "goku"


def test_normalize_strips_harakat_and_tatweel() -> None:
    assert normalize_name("نَارُوتُو") == "ناروتو"
    assert normalize_name("نـاروتو") == "ناروتو"


def test_tournament_detection() -> None:
    assert is_tournament_content("goku vs vegeta")
    assert is_tournament_content("ناروتو ضد ساسكي")
    assert is_tournament_content("ايتاشي مدارا")
    assert not is_tournament_content("ناروتو")
    assert not is_tournament_content("   ")


def test_extract_splits_on_extended_pictographs() -> None:
    for glyph in ("\U0001FAE1", "\u2B50", "\u2B1B", "\U0001F7E2"):
        assert tokenize(extract_delimited(f"*ناروتو{glyph}ساسكي*")) == ["ناروتو", "ساسكي"]


def test_extract_drops_bidi_and_joiner_marks() -> None:
    content = extract_delimited("*ناروتو\u200f/ساسكي\u200e*")
    assert tokenize(content) == ["ناروتو", "ساسكي"]
    assert extract_delimited("*\u061cluffy\u200c*") == "luffy"


def test_normalize_ignores_invisible_marks() -> None:
    assert normalize_name("ناروتو\u200f") == normalize_name("ناروتو")
    assert normalize_name("\u200eسا\u200cسكي") == "ساسكي"
