from __future__ import annotations

from core.classifier import classify


def test_accepts_japanese_style_name() -> None:
    verdict = classify("ناروتو")
    assert verdict.is_candidate
    assert verdict.confidence == 1.0


def test_rejects_tokens_outside_alphabet() -> None:
    assert classify("goku").confidence == 0
    assert classify("1234").confidence == 0
    assert not classify("ناروتو1").is_candidate


def test_rejects_stop_words_and_bad_lengths() -> None:
    assert not classify("في").is_candidate
    assert classify("ساس").confidence == 0
    assert classify("ااااااااااب").confidence == 0


def test_rejects_non_name_words() -> None:
    assert classify("ايضا").confidence == 0


def test_confidence_is_clamped() -> None:
    for token in ("ناروتو", "ساكورا", "كاكاشي", "بببببب"):
        verdict = classify(token)
        assert 0.0 <= verdict.confidence <= 1.0
        assert verdict.is_candidate == (verdict.confidence > 0.6)


def test_embedded_stop_word_lowers_score() -> None:
    plain = classify("جلعدب")
    embedded = classify("جمعدب")
    assert embedded.confidence < plain.confidence
