"""Heuristic scoring of normalized tokens (core domain).

The scorer is an optional gate in front of the pipeline. Scores are additive
and clamped to [0, 1]; a token is a candidate when the score exceeds 0.6.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

CANDIDATE_THRESHOLD = 0.6

STOP_WORDS = frozenset(
    {
        "في", "من", "الى", "على", "عن", "كيف", "متى", "اين", "ماذا", "هذا",
        "هذه", "ذلك", "تلك", "التي", "الذي", "عند", "مع", "حول", "بين", "خلف",
        "امام", "فوق", "تحت", "داخل", "خارج", "قبل", "بعد", "خلال", "اثناء",
        "هنا", "هناك", "حيث", "لماذا",
        "the", "and", "or", "in", "on", "at", "to", "for", "of", "with", "by",
        "from", "into", "through", "during",
    }
)

NON_NAME_WORDS = frozenset(
    {
        "اسم", "هذا", "هذه", "ذلك", "تلك", "التي", "الذي", "عند", "مع", "في",
        "من", "الى", "على", "كيف", "متى", "اين", "ماذا", "هنا", "هناك", "حيث",
        "لماذا", "كذا", "كذلك", "ايضا",
        "س", "ص", "ض", "ط", "ظ", "ع", "غ", "ف", "ق", "ك", "ل", "م", "ن", "ه",
        "و", "ي",
    }
)

_OUTSIDE_ALPHABET_RE = re.compile(r"[^ا-ي]")
_NUMERIC_RE = re.compile(r"^[0-9]+$")
_NAME_SUFFIX_RE = re.compile(r"كو$|كي$|تو$|رو$|مي$|ري$|سا|نا|يو|شي")
_ALPHABET_4_8_RE = re.compile(r"^[ا-ي]{4,8}$")
_ALPHABET_4_6_RE = re.compile(r"^[ا-ي]{4,6}$")
_TERMINAL_RE = re.compile(r"ه$|ة$|ي$|و$|ا$")
_VOWELS_RE = re.compile(r"[اوي]")
_TRIPLED_RE = re.compile(r"([ا-ي])\1\1")
_EMBEDDED_STOP_RE = re.compile(
    r"هذا|هذه|ذلك|تلك|التي|الذي|عند|مع|في|من|الى|على|كيف|متى|اين|ماذا|اسم"
)


@dataclass(frozen=True)
class Classification:
    is_candidate: bool
    confidence: float


REJECTED = Classification(is_candidate=False, confidence=0.0)


def classify(token: str) -> Classification:
    """Score a normalized token for how plausibly it names a character."""

    if _OUTSIDE_ALPHABET_RE.search(token) or _NUMERIC_RE.match(token) or token in STOP_WORDS:
        return REJECTED
    if len(token) < 4 or len(token) > 10:
        return REJECTED
    if token in NON_NAME_WORDS:
        return REJECTED

    score = 0.0
    if _NAME_SUFFIX_RE.search(token):
        score += 0.7
    if _ALPHABET_4_8_RE.match(token):
        score += 0.5
    if _TERMINAL_RE.search(token):
        score += 0.6
    if 4 <= len(token) <= 8:
        score += 0.5

    consonant_ratio = (len(token) - len(_VOWELS_RE.findall(token))) / len(token)
    if 0.4 <= consonant_ratio <= 0.7:
        score += 0.4
    if _TRIPLED_RE.search(token):
        score -= 0.5
    if _EMBEDDED_STOP_RE.search(token):
        score -= 0.8
    if _ALPHABET_4_6_RE.match(token) and token not in STOP_WORDS:
        score += 0.3

    confidence = max(0.0, min(score, 1.0))
    return Classification(is_candidate=confidence > CANDIDATE_THRESHOLD, confidence=confidence)
