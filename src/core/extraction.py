"""Delimited-text extraction and tokenization (core domain)."""

from __future__ import annotations

import re

DELIMITED_RE = re.compile(r"\*([^*]+)\*")

# Pictographic ranges treated as decoration rather than content.
DECORATION_RE = re.compile(
    "["
    "\U0001F600-\U0001F64F"
    "\U0001F300-\U0001F5FF"
    "\U0001F680-\U0001F6FF"
    "\U0001F1E0-\U0001F1FF"
    "\U0001F700-\U0001F7FF"
    "\U0001F900-\U0001F9FF"
    "\U0001FA70-\U0001FAFF"
    "\u2600-\u26FF"
    "\u2700-\u27BF"
    "\u2B00-\u2BFF"
    "\uFE0F"
    "\u200D"
    "]+"
)

# Bidi and joiner-control marks that change no visible glyph.
INVISIBLE_RE = re.compile("[\u061C\u200B\u200C\u200E\u200F\u202A-\u202E\u2066-\u2069]")

# Latin separators plus the Arabic comma and semicolon.
SEPARATOR_RE = re.compile(r"[\s/\-|,;:\u060C\u061B]+")

TOURNAMENT_RE = re.compile(
    r"تورنير|مسابقة|بطولة|مباراة|tournament|match|ضد|vs|versus|/|\|",
    re.IGNORECASE,
)

_LETTER_FOLDS = (
    (re.compile("[أإآا]"), "ا"),
    (re.compile("[ىي]"), "ي"),
    (re.compile("[ةه]"), "ه"),
    (re.compile("[ؤو]"), "و"),
    (re.compile("[ئء]"), "ء"),
    (re.compile("[كک]"), "ك"),
)
_HARAKAT_RE = re.compile("[\u064B-\u0652\u0640]")


def _collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def extract_delimited(text: str) -> str:
    """Return every `*...*` span joined by spaces, decorations removed.

    Returns an empty string when the text has no delimited span.
    """

    spans = DELIMITED_RE.findall(text)
    if not spans:
        return ""
    content = INVISIBLE_RE.sub("", " ".join(spans))
    return _collapse_whitespace(DECORATION_RE.sub(" ", content))


def tokenize(cleaned: str) -> list[str]:
    """Split cleaned content on separators, keeping left-to-right order."""

    return [part for part in SEPARATOR_RE.split(cleaned) if part]


def normalize_name(token: str) -> str:
    """Fold spelling variants so lookups are stable across inputs."""

    folded = _HARAKAT_RE.sub("", INVISIBLE_RE.sub("", token).strip())
    for pattern, replacement in _LETTER_FOLDS:
        folded = pattern.sub(replacement, folded)
    return folded.lower()


def is_tournament_content(content: str) -> bool:
    """Versus/competition vocabulary or more than one token."""

    if not content.strip():
        return False
    if TOURNAMENT_RE.search(content):
        return True
    return len(tokenize(content)) >= 2
