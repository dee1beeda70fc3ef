"""Simulated human mistakes for outbound replies (core domain)."""

from __future__ import annotations

import random
from typing import Optional, Sequence

from core.config import MistakeConfig
from core.models import MistakeDecision, MistakeKind

# Physical rows of the Arabic (101) layout on QWERTY positions. None marks
# the lam-alef key, which types two characters.
ARABIC_ROWS: tuple[tuple[Optional[str], ...], ...] = (
    ("ض", "ص", "ث", "ق", "ف", "غ", "ع", "ه", "خ", "ح", "ج", "د"),
    ("ش", "س", "ي", "ب", "ل", "ا", "ت", "ن", "م", "ك", "ط"),
    ("ئ", "ء", "ؤ", "ر", None, "ى", "ة", "و", "ز", "ظ"),
)
LATIN_ROWS: tuple[tuple[Optional[str], ...], ...] = (
    tuple("qwertyuiop"),
    tuple("asdfghjkl"),
    tuple("zxcvbnm"),
)


def _build_neighbors(rows: Sequence[Sequence[Optional[str]]]) -> dict[str, frozenset[str]]:
    """Adjacency on a staggered keyboard: same row, and the two keys above/below."""

    graph: dict[str, set] = {}
    for r, row in enumerate(rows):
        for c, key in enumerate(row):
            if key is None:
                continue
            spots = [(r, c - 1), (r, c + 1), (r - 1, c), (r - 1, c + 1), (r + 1, c - 1), (r + 1, c)]
            near = graph.setdefault(key, set())
            for nr, nc in spots:
                if 0 <= nr < len(rows) and 0 <= nc < len(rows[nr]):
                    other = rows[nr][nc]
                    if other is not None and other != key:
                        near.add(other)
    return {key: frozenset(value) for key, value in graph.items()}


KEYBOARD_NEIGHBORS: dict[str, frozenset[str]] = {
    **_build_neighbors(ARABIC_ROWS),
    **_build_neighbors(LATIN_ROWS),
}


def _typo(text: str, rng: random.Random) -> Optional[str]:
    positions = [i for i, ch in enumerate(text) if ch in KEYBOARD_NEIGHBORS]
    if not positions:
        return None
    index = rng.choice(positions)
    replacement = rng.choice(sorted(KEYBOARD_NEIGHBORS[text[index]]))
    return text[:index] + replacement + text[index + 1 :]


def _reorder(tokens: list[str], rng: random.Random) -> list[str]:
    shuffled = rng.sample(tokens, len(tokens))
    if shuffled == tokens:
        shuffled = tokens[1:] + tokens[:1]
    return shuffled


def _partial(tokens: list[str], ratio: float, rng: random.Random) -> list[str]:
    drop = min(max(1, round(len(tokens) * ratio)), len(tokens) - 1)
    kept = sorted(rng.sample(range(len(tokens)), len(tokens) - drop))
    return [tokens[i] for i in kept]


class MistakeInjector:
    """Decide per response whether, and how, to corrupt it."""

    def __init__(self, config: MistakeConfig) -> None:
        self._config = config
        self._kinds = [MistakeKind(kind) for kind in config.kinds]

    @property
    def enabled(self) -> bool:
        return self._config.enabled and bool(self._kinds)

    def _applicable(self, text: str, tokens: list[str]) -> list[MistakeKind]:
        kinds = []
        for kind in self._kinds:
            if kind is MistakeKind.TYPO and not any(ch in KEYBOARD_NEIGHBORS for ch in text):
                continue
            if kind is MistakeKind.REORDER and len(set(tokens)) < 2:
                continue
            if kind is MistakeKind.PARTIAL_RESPONSE and len(tokens) < 2:
                continue
            kinds.append(kind)
        return kinds

    def decide(self, text: str, rng: random.Random) -> MistakeDecision:
        tokens = text.split(" ")
        clean = MistakeDecision(False, None, tuple(tokens), text)
        if not self.enabled or rng.random() >= self._config.probability:
            return clean

        kinds = self._applicable(text, tokens)
        if not kinds:
            return clean
        kind = rng.choice(kinds)

        if kind is MistakeKind.TYPO:
            corrupted = _typo(text, rng) or text
        elif kind is MistakeKind.REORDER:
            corrupted = " ".join(_reorder(tokens, rng))
        elif kind is MistakeKind.PARTIAL_RESPONSE:
            corrupted = " ".join(_partial(tokens, self._config.partial_drop_ratio, rng))
        else:
            corrupted = text
        return MistakeDecision(True, kind, tuple(tokens), corrupted)

    def wants_correction(self, decision: MistakeDecision, rng: random.Random) -> bool:
        return decision.is_textual and rng.random() < self._config.correction_probability

    @property
    def delay_factor(self) -> float:
        return self._config.delay_factor

    @property
    def correction_delay(self) -> float:
        return self._config.correction_delay_ms / 1000
