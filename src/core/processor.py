"""Core message processing pipeline.

This module is integration-agnostic. The order is strict:
1) Fast-exit for empty text or a repeat of the previous processed message
2) Extract delimited content and split it into candidates
3) Optional heuristic filtering
4) Optional learn step through the NameResolver
5) Background persistence of the name store
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from core.classifier import classify
from core.config import PIPELINE_MODES, PipelineConfig
from core.extraction import extract_delimited, is_tournament_content, normalize_name, tokenize
from core.models import Candidate, PipelineResult, ResponseText
from core.names import LearnedNameStore
from core.resolver import LOCAL_SOURCE, NameResolver

LOGGER = logging.getLogger(__name__)


class MessagePipeline:
    """Turns message text into ordered candidates and a reply text."""

    def __init__(
        self,
        store: LearnedNameStore,
        config: PipelineConfig,
        resolver: Optional[NameResolver] = None,
    ) -> None:
        if config.mode not in PIPELINE_MODES:
            raise ValueError(f"Unsupported pipeline mode: {config.mode}")
        self._store = store
        self._config = config
        self._resolver = resolver
        self._last_processed = ""
        self._background: set[asyncio.Task] = set()

    @property
    def last_processed(self) -> str:
        return self._last_processed

    def _candidates(self, content: str) -> list[Candidate]:
        if not content:
            return []

        candidates: list[Candidate] = []
        for position, token in enumerate(tokenize(content)):
            confidence = 1.0
            if self._config.mode == "heuristic":
                verdict = classify(normalize_name(token))
                if not verdict.is_candidate:
                    continue
                confidence = verdict.confidence
            candidates.append(Candidate(input=token, position=position, confidence=confidence))
        return candidates

    async def process(self, text: str) -> Optional[PipelineResult]:
        """Process one message text, or return None when nothing applies."""

        if not text.strip() or text == self._last_processed:
            return None

        content = extract_delimited(text)
        candidates = self._candidates(content)
        if not candidates:
            return None

        # Set before any await so an interleaved identical message is suppressed.
        self._last_processed = text

        if self._config.resolve_names and self._resolver is not None:
            await self._learn(candidates)

        self._schedule_persist()
        return PipelineResult(
            candidates=tuple(candidates),
            is_tournament_style=is_tournament_content(content),
            original_text=text,
        )

    async def _learn(self, candidates: list[Candidate]) -> None:
        records = await asyncio.gather(*(self._resolver.resolve(c.input) for c in candidates))
        for candidate, record in zip(candidates, records):
            if record is None or record.source == LOCAL_SOURCE:
                continue
            self._store.remember(candidate.input, record)
            LOGGER.info("Learned %r -> %r from %s", candidate.input, record.name, record.source)

    def _schedule_persist(self) -> None:
        # Fire-and-forget: no ordering guarantee relative to replies.
        task = asyncio.create_task(asyncio.to_thread(self._store.persist))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def join(self) -> None:
        """Wait for pending background persistence."""

        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)


def format_response(result: Optional[PipelineResult]) -> Optional[ResponseText]:
    """Join candidate inputs with single spaces, in original order."""

    if result is None or not result.candidates:
        return None
    names = [candidate.input for candidate in result.candidates]
    return ResponseText(text=" ".join(names), count=len(names))
