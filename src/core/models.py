"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class IncomingEvent:
    """Minimal message event used by the core processing pipeline."""

    chat_id: int
    message_id: int
    sender_id: str
    text: str
    timestamp: int
    is_from_self: bool = False
    sender_name: Optional[str] = None


@dataclass(frozen=True)
class GroupInfo:
    """One group the account participates in."""

    id: int
    display_name: str
    member_count: int


@dataclass(frozen=True)
class Candidate:
    """A token extracted from delimited text, in order of appearance."""

    input: str
    position: int
    confidence: float


@dataclass(frozen=True)
class PipelineResult:
    candidates: tuple[Candidate, ...]
    is_tournament_style: bool
    original_text: str


@dataclass(frozen=True)
class ResponseText:
    text: str
    count: int


@dataclass(frozen=True)
class NameRecord:
    """A resolved canonical name and where it came from."""

    name: str
    confidence: float
    source: str


@dataclass(frozen=True)
class ActivationState:
    is_active: bool = False
    selected_group_id: Optional[int] = None
    selected_group_name: Optional[str] = None
    activated_at: int = 0


@dataclass(frozen=True)
class OutboundTask:
    """A reply waiting in the delivery queue."""

    text: str
    chat_id: int
    enqueued_at: float
    unit_count: int = 1


class MistakeKind(enum.Enum):
    TYPO = "typo"
    PARTIAL_RESPONSE = "partial_response"
    REORDER = "reorder"
    DELAY = "delay"


@dataclass(frozen=True)
class MistakeDecision:
    """Outcome of the mistake roll for one outbound response."""

    is_mistake: bool
    kind: Optional[MistakeKind]
    original_tokens: tuple[str, ...]
    text: str

    @property
    def is_textual(self) -> bool:
        return self.is_mistake and self.kind is not MistakeKind.DELAY
