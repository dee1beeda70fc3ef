"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field

PIPELINE_MODES = ("passthrough", "heuristic")
MISTAKE_KINDS = ("typo", "partial_response", "reorder", "delay")


@dataclass(frozen=True)
class ControlConfig:
    """Owner allow-list and exact-match aliases for control commands."""

    owners: frozenset[str] = frozenset()
    list_commands: frozenset[str] = frozenset({"activate-list", ".a", ".ابدا"})
    deactivate_commands: frozenset[str] = frozenset({"deactivate", ".x", ".وقف"})
    status_commands: frozenset[str] = frozenset({"status", ".status", ".حالة"})


@dataclass(frozen=True)
class DedupConfig:
    """Identifier-set deduplication with timestamp staleness.

    max_age_seconds <= 0 disables the staleness check.
    """

    capacity: int = 200
    max_age_seconds: int = 30


@dataclass(frozen=True)
class PipelineConfig:
    mode: str = "passthrough"
    resolve_names: bool = False


@dataclass(frozen=True)
class ResolverConfig:
    timeout_ms: int = 660
    max_cooldown_seconds: float = 60.0


@dataclass(frozen=True)
class DeliveryConfig:
    """Pacing constants for outbound replies, all in milliseconds."""

    base_delay_ms: int = 800
    per_unit_delay_ms: int = 300
    jitter_ms: int = 1000
    delay_scale: float = 0.3
    backoff_base_ms: int = 1000
    backoff_cap_ms: int = 30000
    backoff_jitter_ms: int = 1000


@dataclass(frozen=True)
class MistakeConfig:
    """Simulated human imperfection. Disabled unless explicitly enabled."""

    enabled: bool = False
    probability: float = 0.1
    correction_probability: float = 0.5
    correction_delay_ms: int = 1500
    partial_drop_ratio: float = 0.3
    delay_factor: float = 3.0
    kinds: tuple[str, ...] = field(default=MISTAKE_KINDS)
