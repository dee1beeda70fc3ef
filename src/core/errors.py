"""Error types raised by adapters and handled inside the core."""

from __future__ import annotations

from typing import Optional


class TransportError(RuntimeError):
    """Sending a message or fetching the group roster failed."""


class OracleError(RuntimeError):
    """A name lookup oracle failed (timeout, HTTP status, bad payload)."""


class OracleRateLimited(OracleError):
    """The oracle answered 429; retry_after is the server hint in seconds."""

    def __init__(self, source: str, retry_after: Optional[float] = None) -> None:
        super().__init__(f"{source} rate limited (retry_after={retry_after})")
        self.source = source
        self.retry_after = retry_after
