"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for transport, persistence and lookup
adapters so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Optional, Protocol

from core.models import GroupInfo, NameRecord


class TransportPort(Protocol):
    """Chat transport operations required by the core."""

    async def send_text(self, chat_id: int, text: str) -> None:
        ...

    async def list_groups(self) -> list[GroupInfo]:
        ...


class MappingStoragePort(Protocol):
    """Key-value persistence for static and learned name mappings.

    load_mappings raises FileNotFoundError when nothing was saved yet.
    """

    def load_mappings(self) -> tuple[dict[str, str], dict[str, NameRecord]]:
        ...

    def save_mappings(self, static: dict[str, str], learned: dict[str, NameRecord]) -> None:
        ...


class OraclePort(Protocol):
    """A remote name lookup service."""

    name: str

    async def lookup(self, query: str) -> Optional[NameRecord]:
        ...
