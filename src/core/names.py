"""Static and learned name mappings (core domain)."""

from __future__ import annotations

import logging
from typing import Optional

from core.extraction import normalize_name
from core.models import NameRecord
from core.ports import MappingStoragePort

LOGGER = logging.getLogger(__name__)

STATIC_SOURCE = "static"


class LearnedNameStore:
    """Normalized token -> canonical name, merged from two tables.

    Static entries win over learned ones. Only load() and persist() touch
    the storage port, and neither raises.
    """

    def __init__(self, storage: MappingStoragePort) -> None:
        self._storage = storage
        self._static: dict[str, str] = {}
        self._learned: dict[str, NameRecord] = {}

    @property
    def learned_count(self) -> int:
        return len(self._learned)

    @property
    def static_count(self) -> int:
        return len(self._static)

    def lookup(self, token: str) -> Optional[NameRecord]:
        key = normalize_name(token)
        if key in self._static:
            return NameRecord(name=self._static[key], confidence=1.0, source=STATIC_SOURCE)
        return self._learned.get(key)

    def remember(self, token: str, record: NameRecord) -> None:
        self._learned[normalize_name(token)] = record

    def add_static(self, token: str, name: str) -> None:
        self._static[normalize_name(token)] = name

    def load(self) -> None:
        """Load both tables; a missing file starts empty and is saved once."""

        try:
            static, learned = self._storage.load_mappings()
        except FileNotFoundError:
            self._static, self._learned = {}, {}
            LOGGER.info("No saved name mappings, starting empty")
            self.persist()
            return
        except Exception:
            LOGGER.warning("Failed to load name mappings, starting empty", exc_info=True)
            self._static, self._learned = {}, {}
            return

        self._static = {normalize_name(k): v for k, v in static.items()}
        self._learned = {normalize_name(k): v for k, v in learned.items()}
        LOGGER.info(
            "Loaded %s static and %s learned names", len(self._static), len(self._learned)
        )

    def persist(self) -> None:
        """Best-effort save; failures are logged and swallowed."""

        try:
            self._storage.save_mappings(dict(self._static), dict(self._learned))
        except Exception:
            LOGGER.warning("Failed to save name mappings", exc_info=True)
