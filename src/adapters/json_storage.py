"""JSON file storage adapter.

Implements the core MappingStoragePort using a single JSON document:
{"staticNames": {...}, "learnedNames": {...}, "lastUpdated": "<ISO>"}.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone

from core.models import NameRecord

# Older documents used these keys; they are still accepted on load.
_LEGACY_STATIC_KEY = "arabicCharacterNames"
_LEGACY_LEARNED_KEY = "learnedCharacters"


def _record_from_json(raw) -> NameRecord:
    if isinstance(raw, str):
        return NameRecord(name=raw, confidence=1.0, source="learned")
    return NameRecord(
        name=str(raw["name"]),
        confidence=float(raw.get("confidence", 1.0)),
        source=str(raw.get("source", "learned")),
    )


class JsonMappingStorage:
    """Thin JSON wrapper that satisfies the MappingStoragePort contract."""

    def __init__(self, path: str) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def load_mappings(self) -> tuple[dict[str, str], dict[str, NameRecord]]:
        """Return (static, learned); raises FileNotFoundError when absent."""

        with open(self._path, "r", encoding="utf-8") as handle:
            document = json.load(handle)

        static_raw = document.get("staticNames", document.get(_LEGACY_STATIC_KEY, {})) or {}
        learned_raw = document.get("learnedNames", document.get(_LEGACY_LEARNED_KEY, {})) or {}
        static = {str(key): str(value) for key, value in static_raw.items()}
        learned = {str(key): _record_from_json(value) for key, value in learned_raw.items()}
        return static, learned

    def save_mappings(self, static: dict[str, str], learned: dict[str, NameRecord]) -> None:
        """Write the document atomically (temp file, then replace)."""

        document = {
            "staticNames": static,
            "learnedNames": {
                key: {"name": record.name, "confidence": record.confidence, "source": record.source}
                for key, record in learned.items()
            },
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        }
        directory = os.path.dirname(os.path.abspath(self._path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".mappings-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
