"""Static configuration for namewatch.

All user-editable settings (owners, commands, pacing, oracles, logging) live
in a single JSON file for quick edits without touching Python.
"""

import json
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# NAMEWATCH_CONFIG points at another config file, e.g. per deployment.
CONFIG_PATH = os.getenv("NAMEWATCH_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


def _command_set(raw, default: list[str]) -> frozenset[str]:
    values = raw if raw else default
    return frozenset(str(value).strip() for value in values if str(value).strip())


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Control surface: owners are sender ids, commands are exact-match aliases.
_control = _CONFIG.get("control", {})
OWNERS = frozenset(str(owner) for owner in _control.get("owners", []))
LIST_COMMANDS = _command_set(_control.get("list_commands"), ["activate-list", ".a", ".ابدا"])
DEACTIVATE_COMMANDS = _command_set(_control.get("deactivate_commands"), ["deactivate", ".x", ".وقف"])
STATUS_COMMANDS = _command_set(_control.get("status_commands"), ["status", ".status", ".حالة"])

# Identifier-set dedup; max_age_seconds <= 0 turns off the staleness check.
_dedup = _CONFIG.get("dedup", {})
DEDUP_CAPACITY = int(_dedup.get("capacity", 200))
DEDUP_MAX_AGE_SECONDS = int(_dedup.get("max_age_seconds", 30))

# Pipeline mode: "passthrough" answers every token, "heuristic" scores first.
_pipeline = _CONFIG.get("pipeline", {})
PIPELINE_MODE = _pipeline.get("mode", "passthrough")
RESOLVE_NAMES = bool(_pipeline.get("resolve_names", False))

_resolver = _CONFIG.get("resolver", {})
RESOLVER_TIMEOUT_MS = int(_resolver.get("timeout_ms", 660))
RESOLVER_MAX_COOLDOWN_SECONDS = float(_resolver.get("max_cooldown_seconds", 60))
ORACLES = list(_resolver.get("oracles", ["anilist", "jikan", "kitsu"]))

_storage = _CONFIG.get("storage", {})
MAPPINGS_PATH = _resolve_path(_storage.get("mappings_path", "character-mappings.json"))

# Reply pacing in milliseconds. delay_scale multiplies the final adaptive delay.
DELIVERY = _CONFIG.get("delivery", {})

# Mistake injection is off unless explicitly enabled.
MISTAKES = _CONFIG.get("mistakes", {})

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
