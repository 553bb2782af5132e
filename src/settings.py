"""Static configuration for autoreply.

All user-editable settings (storage paths, AI fallback, routing limits,
activity retention, logging) live in a single JSON file for quick edits
without touching Python.
"""

import json
import os

from core.config import ActivityConfig, AiReplyConfig, RoutingConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _project_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


def save_ai_enabled(enabled: bool) -> None:
    """Persist the AI toggle back into config.json."""

    config = _load_json_config()
    config.setdefault("ai", {})["enabled"] = bool(enabled)
    with open(CONFIG_PATH, "w", encoding="utf-8") as handle:
        handle.write(json.dumps(config, indent=2, ensure_ascii=True) + "\n")


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Storage locations are resolved against the project root.
_storage = _CONFIG.get("storage", {})
RULES_PATH = _project_path(_storage.get("rules_path", "rules.json"))
DB_PATH = _project_path(_storage.get("db_path", "autoreply.db"))
SESSION_PATH = _project_path(_storage.get("session_path", ".wa_session"))

# AI fallback used when no keyword rule matches.
_ai = _CONFIG.get("ai", {})
AI_CONFIG = AiReplyConfig(
    enabled=bool(_ai.get("enabled", False)),
    model=str(_ai.get("model", "gpt-4o-mini")),
    system_prompt=str(_ai.get("system_prompt", "")),
    temperature=float(_ai.get("temperature", 0.7)),
    max_tokens=int(_ai.get("max_tokens", 300)),
    timeout_seconds=float(_ai.get("timeout_seconds", 30)),
)

# 0 disables the per-message routing deadline.
_routing = _CONFIG.get("routing", {})
ROUTING_CONFIG = RoutingConfig(
    route_timeout_seconds=float(_routing.get("route_timeout_seconds", 60)) or None,
)

# Activity log retention: in-memory cap, SQLite persistence, cleanup horizon.
_activity = _CONFIG.get("activity", {})
ACTIVITY_CONFIG = ActivityConfig(
    max_entries=int(_activity.get("max_entries", 500)) or None,
    persist=bool(_activity.get("persist", True)),
    ttl_days=int(_activity.get("ttl_days", 30)),
)

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
