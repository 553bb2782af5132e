"""JSON file persistence for keyword rules.

Implements the core RulePersistencePort. The file holds an array of
``{id, keyword, reply, createdAt}`` records with ISO-8601 timestamps.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Sequence

from core.errors import ValidationError
from core.models import KeywordRule
from core.rules_engine import validate_rule_input

LOGGER = logging.getLogger(__name__)


def _rule_to_record(rule: KeywordRule) -> dict:
    return {
        "id": rule.id,
        "keyword": rule.keyword,
        "reply": rule.reply,
        "createdAt": rule.created_at.isoformat(),
    }


def _parse_timestamp(value: str) -> datetime:
    if not isinstance(value, str):
        raise TypeError("createdAt must be a string")
    # fromisoformat only accepts a trailing "Z" from Python 3.11 on.
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _record_to_rule(record: dict) -> KeywordRule:
    created_at = _parse_timestamp(record["createdAt"])
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    rule_id = record["id"]
    keyword = record["keyword"]
    reply = record["reply"]
    if not all(isinstance(value, str) and value for value in (rule_id, keyword, reply)):
        raise ValueError("id, keyword and reply must be non-empty strings")
    try:
        normalized, _ = validate_rule_input(keyword, reply)
    except ValidationError as exc:
        raise ValueError(f"invalid stored rule {rule_id!r}: {exc.message}") from exc
    if normalized != keyword:
        raise ValueError(f"stored keyword {keyword!r} is not normalized")
    return KeywordRule(id=rule_id, keyword=keyword, reply=reply, created_at=created_at)


class JsonRuleRepository:
    """Loads and saves the whole rule set as one JSON document."""

    def __init__(self, path: str) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> list[KeywordRule]:
        """Return stored rules, or an empty list when missing or corrupted.

        A corrupted file is discarded wholesale; no partial rule set is ever
        returned.
        """

        if not os.path.exists(self._path):
            return []

        try:
            with open(self._path, "r", encoding="utf-8") as handle:
                records = json.load(handle)
            if not isinstance(records, list):
                raise ValueError("rules file root must be an array")
            rules = [_record_to_rule(record) for record in records]
            seen: set[str] = set()
            for rule in rules:
                if rule.keyword in seen:
                    raise ValueError(f"duplicate keyword {rule.keyword!r}")
                seen.add(rule.keyword)
            return rules
        except (OSError, ValueError, KeyError, TypeError) as exc:
            # json.JSONDecodeError is a ValueError.
            LOGGER.warning("Discarding corrupted rules file %s: %s", self._path, exc)
            self._discard()
            return []

    def save(self, rules: Sequence[KeywordRule]) -> None:
        """Write all rules atomically (temp file + replace)."""

        directory = os.path.dirname(self._path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        payload = [_rule_to_record(rule) for rule in rules]
        tmp_path = f"{self._path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)
            handle.write("\n")
        os.replace(tmp_path, self._path)

    def _discard(self) -> None:
        try:
            os.remove(self._path)
        except OSError:
            LOGGER.exception("Failed to remove corrupted rules file %s", self._path)
