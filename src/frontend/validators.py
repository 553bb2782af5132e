"""Validation helpers for rule editing."""

from __future__ import annotations

from dataclasses import dataclass

from core.errors import ValidationError
from core.rules_engine import validate_rule_input


@dataclass
class RuleFormResult:
    keyword: str | None
    reply: str | None
    field: str | None = None
    error: str | None = None


def check_rule_form(keyword: str, reply: str) -> RuleFormResult:
    """Validate form values without touching the rule store."""

    try:
        normalized_keyword, normalized_reply = validate_rule_input(keyword, reply)
    except ValidationError as exc:
        return RuleFormResult(None, None, exc.field, exc.message)
    return RuleFormResult(normalized_keyword, normalized_reply)
