"""Keyword normalization, validation, and matching logic (core domain)."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from core.errors import ValidationError

KEYWORD_MAX_CHARS = 50
REPLY_MAX_CHARS = 500


def normalize_keyword(keyword: str) -> str:
    """Return the stored form of a keyword: trimmed and lowercased."""

    return keyword.strip().lower()


def validate_rule_input(keyword: str, reply: str) -> Tuple[str, str]:
    """Validate raw form input and return the normalized (keyword, reply).

    Limits apply to the trimmed values, so whitespace-only input counts as
    empty.
    """

    keyword = normalize_keyword(keyword or "")
    reply = (reply or "").strip()

    if not keyword:
        raise ValidationError("keyword", "Keyword cannot be empty.")
    if len(keyword) > KEYWORD_MAX_CHARS:
        raise ValidationError("keyword", f"Keyword is too long (max {KEYWORD_MAX_CHARS} characters).")
    if not reply:
        raise ValidationError("reply", "Reply cannot be empty.")
    if len(reply) > REPLY_MAX_CHARS:
        raise ValidationError("reply", f"Reply is too long (max {REPLY_MAX_CHARS} characters).")
    return keyword, reply


def find_first_keyword(text: str, keywords: Sequence[str]) -> Optional[int]:
    """Return the list index of the first keyword present in ``text``.

    Matching logic:
    - Case-insensitive substring search, no word boundaries ("hi" hits "this").
    - When several keywords are present, the earliest one in ``keywords`` wins,
      regardless of where each occurs in the text.
    - Empty keywords never match.
    """

    lowered = text.lower()
    for index, keyword in enumerate(keywords):
        needle = keyword.lower()
        if needle and needle in lowered:
            return index
    return None


def match_reply(text: str, keywords: Sequence[str], replies: Sequence[str]) -> str:
    """Return the reply for the first listed keyword found, or ``""``."""

    if len(keywords) != len(replies):
        raise ValueError("keywords and replies must have the same length")
    index = find_first_keyword(text, keywords)
    if index is None:
        return ""
    return replies[index]
