"""In-memory keyword rule collection (core domain).

The store owns the in-memory truth and pushes every mutation to the
persistence port. Snapshots are immutable tuples, so a routing call that
captured one never observes later edits.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple

from core.errors import DuplicateKeywordError
from core.models import KeywordRule
from core.ports import RulePersistencePort
from core.rules_engine import normalize_keyword, validate_rule_input

LOGGER = logging.getLogger(__name__)


class RuleStore:
    """Ordered keyword rules, newest first, with unique normalized keywords."""

    def __init__(
        self,
        persistence: Optional[RulePersistencePort] = None,
        rules: Iterable[KeywordRule] = (),
    ) -> None:
        self._persistence = persistence
        self._rules: Tuple[KeywordRule, ...] = tuple(rules)
        seen: set[str] = set()
        for rule in self._rules:
            keyword = normalize_keyword(rule.keyword)
            if keyword in seen:
                raise DuplicateKeywordError(keyword)
            seen.add(keyword)

    @classmethod
    def hydrate(cls, persistence: RulePersistencePort) -> "RuleStore":
        """Build a store from whatever the persistence port holds."""

        rules = persistence.load()
        LOGGER.info("%s keyword rules loaded", len(rules))
        return cls(persistence=persistence, rules=rules)

    def add(self, keyword: str, reply: str) -> KeywordRule:
        """Validate, normalize, and prepend a new rule.

        Raises ValidationError for bad input and DuplicateKeywordError when the
        normalized keyword already exists. The store is unchanged on failure.
        """

        keyword, reply = validate_rule_input(keyword, reply)
        if any(rule.keyword == keyword for rule in self._rules):
            raise DuplicateKeywordError(keyword)

        rule = KeywordRule(
            id=uuid.uuid4().hex,
            keyword=keyword,
            reply=reply,
            created_at=datetime.now(timezone.utc),
        )
        self._rules = (rule,) + self._rules
        self._persist()
        return rule

    def remove(self, rule_id: str) -> None:
        """Remove a rule by id. Unknown ids are ignored."""

        remaining = tuple(rule for rule in self._rules if rule.id != rule_id)
        if len(remaining) == len(self._rules):
            return
        self._rules = remaining
        self._persist()

    def all(self) -> Tuple[KeywordRule, ...]:
        """Return an immutable newest-first snapshot."""

        return self._rules

    def get(self, rule_id: str) -> Optional[KeywordRule]:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def __len__(self) -> int:
        return len(self._rules)

    def _persist(self) -> None:
        if self._persistence is None:
            return
        self._persistence.save(self._rules)
