"""Append-only activity log (core domain)."""

from __future__ import annotations

import itertools
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Deque, Optional, Tuple

from core.models import LOG_KINDS, ActivityLogEntry

LOGGER = logging.getLogger(__name__)

Subscriber = Callable[[ActivityLogEntry], None]


class ActivityLog:
    """Ordered record of routing decisions.

    Entry ids come from a monotonic counter, so append order is total even
    when timestamps collide. ``max_entries`` only bounds the in-memory view;
    subscribers still see every entry.
    """

    def __init__(self, max_entries: Optional[int] = None, start_id: int = 1) -> None:
        self._entries: Deque[ActivityLogEntry] = deque(maxlen=max_entries or None)
        self._sequence = itertools.count(start_id)
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def append(self, kind: str, text: str) -> ActivityLogEntry:
        if kind not in LOG_KINDS:
            raise ValueError(f"Unsupported log kind: {kind}")
        entry = ActivityLogEntry(
            id=next(self._sequence),
            kind=kind,
            text=text,
            timestamp=datetime.now(timezone.utc),
        )
        self._entries.append(entry)
        for callback in list(self._subscribers):
            try:
                callback(entry)
            except Exception:
                # A broken sink must not break routing; the entry is already recorded.
                LOGGER.exception("Activity subscriber failed for entry %s", entry.id)
        return entry

    def entries(self) -> Tuple[ActivityLogEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
