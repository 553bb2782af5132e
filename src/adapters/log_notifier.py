"""Notifier adapter that writes user notifications to the logger.

Used when no dashboard is attached (CLI routing).
"""

from __future__ import annotations

import logging

from core.ports import SEVERITY_ERROR, SEVERITY_INFORMATION, SEVERITY_WARNING

LOGGER = logging.getLogger(__name__)

_LEVELS = {
    SEVERITY_INFORMATION: logging.INFO,
    SEVERITY_WARNING: logging.WARNING,
    SEVERITY_ERROR: logging.ERROR,
}


class LoggingNotifier:
    """Notifier adapter that logs and remembers notifications."""

    def __init__(self) -> None:
        self.notifications: list[tuple[str, str, str]] = []

    def notify(self, title: str, message: str, severity: str = SEVERITY_INFORMATION) -> None:
        self.notifications.append((title, message, severity))
        LOGGER.log(_LEVELS.get(severity, logging.INFO), "%s: %s", title, message)
