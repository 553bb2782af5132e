"""Notifier adapter that shows notifications as Textual toasts."""

from __future__ import annotations

from textual.app import App

from core.ports import SEVERITY_INFORMATION


class TextualNotifier:
    def __init__(self, app: App) -> None:
        self._app = app

    def notify(self, title: str, message: str, severity: str = SEVERITY_INFORMATION) -> None:
        self._app.notify(message, title=title, severity=severity)
