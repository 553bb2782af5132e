"""Main Textual app for the autoreply dashboard."""

from __future__ import annotations

from typing import Any, Callable

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Center, Container, Horizontal, Vertical
from textual.widgets import ContentSwitcher, Footer, Static, Tab, Tabs

from core.connection import ConnectionState
from core.models import ActivityLogEntry
from core.ports import NotifierPort

from .constants import STATUS_COLORS, WHATSAPP_GREEN
from .notifier import TextualNotifier
from .tabs.activity import ActivityTab
from .tabs.ai import AiTab
from .tabs.connection import ConnectionTab
from .tabs.rules import RulesTab


class DashboardApp(App):
    """Dashboard with connection, rules, AI toggle, and activity log tabs."""

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("ctrl+c", "quit", "Quit"),
    ]

    CSS_PATH = "app.tcss"

    def __init__(self, runtime_factory: Callable[[NotifierPort], Any], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.runtime = runtime_factory(TextualNotifier(self))

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            with Horizontal(id="header-row"):
                with Vertical(id="header-left"):
                    yield Static(self._title_text(), id="title")
                    yield Static("keyword + AI auto-replies", classes="subtle")
                with Vertical(id="header-right"):
                    yield Static("", id="header-session", classes="subtle")
                    yield Static("", id="header-rules", classes="subtle")

        with Container(id="tabs-bar"):
            with Center(id="tabs-center"):
                yield Tabs(
                    Tab("Connection", id="connection"),
                    Tab("Rules", id="rules"),
                    Tab("AI", id="ai"),
                    Tab("Activity", id="activity"),
                    id="tabs",
                )

        with ContentSwitcher(id="content"):
            yield ConnectionTab(id="connection")
            yield RulesTab(id="rules")
            yield AiTab(id="ai")
            yield ActivityTab(id="activity")
        yield Footer()

    def on_mount(self) -> None:
        self.runtime.gate.add_listener(self._on_connection_changed)
        self.runtime.activity_log.subscribe(self._on_activity)
        self._set_active_tab("connection")
        self.refresh_header()
        # Routing runs for the lifetime of the app; the worker is cancelled on exit.
        self.run_worker(self.runtime.dispatcher.run(), name="dispatcher", exclusive=True)

    def on_unmount(self) -> None:
        self.runtime.activity_log.unsubscribe(self._on_activity)

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        tab_id = event.tab.id or ""
        if not tab_id:
            label = event.tab.label
            if hasattr(label, "plain"):
                label = label.plain
            tab_id = str(label).strip().lower()
        self._set_active_tab(tab_id)

    def _set_active_tab(self, tab_id: str) -> None:
        switcher = self.query_one("#content", ContentSwitcher)
        switcher.current = tab_id
        if tab_id == "rules":
            self.query_one(RulesTab).reload_rules()

    def _on_connection_changed(self, old_state: ConnectionState, new_state: ConnectionState) -> None:
        self.query_one(ConnectionTab).refresh_state()
        self.refresh_header()

    def _on_activity(self, entry: ActivityLogEntry) -> None:
        self.query_one(ActivityTab).add_entry(entry)
        self.refresh_header()

    def refresh_header(self) -> None:
        state = self.runtime.gate.state
        color = STATUS_COLORS.get(state.name, "grey62")
        self.query_one("#header-session", Static).update(Text.assemble("session: ", (state.name, color)))
        ai_label = "on" if self.runtime.ai_enabled else "off"
        self.query_one("#header-rules", Static).update(f"rules: {len(self.runtime.rule_store)}  ai: {ai_label}")

    @staticmethod
    def _title_text() -> Text:
        return Text.assemble(
            ("WHATSAPP", WHATSAPP_GREEN),
            (" AUTOREPLY > Dashboard", "bold"),
        )
