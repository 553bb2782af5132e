"""Connection tab: pairing status, QR code, and a message simulator."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual import on
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, Input, Static

from adapters.qr import render_qr_ascii
from core.ports import SEVERITY_ERROR

from ..modals import DisconnectConfirmScreen
from ..state import describe_connection


class ConnectionTab(Container):
    """Connect/disconnect the session and inject test messages."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._ready = False

    def compose(self):
        with Vertical(id="connection-panel"):
            yield Static("WhatsApp connection", id="connection-title")
            yield Static("", id="connection-status")
            yield Static("", id="connection-qr")
            with Horizontal(id="connection-actions"):
                yield Button("Connect", id="connect", variant="success")
                yield Button("Confirm scan", id="confirm-scan", variant="primary")
                yield Button("New QR", id="refresh-qr")
                yield Button("Disconnect", id="disconnect", variant="error")
            yield Static("Simulate incoming message", id="simulate-title")
            yield Static("conversation", classes="form-label")
            yield Input(value="demo", placeholder="Conversation id", id="simulate-conversation")
            yield Static("message", classes="form-label")
            yield Input(placeholder="e.g. what is the price?", id="simulate-message")
            with Horizontal(id="simulate-actions"):
                yield Button("Receive", id="simulate-send", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#connection-actions").styles.height = 3
        self.query_one("#simulate-actions").styles.height = 3
        self._ready = True
        self.refresh_state()

    @property
    def _runtime(self):
        return self.app.runtime

    def refresh_state(self) -> None:
        if not self._ready:
            return
        view = describe_connection(self._runtime.gate.state)
        status = Text.assemble(("Status: ", "bold"), (view.label, f"bold {view.color}"), f"\n{view.message}")
        self.query_one("#connection-status", Static).update(status)
        qr_block = render_qr_ascii(view.qr_payload) if view.qr_payload else ""
        self.query_one("#connection-qr", Static).update(qr_block)
        self.query_one("#connect", Button).disabled = not view.can_connect
        self.query_one("#confirm-scan", Button).disabled = not view.can_confirm
        self.query_one("#refresh-qr", Button).disabled = not view.can_confirm
        self.query_one("#disconnect", Button).disabled = not view.can_disconnect
        self.query_one("#simulate-send", Button).disabled = not self._runtime.gate.ready

    @on(Button.Pressed, "#connect")
    def _on_connect(self) -> None:
        self._runtime.session.connect()

    @on(Button.Pressed, "#confirm-scan")
    def _on_confirm_scan(self) -> None:
        self._runtime.session.confirm_scan()

    @on(Button.Pressed, "#refresh-qr")
    def _on_refresh_qr(self) -> None:
        self._runtime.session.refresh_qr()

    @on(Button.Pressed, "#disconnect")
    def _on_disconnect(self) -> None:
        self.app.push_screen(DisconnectConfirmScreen(), self._handle_disconnect)

    def _handle_disconnect(self, confirmed: bool | None) -> None:
        if confirmed:
            self._runtime.session.disconnect()

    @on(Button.Pressed, "#simulate-send")
    @on(Input.Submitted, "#simulate-message")
    def _on_simulate(self) -> None:
        message_input = self.query_one("#simulate-message", Input)
        text = message_input.value.strip()
        if not text:
            return
        conversation = self.query_one("#simulate-conversation", Input).value.strip() or "demo"
        if not self._runtime.gate.offer(conversation, text):
            self.app.notify(
                "Cannot process message, WhatsApp is not connected.",
                title="WhatsApp not ready",
                severity=SEVERITY_ERROR,
            )
            return
        message_input.value = ""
