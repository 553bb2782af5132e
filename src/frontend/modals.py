"""Modal dialogs for the Textual dashboard."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Static


class DeleteRuleScreen(ModalScreen[bool]):
    """Confirm deletion of a keyword rule."""

    def __init__(self, keyword: str) -> None:
        super().__init__()
        self._keyword = keyword or "(empty keyword)"

    def compose(self) -> ComposeResult:
        yield Container(
            Static("Delete rule?", classes="modal-title"),
            Static(self._keyword, classes="modal-body"),
            Horizontal(
                Button("Delete", id="delete-rule-confirm", variant="error"),
                Button("Cancel", id="delete-rule-cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog modal-dialog--confirm",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "delete-rule-confirm":
            self.dismiss(True)
        else:
            self.dismiss(False)


class DisconnectConfirmScreen(ModalScreen[bool]):
    """Confirm logging out of the WhatsApp session."""

    def compose(self) -> ComposeResult:
        yield Container(
            Static("Disconnect WhatsApp?", classes="modal-title"),
            Static("The stored session is removed and a new QR scan is required.", classes="modal-body"),
            Horizontal(
                Button("Disconnect", id="disconnect-confirm", variant="error"),
                Button("Cancel", id="disconnect-cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog modal-dialog--confirm",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "disconnect-confirm":
            self.dismiss(True)
        else:
            self.dismiss(False)
