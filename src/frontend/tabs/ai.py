"""AI tab: toggle for AI smart replies."""

from __future__ import annotations

from textual import on
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Static, Switch


class AiTab(Container):
    def compose(self):
        with Vertical(id="ai-panel"):
            yield Static("AI smart replies", id="ai-title")
            yield Static(
                "When enabled, messages that match no keyword get a reply generated by the AI model.",
                classes="subtle",
            )
            with Horizontal(id="ai-toggle-row"):
                yield Static("enabled", classes="form-label")
                yield Switch(id="ai-enabled")
            yield Static("", id="ai-model")

    def on_mount(self) -> None:
        runtime = self.app.runtime
        self.query_one("#ai-toggle-row").styles.height = 3
        switch = self.query_one("#ai-enabled", Switch)
        with switch.prevent(Switch.Changed):
            switch.value = runtime.ai_enabled
        config = runtime.ai_config
        self.query_one("#ai-model", Static).update(
            f"model: {config.model}  temperature: {config.temperature}  max_tokens: {config.max_tokens}"
        )

    @on(Switch.Changed, "#ai-enabled")
    def _on_toggle(self, event: Switch.Changed) -> None:
        self.app.runtime.set_ai_enabled(event.value)
