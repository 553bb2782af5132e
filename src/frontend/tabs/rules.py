"""Rules tab implementation."""

from __future__ import annotations

from typing import Any, Optional

from textual import on
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Input, Static, TextArea

from core.errors import DuplicateKeywordError
from core.ports import SEVERITY_ERROR
from core.rules_engine import KEYWORD_MAX_CHARS, REPLY_MAX_CHARS, find_first_keyword

from ..modals import DeleteRuleScreen
from ..validators import check_rule_form


class RulesTab(Container):
    """Rules tab for adding, deleting, and testing keyword rules."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._current_row_key: Optional[str] = None
        self._table_ready = False

    def compose(self):
        with Vertical(id="rules-panel"):
            with Horizontal(id="rules-body"):
                with Container(id="rules-left"):
                    yield Static("", id="rules-count")
                    yield DataTable(id="rules-table", cursor_type="row")
                with Container(id="rules-right"):
                    yield Static("New rule", id="rules-title")
                    yield Static(f"keyword (max {KEYWORD_MAX_CHARS})", classes="form-label")
                    yield Input(placeholder="e.g. price, hours, info", id="rule-keyword")
                    yield Static(f"reply (max {REPLY_MAX_CHARS})", classes="form-label")
                    yield TextArea(id="rule-reply")
                    yield Static("", id="rule-error", classes="form-error")
                    yield Static("Rule tester", id="rules-test-title")
                    yield TextArea(id="rule-test-text", placeholder="Paste a message to test against rules")
                    with Horizontal(id="rules-test-actions"):
                        yield Button("Test", id="rule-test", variant="primary")
                    yield Static("", id="rule-test-result")
            with Horizontal(id="rules-actions"):
                yield Button("Add rule", id="add-rule", variant="success")
                yield Button("Delete rule", id="delete-rule", variant="error")

    def on_mount(self) -> None:
        table = self.query_one("#rules-table", DataTable)
        table.add_column("keyword", key="keyword", width=20)
        table.add_column("reply", key="reply", width=40)
        table.add_column("added", key="added", width=12)
        table.zebra_stripes = True
        self.query_one("#rules-test-actions").styles.height = 3
        self._table_ready = True
        self.reload_rules()

    @property
    def _store(self):
        return self.app.runtime.rule_store

    def reload_rules(self) -> None:
        if not self._table_ready:
            return
        table = self.query_one("#rules-table", DataTable)
        table.clear()
        rules = self._store.all()
        for rule in rules:
            added = rule.created_at.astimezone().strftime("%Y-%m-%d")
            table.add_row(rule.keyword, self._clip_text(rule.reply), added, key=rule.id)
        self.query_one("#rules-count", Static).update(f"Current rules ({len(rules)})")
        if self._current_row_key is not None and self._store.get(self._current_row_key) is None:
            self._current_row_key = None
        self._update_action_state()

    def _update_action_state(self) -> None:
        self.query_one("#delete-rule", Button).disabled = self._current_row_key is None

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self._current_row_key = self._coerce_row_key(event.row_key)
        self._update_action_state()

    @on(Button.Pressed, "#add-rule")
    def _on_add_rule(self) -> None:
        keyword_input = self.query_one("#rule-keyword", Input)
        reply_input = self.query_one("#rule-reply", TextArea)
        error = self.query_one("#rule-error", Static)

        checked = check_rule_form(keyword_input.value, reply_input.text)
        if checked.error:
            error.update(checked.error)
            return

        try:
            rule = self._store.add(keyword_input.value, reply_input.text)
        except DuplicateKeywordError:
            error.update("")
            self.app.notify("This keyword already exists.", title="Error", severity=SEVERITY_ERROR)
            return

        error.update("")
        keyword_input.value = ""
        reply_input.text = ""
        self.reload_rules()
        self.app.refresh_header()
        self.app.notify(f"Keyword rule added: {rule.keyword}", title="Success")

    @on(Button.Pressed, "#delete-rule")
    def _on_delete_rule(self) -> None:
        if self._current_row_key is None:
            return
        rule = self._store.get(self._current_row_key)
        if rule is None:
            return
        self.app.push_screen(DeleteRuleScreen(rule.keyword), self._handle_delete_rule)

    def _handle_delete_rule(self, confirmed: bool | None) -> None:
        if not confirmed or self._current_row_key is None:
            return
        self._store.remove(self._current_row_key)
        self._current_row_key = None
        self.reload_rules()
        self.app.refresh_header()
        self.app.notify("The keyword rule was removed.", title="Rule deleted")

    @on(Button.Pressed, "#rule-test")
    def _on_test_rule(self) -> None:
        test_text = self.query_one("#rule-test-text", TextArea).text
        result = self.query_one("#rule-test-result", Static)
        rules = self._store.all()
        if not test_text.strip():
            result.update("Add test text to run.")
            return
        if not rules:
            result.update("No rules configured.")
            return
        index = find_first_keyword(test_text, [rule.keyword for rule in rules])
        if index is None:
            result.update("Not matched")
            return
        rule = rules[index]
        result.update(f"Matched '{rule.keyword}':\n{rule.reply}")

    @staticmethod
    def _clip_text(value: str, limit: int = 40) -> str:
        value = value.replace("\n", " ")
        if len(value) <= limit:
            return value
        return value[: limit - 3] + "..."

    @staticmethod
    def _coerce_row_key(value: Any) -> str:
        if hasattr(value, "value"):
            return str(value.value)
        return str(value)
