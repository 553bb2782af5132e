"""Activity tab for viewing and exporting the routing log."""

from __future__ import annotations

import csv
import json
from datetime import datetime
from typing import Any

from textual import on
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Static

from core.models import ActivityLogEntry

from ..constants import EXPORTS_DIR

KIND_LABELS = {"incoming": "Received", "outgoing": "Sent", "info": "System"}


class ActivityTab(Container):
    """Live activity log with JSON/CSV export."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._table_ready = False

    def compose(self):
        with Vertical(id="activity-panel"):
            yield Static("Message log", id="activity-title")
            yield DataTable(id="activity-table", cursor_type="row")
            with Horizontal(id="activity-actions"):
                yield Button("Export JSON", id="export-json", variant="success")
                yield Button("Export CSV", id="export-csv")
            yield Static("", id="activity-output")

    def on_mount(self) -> None:
        table = self.query_one("#activity-table", DataTable)
        table.add_column("time", key="time", width=10)
        table.add_column("kind", key="kind", width=10)
        table.add_column("text", key="text", width=70)
        table.zebra_stripes = True
        table.styles.height = "1fr"
        self.query_one("#activity-actions").styles.height = 3
        self._table_ready = True
        for entry in self.app.runtime.activity_log.entries():
            self.add_entry(entry)
        if not self.app.runtime.activity_log.entries():
            self._set_output("No messages yet.")

    def add_entry(self, entry: ActivityLogEntry) -> None:
        if not self._table_ready:
            return
        table = self.query_one("#activity-table", DataTable)
        table.add_row(
            entry.timestamp.astimezone().strftime("%H:%M:%S"),
            KIND_LABELS.get(entry.kind, entry.kind),
            entry.text,
            key=str(entry.id),
        )
        table.move_cursor(row=table.row_count - 1)

    @on(Button.Pressed, "#export-json")
    def _on_export_json(self) -> None:
        self._export_rows("json")

    @on(Button.Pressed, "#export-csv")
    def _on_export_csv(self) -> None:
        self._export_rows("csv")

    def _rows(self) -> list[dict[str, Any]]:
        return [
            {
                "id": entry.id,
                "kind": entry.kind,
                "text": entry.text,
                "timestamp": entry.timestamp.isoformat(),
            }
            for entry in self.app.runtime.activity_log.entries()
        ]

    def _export_rows(self, fmt: str) -> None:
        rows = self._rows()
        if not rows:
            self._set_output("No entries to export.")
            return
        EXPORTS_DIR.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        path = EXPORTS_DIR / f"activity-{timestamp}.{fmt}"
        try:
            if fmt == "json":
                path.write_text(json.dumps(rows, indent=2, ensure_ascii=False), encoding="utf-8")
            else:
                with path.open("w", encoding="utf-8", newline="") as handle:
                    writer = csv.DictWriter(handle, fieldnames=list(rows[0].keys()))
                    writer.writeheader()
                    writer.writerows(rows)
            self._set_output(f"exported {len(rows)} entries to {path}")
        except OSError as exc:
            self._set_output(f"export failed: {exc.strerror or exc}")

    def _set_output(self, message: str) -> None:
        self.query_one("#activity-output", Static).update(message)
