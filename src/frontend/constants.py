"""Shared constants for the Textual UI."""

from __future__ import annotations

from pathlib import Path

WHATSAPP_GREEN = "#25D366"
PROJECT_ROOT = Path(__file__).resolve().parents[2]
EXPORTS_DIR = PROJECT_ROOT / "exports"

STATUS_COLORS = {
    "connected": "green",
    "error": "red",
    "connecting": "yellow",
    "qr": "yellow",
    "disconnected": "grey62",
}
