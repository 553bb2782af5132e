"""View state derived from the connection state machine."""

from __future__ import annotations

from dataclasses import dataclass

from core.connection import AwaitingScan, Connected, Connecting, ConnectionState, Failed

from .constants import STATUS_COLORS


@dataclass(frozen=True)
class ConnectionView:
    label: str
    message: str
    color: str
    qr_payload: str | None = None
    can_connect: bool = False
    can_confirm: bool = False
    can_disconnect: bool = False


def describe_connection(state: ConnectionState) -> ConnectionView:
    color = STATUS_COLORS.get(state.name, "grey62")
    if isinstance(state, Connected):
        return ConnectionView("connected", "WhatsApp connected successfully.", color, can_disconnect=True)
    if isinstance(state, AwaitingScan):
        return ConnectionView(
            "qr",
            "Scan the QR code with your WhatsApp app.",
            color,
            qr_payload=state.qr_payload,
            can_confirm=True,
            can_disconnect=True,
        )
    if isinstance(state, Connecting):
        return ConnectionView("connecting", "Attempting to connect to WhatsApp...", color, can_disconnect=True)
    if isinstance(state, Failed):
        return ConnectionView("error", f"Connection failed: {state.reason}", color, can_connect=True)
    return ConnectionView("disconnected", "Not connected. Press Connect to start.", color, can_connect=True)
