"""Simulated WhatsApp Web session.

Drives the core ConnectionGate through the pairing lifecycle
(connecting -> QR scan -> connected) and records outgoing replies instead of
transmitting them. A marker file stands in for stored session credentials so
a paired session reconnects without a new scan.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from core.connection import AwaitingScan, Connected, Connecting, ConnectionGate, Disconnected, Failed
from core.errors import NotReadyError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentMessage:
    conversation_id: str
    text: str
    sent_at: datetime


class SimulatedWhatsAppSession:
    """Pairing lifecycle and outbound send boundary for the dashboard."""

    def __init__(self, gate: ConnectionGate, session_path: str) -> None:
        self._gate = gate
        self._session_path = session_path
        self.sent: list[SentMessage] = []

    @property
    def is_authenticated(self) -> bool:
        return os.path.exists(self._session_path)

    def connect(self) -> None:
        """Start connecting; reuse a stored session or ask for a QR scan."""

        self._gate.transition(Connecting())
        if self.is_authenticated:
            LOGGER.info("Stored session found, skipping QR pairing")
            self._gate.transition(Connected())
            return
        self._gate.transition(AwaitingScan(qr_payload=self._new_qr_payload()))

    def refresh_qr(self) -> None:
        self._gate.transition(AwaitingScan(qr_payload=self._new_qr_payload()))

    def confirm_scan(self) -> None:
        """Complete pairing after the QR code was scanned."""

        self._gate.transition(Connected())
        self._write_marker()

    def disconnect(self) -> None:
        """Log out: drop the stored session and go back to disconnected."""

        if os.path.exists(self._session_path):
            os.remove(self._session_path)
        self._gate.transition(Disconnected())

    def fail(self, reason: str) -> None:
        self._gate.transition(Failed(reason=reason))

    async def send(self, conversation_id: str, text: str) -> None:
        """Record an outgoing reply. Refuses to send while not connected."""

        if not self._gate.ready:
            raise NotReadyError("WhatsApp is not connected")
        self.sent.append(
            SentMessage(conversation_id=conversation_id, text=text, sent_at=datetime.now(timezone.utc))
        )
        LOGGER.info("Sent reply to %s", conversation_id)

    def _write_marker(self) -> None:
        directory = os.path.dirname(self._session_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self._session_path, "w", encoding="utf-8") as handle:
            handle.write(datetime.now(timezone.utc).isoformat())

    @staticmethod
    def _new_qr_payload() -> str:
        return f"SIMULATED_QR_DATA_{int(time.time() * 1000)}"
