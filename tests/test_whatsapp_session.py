from __future__ import annotations

import asyncio

import pytest

from adapters.qr import render_qr_ascii
from adapters.whatsapp_session import SimulatedWhatsAppSession
from core.connection import AwaitingScan, ConnectionGate, Disconnected, Failed
from core.errors import NotReadyError


def test_first_connect_requires_qr_scan(tmp_path) -> None:
    gate = ConnectionGate()
    session = SimulatedWhatsAppSession(gate, str(tmp_path / ".wa_session"))

    session.connect()
    assert isinstance(gate.state, AwaitingScan)
    assert gate.state.qr_payload.startswith("SIMULATED_QR_DATA_")

    session.confirm_scan()
    assert gate.ready
    assert session.is_authenticated


def test_stored_session_reconnects_without_scan(tmp_path) -> None:
    path = str(tmp_path / ".wa_session")
    first = SimulatedWhatsAppSession(ConnectionGate(), path)
    first.connect()
    first.confirm_scan()

    gate = ConnectionGate()
    SimulatedWhatsAppSession(gate, path).connect()

    assert gate.ready


def test_disconnect_forgets_session(tmp_path) -> None:
    gate = ConnectionGate()
    session = SimulatedWhatsAppSession(gate, str(tmp_path / ".wa_session"))
    session.connect()
    session.confirm_scan()

    session.disconnect()

    assert isinstance(gate.state, Disconnected)
    assert not session.is_authenticated


def test_fail_moves_to_error_state(tmp_path) -> None:
    gate = ConnectionGate()
    session = SimulatedWhatsAppSession(gate, str(tmp_path / ".wa_session"))
    session.connect()

    session.fail("scan timed out")

    assert gate.state == Failed(reason="scan timed out")


def test_send_requires_connection(tmp_path) -> None:
    gate = ConnectionGate()
    session = SimulatedWhatsAppSession(gate, str(tmp_path / ".wa_session"))

    with pytest.raises(NotReadyError):
        asyncio.run(session.send("alice", "hello"))

    session.connect()
    session.confirm_scan()
    asyncio.run(session.send("alice", "hello"))
    assert [(item.conversation_id, item.text) for item in session.sent] == [("alice", "hello")]


def test_render_qr_ascii_produces_block_lines() -> None:
    rendered = render_qr_ascii("SIMULATED_QR_DATA_1")
    lines = rendered.splitlines()
    assert len(lines) > 5
    assert any(char in rendered for char in "█▀▄")
