"""QR code rendering for session pairing."""

from __future__ import annotations

import io

import qrcode


def render_qr_ascii(payload: str) -> str:
    """Render ``payload`` as a terminal-friendly block-character QR code."""

    qr = qrcode.QRCode(border=1)
    qr.add_data(payload)
    qr.make(fit=True)
    buffer = io.StringIO()
    qr.print_ascii(out=buffer, invert=True)
    return buffer.getvalue()
