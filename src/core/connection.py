"""Connection readiness gate (core domain).

The transport is modelled as a small state machine. The rest of the core only
looks at ``ready`` and at the message channel, which accepts messages only
while connected.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional, Tuple, Union

from core.errors import ConnectionStateError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Disconnected:
    name = "disconnected"


@dataclass(frozen=True)
class Connecting:
    name = "connecting"


@dataclass(frozen=True)
class AwaitingScan:
    qr_payload: str
    name = "qr"


@dataclass(frozen=True)
class Connected:
    name = "connected"


@dataclass(frozen=True)
class Failed:
    reason: str
    name = "error"


ConnectionState = Union[Disconnected, Connecting, AwaitingScan, Connected, Failed]

# Target state type -> source state types it may be entered from.
_ALLOWED: dict[type, Tuple[type, ...]] = {
    Connecting: (Disconnected, Failed),
    AwaitingScan: (Connecting, AwaitingScan),
    Connected: (Connecting, AwaitingScan),
    Failed: (Connecting, AwaitingScan, Connected),
}

StateListener = Callable[[ConnectionState, ConnectionState], None]


@dataclass(frozen=True)
class IncomingMessage:
    conversation_id: str
    text: str


class ConnectionGate:
    """Readiness signal plus a message channel that only flows when connected."""

    def __init__(self) -> None:
        self._state: ConnectionState = Disconnected()
        self._listeners: list[StateListener] = []
        self._queue: Optional[asyncio.Queue[IncomingMessage]] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def ready(self) -> bool:
        return isinstance(self._state, Connected)

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def transition(self, new_state: ConnectionState) -> None:
        """Move to ``new_state``; any state may go to Disconnected."""

        old_state = self._state
        if not isinstance(new_state, Disconnected):
            allowed_from = _ALLOWED.get(type(new_state), ())
            if not isinstance(old_state, allowed_from):
                raise ConnectionStateError(f"Cannot move from {old_state.name} to {new_state.name}")
        self._state = new_state
        LOGGER.info("Connection state: %s -> %s", old_state.name, new_state.name)
        for listener in list(self._listeners):
            listener(old_state, new_state)

    def offer(self, conversation_id: str, text: str) -> bool:
        """Queue an incoming message. Messages offered while not ready are dropped."""

        if not self.ready:
            LOGGER.warning("Dropping message for %s: transport not ready", conversation_id)
            return False
        self._channel().put_nowait(IncomingMessage(conversation_id=conversation_id, text=text))
        return True

    async def messages(self) -> AsyncIterator[IncomingMessage]:
        """Yield incoming messages in arrival order, forever."""

        queue = self._channel()
        while True:
            message = await queue.get()
            try:
                yield message
            finally:
                queue.task_done()

    def _channel(self) -> asyncio.Queue[IncomingMessage]:
        # Created lazily so the queue binds to the running event loop.
        if self._queue is None:
            self._queue = asyncio.Queue()
        return self._queue
