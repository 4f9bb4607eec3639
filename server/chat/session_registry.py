"""
Session registry module.

Tracks every live connection, the display name bound to it and the outbox
its writer drains. The registry is the only source of truth for who is
online: all mutations and roster reads go through one asyncio lock, and the
roster broadcast triggered by a mutation is handed to the listeners while
that lock is still held so every session sees roster snapshots in the order
the mutations happened.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from common.errors import InvalidSession, NotJoined
from common.protocol_definitions import CoreEvent, normalize_name
from server.utils.logger import logger


class SessionOutbox:
    """Per-connection FIFO of core events.

    ``deliver`` never blocks, so fan-out to a slow client costs one enqueue.
    Once closed, deliveries are dropped and ``get`` returns ``None``.
    """

    _CLOSED = object()

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self.closed = False

    def deliver(self, event: CoreEvent) -> bool:
        """Enqueue an event. Returns False if the outbox is closed."""
        if self.closed:
            return False
        self._queue.put_nowait(event)
        return True

    def close(self):
        """Stop accepting events and wake up the reader."""
        if not self.closed:
            self.closed = True
            self._queue.put_nowait(self._CLOSED)

    async def get(self) -> Optional[CoreEvent]:
        """Wait for the next event; ``None`` once the outbox is closed."""
        item = await self._queue.get()
        if item is self._CLOSED:
            # Leave the marker for any later reader
            self._queue.put_nowait(self._CLOSED)
            return None
        return item

    def pending(self) -> List[CoreEvent]:
        """Take every queued event without waiting."""
        events = []
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is self._CLOSED:
                self._queue.put_nowait(self._CLOSED)
                break
            events.append(item)
        return events


@dataclass
class Session:
    """Server-side state for one live connection."""
    session_id: int
    name: Optional[str] = None
    outbox: SessionOutbox = field(default_factory=SessionOutbox)

    @property
    def is_active(self) -> bool:
        return self.name is not None


RosterListener = Callable[[List[str], List[SessionOutbox]], None]


class SessionRegistry:
    """Process-wide registry of connected sessions."""

    def __init__(self):
        self._sessions: Dict[int, Session] = {}  # session_id -> session
        self._next_id = 1
        self._lock = asyncio.Lock()
        self._roster_listeners: List[RosterListener] = []

    def add_roster_listener(self, listener: RosterListener):
        """Register a callback run on every roster change.

        Called with the new roster and the outboxes of every active session.
        It runs under the registry lock and must not await or block.
        """
        self._roster_listeners.append(listener)

    async def connect(self) -> int:
        """Allocate a new, unnamed session and return its id."""
        async with self._lock:
            session_id = self._next_id
            self._next_id += 1
            self._sessions[session_id] = Session(session_id)
        return session_id

    async def join(self, session_id: int, name: str) -> List[str]:
        """Bind ``name`` to the session and broadcast the new roster.

        Joining again renames the session. Returns the roster that was
        broadcast.
        """
        name = normalize_name(name)

        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise InvalidSession(session_id)

            previous = session.name
            session.name = name
            roster = self._roster_locked()
            self._notify_locked(roster)

        logger.log_join(name, session_id, renamed_from=previous)
        return roster

    async def disconnect(self, session_id: int) -> bool:
        """Evict a session. Unknown ids are ignored.

        Returns True if a session was removed.
        """
        async with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                return False

            session.outbox.close()
            if session.is_active:
                self._notify_locked(self._roster_locked())
            remaining = self.active_count()

        logger.log_disconnect(session_id, session.name, remaining)
        return True

    async def current_roster(self) -> List[str]:
        """Display names of every joined session, in connection order."""
        async with self._lock:
            return self._roster_locked()

    async def name_of(self, session_id: int) -> str:
        """Name currently bound to a session."""
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise InvalidSession(session_id)
            if not session.is_active:
                raise NotJoined(session_id)
            return session.name

    async def outbox(self, session_id: int) -> SessionOutbox:
        """Outbox of a connected session."""
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise InvalidSession(session_id)
            return session.outbox

    async def active_outboxes(self) -> List[SessionOutbox]:
        """Snapshot of the outboxes of every joined session."""
        async with self._lock:
            return self._active_outboxes_locked()

    def session_count(self) -> int:
        """Number of connected sessions, joined or not."""
        return len(self._sessions)

    def active_count(self) -> int:
        """Number of joined sessions."""
        return sum(1 for s in self._sessions.values() if s.is_active)

    def _roster_locked(self) -> List[str]:
        return [s.name for s in self._sessions.values() if s.is_active]

    def _active_outboxes_locked(self) -> List[SessionOutbox]:
        return [s.outbox for s in self._sessions.values() if s.is_active]

    def _notify_locked(self, roster: List[str]):
        recipients = self._active_outboxes_locked()
        for listener in self._roster_listeners:
            listener(list(roster), recipients)
