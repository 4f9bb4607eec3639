"""
Broadcast relay module.

Fans core events out to every joined session. Delivery is fire-and-forget:
each recipient gets a non-blocking enqueue on its own outbox, closed outboxes
are skipped, and nothing is retried or retained.
"""

from typing import Iterable, List

from common.protocol_definitions import (
    ChatMessage, CoreEvent, MessageReceived, RosterUpdated, normalize_text
)
from server.chat.session_registry import SessionOutbox, SessionRegistry
from server.utils.logger import logger


class BroadcastRelay:
    """Delivers messages and roster updates to all active sessions."""

    def __init__(self, registry: SessionRegistry):
        self.registry = registry
        registry.add_roster_listener(self._on_roster_changed)

    @staticmethod
    def fan_out(event: CoreEvent, recipients: Iterable[SessionOutbox]) -> int:
        """Enqueue ``event`` on every recipient. Returns how many accepted it."""
        delivered = 0
        for outbox in recipients:
            if outbox.deliver(event):
                delivered += 1
        return delivered

    async def broadcast_message(self, message: ChatMessage) -> int:
        """Deliver a message to every active session, author included."""
        recipients = await self.registry.active_outboxes()
        return self.fan_out(MessageReceived(message), recipients)

    async def broadcast_roster(self, names: List[str]) -> int:
        """Deliver a roster to every active session."""
        recipients = await self.registry.active_outboxes()
        delivered = self.fan_out(RosterUpdated(tuple(names)), recipients)
        logger.log_roster(names, delivered)
        return delivered

    async def send_message(self, session_id: int, text: str) -> ChatMessage:
        """Broadcast ``text`` authored by the session's current name.

        Raises EmptyMessage for blank text, InvalidSession if the session is
        gone and NotJoined if it never joined.
        """
        text = normalize_text(text)
        author = await self.registry.name_of(session_id)
        message = ChatMessage(author=author, text=text)

        delivered = await self.broadcast_message(message)
        logger.log_message(author, session_id, text, delivered)
        return message

    def _on_roster_changed(self, names: List[str], recipients: List[SessionOutbox]):
        # Runs under the registry lock
        delivered = self.fan_out(RosterUpdated(tuple(names)), recipients)
        logger.log_roster(names, delivered)
