"""
Chat server module.

This module handles the per-session chat intents: join, send a message,
heartbeat, roster request and logout. It is transport-agnostic; the
connection handler in ``server.main_server`` decodes lines and calls in here.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from common.constants import MessageTypes
from common.errors import ProtocolError
from common.protocol_definitions import (
    ChatMessage, JoinAcknowledged, HeartbeatAcknowledged, RosterUpdated,
    normalize_name
)
from server.chat.broadcast_relay import BroadcastRelay
from server.chat.session_registry import SessionRegistry, SessionOutbox
from server.utils.logger import logger


class ChatServer:
    """Server-side chat functionality."""

    def __init__(self, registry: Optional[SessionRegistry] = None):
        self.registry = registry or SessionRegistry()
        self.relay = BroadcastRelay(self.registry)

    async def open_session(self) -> int:
        """Allocate a session for a new connection."""
        return await self.registry.connect()

    async def outbox_for(self, session_id: int) -> SessionOutbox:
        """Outbox the connection's writer drains."""
        return await self.registry.outbox(session_id)

    async def handle(self, session_id: int, message: Dict[str, Any]) -> bool:
        """Dispatch one decoded client message.

        Returns False when the session asked to log out.
        """
        msg_type = message.get('type', '')
        logger.debug(f"Received from session_id={session_id}: {msg_type}")

        if msg_type == MessageTypes.JOIN:
            await self.handle_join(session_id, message)
        elif msg_type == MessageTypes.CHAT_MESSAGE:
            await self.handle_chat(session_id, message)
        elif msg_type == MessageTypes.HEARTBEAT:
            await self.handle_heartbeat(session_id, message)
        elif msg_type == MessageTypes.GET_ROSTER:
            await self.handle_get_roster(session_id, message)
        elif msg_type == MessageTypes.LOGOUT:
            logger.info(f"Logout request from session_id={session_id}")
            return False
        else:
            raise ProtocolError(f"Unknown message type '{msg_type}'")
        return True

    async def handle_join(self, session_id: int, data: dict) -> List[str]:
        """Process a join intent."""
        name = normalize_name(data.get('name'))
        roster = await self.registry.join(session_id, name)

        outbox = await self.registry.outbox(session_id)
        outbox.deliver(JoinAcknowledged(session_id, name))
        return roster

    async def handle_chat(self, session_id: int, data: dict) -> ChatMessage:
        """Process a chat message and fan it out to everyone."""
        return await self.relay.send_message(session_id, data.get('text'))

    async def handle_heartbeat(self, session_id: int, data: dict):
        """Answer a heartbeat."""
        outbox = await self.registry.outbox(session_id)
        outbox.deliver(HeartbeatAcknowledged(datetime.now().isoformat()))

    async def handle_get_roster(self, session_id: int, data: dict):
        """Send the current roster to the requesting session only."""
        outbox = await self.registry.outbox(session_id)
        roster = await self.registry.current_roster()
        outbox.deliver(RosterUpdated(tuple(roster)))

    async def close_session(self, session_id: int) -> bool:
        """Evict the session; safe to call more than once."""
        return await self.registry.disconnect(session_id)
