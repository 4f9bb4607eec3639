"""
Chat client module.

This module handles client-side chat messaging functionality. Outgoing
intents are encoded onto the stream writer; incoming core events are decoded
into typed values and queued for whatever renders them.
"""

import asyncio
from typing import Any, Dict, Optional, Tuple

from common.errors import ChatRelayError, ValidationError
from common.protocol_definitions import (
    CoreEvent, JoinAcknowledged, RosterUpdated, encode_line, event_from_wire,
    create_join_message, create_chat_message, create_heartbeat_message,
    create_get_roster_message, create_logout_message, normalize_name, normalize_text
)
from client.utils.logger import logger


class ChatClient:
    """Client-side chat functionality."""

    def __init__(self, writer: Optional[asyncio.StreamWriter] = None):
        self.writer = writer
        self.events: asyncio.Queue = asyncio.Queue()
        self.session_id: Optional[int] = None
        self.name: Optional[str] = None
        self.roster: Tuple[str, ...] = ()

    def set_writer(self, writer: asyncio.StreamWriter):
        """Set the writer for sending messages."""
        self.writer = writer

    async def send_message(self, message: Dict[str, Any]) -> bool:
        """Send a JSON message to the server."""
        if not self.writer:
            logger.error("[ERROR] Not connected to server")
            return False

        try:
            self.writer.write(encode_line(message))
            await self.writer.drain()
            return True
        except (ConnectionError, OSError) as e:
            logger.error(f"[ERROR] Failed to send message: {e}")
            return False

    async def send_join(self, name: str) -> bool:
        """Announce our display name. Blank names never leave the client."""
        try:
            name = normalize_name(name)
        except ValidationError as e:
            logger.warning(f"[WARN] {e}")
            return False
        return await self.send_message(create_join_message(name))

    async def send_chat(self, text: str) -> bool:
        """Send a chat message. Blank text never leaves the client."""
        try:
            text = normalize_text(text)
        except ValidationError as e:
            logger.warning(f"[WARN] {e}")
            return False
        return await self.send_message(create_chat_message(text))

    async def send_heartbeat(self) -> bool:
        """Send a heartbeat."""
        return await self.send_message(create_heartbeat_message())

    async def request_roster(self) -> bool:
        """Ask the server for the current roster."""
        return await self.send_message(create_get_roster_message())

    async def send_logout(self) -> bool:
        """Tell the server we are leaving."""
        return await self.send_message(create_logout_message())

    def handle_message(self, message: Dict[str, Any]) -> Optional[CoreEvent]:
        """Decode a server message, update local state and queue the event."""
        try:
            event = event_from_wire(message)
        except ChatRelayError as e:
            logger.warning(f"[WARN] Ignoring message from server: {e}")
            return None

        if isinstance(event, JoinAcknowledged):
            self.session_id = event.session_id
            self.name = event.name
        elif isinstance(event, RosterUpdated):
            self.roster = event.names

        self.events.put_nowait(event)
        return event

    async def next_event(self) -> CoreEvent:
        """Wait for the next decoded event."""
        return await self.events.get()
