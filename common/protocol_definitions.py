"""
Protocol definitions for the Chat Relay system.

This module defines the message structures and data formats used in communication
between client and server components. Every frame on the wire is a single JSON
object terminated by a newline.
"""

import json
from typing import Dict, Any, List, Tuple, Union
from dataclasses import dataclass
from datetime import datetime

from common.constants import MessageTypes, MAX_LINE_BYTES, ENCODING
from common.errors import ProtocolError, EmptyName, EmptyMessage


@dataclass(frozen=True)
class ChatMessage:
    """Chat message value. The author is captured by value at creation time."""
    author: str
    text: str


@dataclass(frozen=True)
class RosterUpdated:
    """Core event: the roster is now ``names``."""
    names: Tuple[str, ...]

    def to_wire(self) -> Dict[str, Any]:
        return create_roster_message(list(self.names))


@dataclass(frozen=True)
class MessageReceived:
    """Core event: ``message`` arrived."""
    message: ChatMessage

    def to_wire(self) -> Dict[str, Any]:
        return create_chat_broadcast_message(self.message.author, self.message.text)


@dataclass(frozen=True)
class JoinAcknowledged:
    """Reply to the joining session only."""
    session_id: int
    name: str

    def to_wire(self) -> Dict[str, Any]:
        return create_join_ack_message(self.session_id, self.name)


@dataclass(frozen=True)
class HeartbeatAcknowledged:
    """Reply to a heartbeat."""
    timestamp: str

    def to_wire(self) -> Dict[str, Any]:
        return {
            "type": MessageTypes.HEARTBEAT_ACK,
            "timestamp": self.timestamp
        }


@dataclass(frozen=True)
class ServerError:
    """Error reply, sent only to the session that caused it."""
    code: str
    message: str

    def to_wire(self) -> Dict[str, Any]:
        return create_error_message(self.code, self.message)


CoreEvent = Union[RosterUpdated, MessageReceived, JoinAcknowledged, HeartbeatAcknowledged, ServerError]


def normalize_name(name: Any) -> str:
    """Trim a display name, rejecting blanks."""
    if not isinstance(name, str) or not name.strip():
        raise EmptyName()
    return name.strip()


def normalize_text(text: Any) -> str:
    """Trim message text, rejecting blanks."""
    if not isinstance(text, str) or not text.strip():
        raise EmptyMessage()
    return text.strip()


# ---------------------------------------------------------------------------
# Client to Server
# ---------------------------------------------------------------------------

def create_join_message(name: str) -> Dict[str, Any]:
    """Create a join message."""
    return {
        "type": MessageTypes.JOIN,
        "name": name
    }


def create_chat_message(text: str) -> Dict[str, Any]:
    """Create an outgoing chat message."""
    return {
        "type": MessageTypes.CHAT_MESSAGE,
        "text": text
    }


def create_heartbeat_message() -> Dict[str, Any]:
    """Create a heartbeat message."""
    return {
        "type": MessageTypes.HEARTBEAT,
        "timestamp": datetime.now().isoformat()
    }


def create_get_roster_message() -> Dict[str, Any]:
    """Create a roster request."""
    return {
        "type": MessageTypes.GET_ROSTER
    }


def create_logout_message() -> Dict[str, Any]:
    """Create a logout message."""
    return {
        "type": MessageTypes.LOGOUT
    }


# ---------------------------------------------------------------------------
# Server to Client
# ---------------------------------------------------------------------------

def create_join_ack_message(session_id: int, name: str) -> Dict[str, Any]:
    """Create a join acknowledgement message."""
    return {
        "type": MessageTypes.JOIN_ACK,
        "session_id": session_id,
        "name": name
    }


def create_roster_message(names: List[str]) -> Dict[str, Any]:
    """Create a roster message."""
    return {
        "type": MessageTypes.ROSTER,
        "names": names
    }


def create_chat_broadcast_message(author: str, text: str) -> Dict[str, Any]:
    """Create a fanned-out chat message."""
    return {
        "type": MessageTypes.CHAT_MESSAGE,
        "author": author,
        "text": text
    }


def create_error_message(code: str, message: str) -> Dict[str, Any]:
    """Create an error message."""
    return {
        "type": MessageTypes.ERROR,
        "code": code,
        "message": message
    }


# ---------------------------------------------------------------------------
# Framing
# ---------------------------------------------------------------------------

def encode_line(message: Dict[str, Any]) -> bytes:
    """Serialize one message as a newline-terminated JSON line."""
    return json.dumps(message).encode(ENCODING) + b'\n'


def decode_line(data: bytes, max_bytes: int = MAX_LINE_BYTES) -> Dict[str, Any]:
    """Parse one JSON line into a message dict with a string ``type``."""
    if len(data) > max_bytes:
        raise ProtocolError(f"Message too large ({len(data)} bytes)")

    try:
        message = json.loads(data.decode(ENCODING).strip())
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProtocolError(f"Malformed JSON: {e}")

    if not isinstance(message, dict):
        raise ProtocolError("Message must be a JSON object")

    msg_type = message.get('type', '')
    if not isinstance(msg_type, str) or len(msg_type) == 0:
        raise ProtocolError("Message has no type")

    return message


def event_from_wire(message: Dict[str, Any]) -> CoreEvent:
    """Turn a server-to-client message dict back into a typed event."""
    msg_type = message.get('type')

    if msg_type == MessageTypes.ROSTER:
        names = message.get('names', [])
        if not isinstance(names, list):
            raise ProtocolError("Roster names must be a list")
        return RosterUpdated(tuple(str(n) for n in names))
    elif msg_type == MessageTypes.CHAT_MESSAGE:
        return MessageReceived(ChatMessage(
            author=str(message.get('author', 'unknown')),
            text=str(message.get('text', ''))
        ))
    elif msg_type == MessageTypes.JOIN_ACK:
        return JoinAcknowledged(int(message.get('session_id', 0)), str(message.get('name', '')))
    elif msg_type == MessageTypes.HEARTBEAT_ACK:
        return HeartbeatAcknowledged(str(message.get('timestamp', '')))
    elif msg_type == MessageTypes.ERROR:
        return ServerError(str(message.get('code', '')), str(message.get('message', 'Unknown error')))

    raise ProtocolError(f"Unknown message type '{msg_type}'")
