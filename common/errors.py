"""
Error taxonomy for the Chat Relay system.

Every error carries a stable ``code`` which is what travels on the wire in
an ``error`` event.
"""

from common.constants import ErrorCodes


class ChatRelayError(Exception):
    """Base class for all chat relay errors."""

    code = ErrorCodes.PROTOCOL_ERROR

    def __init__(self, message: str = ''):
        super().__init__(message or self.__class__.__doc__.strip())
        self.message = message or self.__class__.__doc__.strip()


class InvalidSession(ChatRelayError):
    """Session is not currently connected."""

    code = ErrorCodes.INVALID_SESSION

    def __init__(self, session_id: int):
        super().__init__(f"Session {session_id} is not connected")
        self.session_id = session_id


class NotJoined(ChatRelayError):
    """Session has not joined yet."""

    code = ErrorCodes.NOT_JOINED

    def __init__(self, session_id: int):
        super().__init__(f"Session {session_id} must join before sending messages")
        self.session_id = session_id


class ValidationError(ChatRelayError):
    """Caller supplied an invalid value."""


class EmptyName(ValidationError):
    """Display name must not be empty."""

    code = ErrorCodes.EMPTY_NAME


class EmptyMessage(ValidationError):
    """Message text must not be empty."""

    code = ErrorCodes.EMPTY_MESSAGE


class ProtocolError(ChatRelayError):
    """Malformed or unknown wire message."""

    code = ErrorCodes.PROTOCOL_ERROR
