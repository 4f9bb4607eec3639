"""
Shared constants for the Chat Relay system.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 4000

# Environment overrides for the server bind address
HOST_ENV_VAR = 'CHAT_RELAY_HOST'
PORT_ENV_VAR = 'CHAT_RELAY_PORT'

# Wire limits
MAX_LINE_BYTES = 1024 * 1024  # 1MB per JSON line
ENCODING = 'utf-8'

# Timeouts
HEARTBEAT_INTERVAL = 10  # seconds
CONNECT_TIMEOUT = 10.0  # seconds

# Reconnection
MAX_RETRY_ATTEMPTS = 3
RECONNECT_ATTEMPTS = 3
RECONNECT_DELAY_BASE = 1.0  # seconds, doubled per attempt

# Presentation
DEFAULT_CHANNEL_LABEL = '# general'

# Logging
SERVER_LOGGER_NAME = 'chat_relay.server'
CLIENT_LOGGER_NAME = 'chat_relay.client'
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


# Message Types
class MessageTypes:
    # Client to Server
    JOIN = 'join'
    CHAT_MESSAGE = 'chat_message'
    HEARTBEAT = 'heartbeat'
    GET_ROSTER = 'get_roster'
    LOGOUT = 'logout'

    # Server to Client
    JOIN_ACK = 'join_ack'
    ROSTER = 'roster'
    HEARTBEAT_ACK = 'heartbeat_ack'
    ERROR = 'error'


# Error codes carried in error events
class ErrorCodes:
    INVALID_SESSION = 'invalid_session'
    NOT_JOINED = 'not_joined'
    EMPTY_NAME = 'empty_name'
    EMPTY_MESSAGE = 'empty_message'
    PROTOCOL_ERROR = 'protocol_error'
