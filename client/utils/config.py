"""
Client configuration module.

This module handles client-side configuration settings.
"""

from common.constants import (
    DEFAULT_HOST, DEFAULT_PORT, HEARTBEAT_INTERVAL, CONNECT_TIMEOUT,
    MAX_RETRY_ATTEMPTS, RECONNECT_ATTEMPTS, RECONNECT_DELAY_BASE
)


class ClientConfig:
    """Client configuration class."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, name: str = None):
        self.host = host
        self.port = port
        self.name = name

        # Connection settings
        self.heartbeat_interval = HEARTBEAT_INTERVAL  # seconds
        self.connect_timeout = CONNECT_TIMEOUT
        self.retry_attempts = MAX_RETRY_ATTEMPTS
        self.reconnect_attempts = RECONNECT_ATTEMPTS
        self.reconnect_delay_base = RECONNECT_DELAY_BASE

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (0-based), doubling each time."""
        return self.reconnect_delay_base * (2 ** attempt)
