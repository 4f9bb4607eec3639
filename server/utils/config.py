"""
Server configuration module.

This module handles server-side configuration settings.
"""

import logging
import os

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, MAX_LINE_BYTES, HOST_ENV_VAR, PORT_ENV_VAR
)


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT, log_level: str = 'INFO'):
        self.host = host
        self.port = port

        # Logging configuration
        self.log_level = log_level.upper()

        # Wire settings
        self.max_line_bytes = MAX_LINE_BYTES
    @classmethod
    def from_env(cls, environ=None) -> 'ServerConfig':
        """Build a config from CHAT_RELAY_HOST / CHAT_RELAY_PORT."""
        environ = os.environ if environ is None else environ
        host = environ.get(HOST_ENV_VAR, DEFAULT_SERVER_HOST)
        port_text = environ.get(PORT_ENV_VAR, str(DEFAULT_PORT))
        try:
            port = int(port_text)
        except ValueError:
            raise ValueError(f"{PORT_ENV_VAR} must be an integer, got {port_text!r}")
        return cls(host, port)

    def get_log_level(self) -> int:
        """Resolve the configured level name to a logging constant."""
        level = logging.getLevelName(self.log_level)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {self.log_level}")
        return level
