"""
Client logging module.

This module handles client-side logging functionality.
"""

import logging
import sys

from common.constants import CLIENT_LOGGER_NAME, LOG_FORMAT, LOG_DATE_FORMAT


class ClientLogger:
    """Client logging class."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger(CLIENT_LOGGER_NAME)
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

        self.logger.addHandler(console_handler)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, host: str, port: int, success: bool):
        """Log connection attempt."""
        status = "Connected" if success else "Failed to connect"
        self.info(f"{status} to {host}:{port}")

    def show_join_info(self, name: str):
        """Show join information."""
        self.info(f"[INFO] Joining as '{name}'...")

    def show_join_success(self, name: str, session_id: int):
        """Show join success."""
        self.info(f"[SUCCESS] Joined as '{name}' (session_id={session_id})")

    def show_roster(self, names: list):
        """Show the roster."""
        self.info(f"[INFO] Online ({len(names)}): {', '.join(sorted(names))}")

    def show_message(self, author: str, text: str):
        """Show a chat message."""
        self.info(f"[CHAT] {author}: {text}")

    def show_server_error(self, code: str, message: str):
        """Show an error reported by the server."""
        self.warning(f"[ERROR] Server rejected request ({code}): {message}")

    def show_interactive_mode_info(self):
        """Show interactive mode information."""
        self.info("[INFO] Type messages to chat (Ctrl+C to exit)")
        self.info("[INFO] Commands: /who /name NEW_NAME /quit")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ClientLogger()
