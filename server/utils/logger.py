"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging

from common.constants import SERVER_LOGGER_NAME, LOG_FORMAT, LOG_DATE_FORMAT


class ServerLogger:
    """Server logging class."""

    def __init__(self, log_level: int = logging.INFO):
        # Set up main logger
        self.logger = logging.getLogger(SERVER_LOGGER_NAME)
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        console_handler.setFormatter(formatter)

        self.logger.addHandler(console_handler)
        self.console_handler = console_handler

    def set_level(self, log_level: int):
        """Change the level of the logger and its console handler."""
        self.logger.setLevel(log_level)
        self.console_handler.setLevel(log_level)

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

    def log_connection(self, addr: tuple, session_id: int, connected: int):
        """Log client connection."""
        self.info(f"New connection from {addr}, assigned session_id={session_id} ({connected} connected)")

    def log_join(self, name: str, session_id: int, renamed_from: str = None):
        """Log a join or a rename."""
        if renamed_from is None:
            self.info(f"Session {session_id} joined as '{name}'")
        else:
            self.info(f"Session {session_id} renamed '{renamed_from}' -> '{name}'")

    def log_disconnect(self, session_id: int, name: str = None, remaining: int = 0):
        """Log session eviction."""
        if name is None:
            self.info(f"Session {session_id} disconnected before joining")
        else:
            self.info(f"User '{name}' (session_id={session_id}) disconnected, {remaining} still online")

    def log_roster(self, names: list, recipients: int):
        """Log a roster broadcast."""
        self.debug(f"[ROSTER] {len(names)} online, delivered to {recipients} session(s)")

    def log_message(self, author: str, session_id: int, text: str, recipients: int):
        """Log a chat message fan-out."""
        self.debug(f"Chat from {author} (session_id={session_id}) to {recipients} session(s): {text}")

    def log_rejected(self, session_id: int, error: Exception):
        """Log a rejected client intent."""
        self.warning(f"Rejected request from session_id={session_id}: {error}")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ServerLogger()
