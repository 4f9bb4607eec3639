#!/usr/bin/env python3
"""
Client GUI - PyQt6 Application

Features:
- Login dialog asking for a display name
- Live roster of who is online
- Chat view with an input box
- Dark/light theme toggle

The window never shares state with the network code: a NetworkThread runs
its own asyncio loop and hands every decoded server message over through a
Qt signal.
"""

import asyncio
import html
import sys
import os
import threading
from datetime import datetime
from typing import List, Optional

# PyQt6 imports
from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel,
    QPushButton, QTextBrowser, QLineEdit, QListWidget, QListWidgetItem, QDialog, QDialogButtonBox,
    QMessageBox
)
from PyQt6.QtCore import Qt, QThread, pyqtSignal
from PyQt6.QtGui import QFont

from common.constants import DEFAULT_CHANNEL_LABEL, CONNECT_TIMEOUT
from common.errors import ChatRelayError, ProtocolError
from common.protocol_definitions import (
    create_join_message, create_chat_message, create_logout_message, decode_line, encode_line,
    event_from_wire, JoinAcknowledged, MessageReceived, RosterUpdated, ServerError
)
from client.utils.logger import logger


DARK_THEME = """
    QMainWindow, QDialog, QWidget {
        background-color: #1A1A1A;
        color: #ECF0F1;
    }
    QLineEdit, QTextBrowser, QListWidget {
        background-color: #2C2C2C;
        color: #ECF0F1;
        border: 1px solid #34495E;
        border-radius: 5px;
        padding: 5px;
    }
    QPushButton {
        background-color: #3498DB;
        color: white;
        border: none;
        padding: 8px 15px;
        border-radius: 5px;
        font-weight: bold;
    }
    QPushButton:hover {
        background-color: #2980B9;
    }
"""

LIGHT_THEME = """
    QMainWindow, QDialog, QWidget {
        background-color: #F7F9FA;
        color: #1A1A1A;
    }
    QLineEdit, QTextBrowser, QListWidget {
        background-color: #FFFFFF;
        color: #1A1A1A;
        border: 1px solid #D0D7DE;
        border-radius: 5px;
        padding: 5px;
    }
    QPushButton {
        background-color: #3182CE;
        color: white;
        border: none;
        padding: 8px 15px;
        border-radius: 5px;
        font-weight: bold;
    }
    QPushButton:hover {
        background-color: #2B6CB0;
    }
"""


# ============================================================================
# LOGIN DIALOG
# ============================================================================

class LoginDialog(QDialog):
    """Asks for a display name; refuses blank ones."""

    def __init__(self, default_name: str = '', parent=None):
        super().__init__(parent)
        self.setWindowTitle("Chat Relay - Log In")
        self.setMinimumWidth(320)

        layout = QVBoxLayout()

        title = QLabel("Chat Relay")
        title.setFont(QFont("Arial", 16, QFont.Weight.Bold))
        layout.addWidget(title)

        self.name_input = QLineEdit(default_name)
        self.name_input.setPlaceholderText("Enter a username")
        layout.addWidget(self.name_input)

        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #E74C3C;")
        layout.addWidget(self.error_label)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.try_accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

        self.setLayout(layout)

    def name(self) -> str:
        return self.name_input.text().strip()

    def try_accept(self):
        """Accept only when a non-blank name was typed."""
        if not self.name():
            self.error_label.setText("Username required")
            return
        self.accept()


# ============================================================================
# ROSTER PANEL
# ============================================================================

class RosterPanel(QWidget):
    """Panel showing who is online."""

    def __init__(self):
        super().__init__()
        self.names: List[str] = []
        self.setup_ui()

    def setup_ui(self):
        layout = QVBoxLayout()
        layout.setContentsMargins(10, 10, 10, 10)

        self.title = QLabel("Online (0)")
        self.title.setFont(QFont("Arial", 12, QFont.Weight.Bold))
        layout.addWidget(self.title)

        self.roster_list = QListWidget()
        self.roster_list.setMinimumHeight(100)
        layout.addWidget(self.roster_list)

        self.setLayout(layout)
        self.set_roster([])

    def set_roster(self, names: List[str], own_name: Optional[str] = None):
        """Replace the displayed roster. Duplicate names are shown as-is."""
        self.names = sorted(names, key=str.lower)
        self.roster_list.clear()

        if not self.names:
            placeholder = QListWidgetItem("No users online")
            placeholder.setFlags(Qt.ItemFlag.NoItemFlags)
            self.roster_list.addItem(placeholder)

        marked_self = False
        for name in self.names:
            if name == own_name and not marked_self:
                self.roster_list.addItem(f"{name} (you)")
                marked_self = True
            else:
                self.roster_list.addItem(name)

        self.title.setText(f"Online ({len(self.names)})")


# ============================================================================
# CHAT WIDGET
# ============================================================================

class ChatWidget(QWidget):
    """Chat interface with text area and input."""

    message_sent = pyqtSignal(str)  # message text

    def __init__(self):
        super().__init__()
        self.setup_ui()

    def setup_ui(self):
        layout = QVBoxLayout()
        layout.setSpacing(5)
        layout.setContentsMargins(5, 5, 5, 5)

        self.chat_text = QTextBrowser()
        self.chat_text.setReadOnly(True)
        self.chat_text.setOpenExternalLinks(False)
        self.chat_text.setPlaceholderText("No messages yet. Say something!")
        layout.addWidget(self.chat_text)

        input_layout = QHBoxLayout()

        self.input_field = QLineEdit()
        self.input_field.setPlaceholderText("Type a message...")
        self.input_field.returnPressed.connect(self.send_message)
        input_layout.addWidget(self.input_field)

        self.send_btn = QPushButton("Send")
        self.send_btn.clicked.connect(self.send_message)
        input_layout.addWidget(self.send_btn)

        layout.addLayout(input_layout)
        self.setLayout(layout)

    def send_message(self):
        """Emit the typed text unless it is blank."""
        text = self.input_field.text().strip()
        if text:
            self.message_sent.emit(text)
            self.input_field.clear()

    def add_message(self, author: str, text: str):
        """Append a chat message."""
        self.chat_text.append(
            f'<span style="color: #3498DB; font-weight: bold;">{html.escape(author)}:</span> '
            f'{html.escape(text)}'
        )
        self._scroll_to_bottom()

    def add_system_message(self, text: str):
        """Append a grey status line."""
        timestamp = datetime.now().strftime("%H:%M")
        self.chat_text.append(f'<span style="color: #95A5A6;">[{timestamp}] {html.escape(text)}</span>')
        self._scroll_to_bottom()

    def _scroll_to_bottom(self):
        scrollbar = self.chat_text.verticalScrollBar()
        scrollbar.setValue(scrollbar.maximum())


# ============================================================================
# MAIN WINDOW
# ============================================================================

class ClientMainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, server_host: str = 'localhost', server_port: int = 4000):
        super().__init__()
        self.server_host = server_host
        self.server_port = server_port
        self.username: Optional[str] = None
        self.session_id: Optional[int] = None
        self.network_thread: Optional['NetworkThread'] = None
        self.dark_mode = True

        self.setup_ui()
        self.chat_widget.message_sent.connect(self.on_send_message)
        self.apply_theme()

    def setup_ui(self):
        self.setWindowTitle("Chat Relay")
        self.setGeometry(100, 100, 1000, 700)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)

        main_layout = QVBoxLayout()
        main_layout.setContentsMargins(10, 10, 10, 10)

        # Top bar: channel label, own name, theme toggle
        top_bar = QHBoxLayout()
        self.channel_label = QLabel(DEFAULT_CHANNEL_LABEL)
        self.channel_label.setFont(QFont("Arial", 12, QFont.Weight.Bold))
        top_bar.addWidget(self.channel_label)
        top_bar.addStretch()
        self.user_label = QLabel("")
        top_bar.addWidget(self.user_label)
        self.theme_btn = QPushButton("Light")
        self.theme_btn.setToolTip("Toggle color mode")
        self.theme_btn.clicked.connect(self.toggle_theme)
        top_bar.addWidget(self.theme_btn)
        main_layout.addLayout(top_bar)

        body = QHBoxLayout()
        self.roster_panel = RosterPanel()
        body.addWidget(self.roster_panel, stretch=1)
        self.chat_widget = ChatWidget()
        body.addWidget(self.chat_widget, stretch=3)
        main_layout.addLayout(body)

        central_widget.setLayout(main_layout)

    def apply_theme(self):
        """Apply the current color mode."""
        self.setStyleSheet(DARK_THEME if self.dark_mode else LIGHT_THEME)
        self.theme_btn.setText("Light" if self.dark_mode else "Dark")

    def toggle_theme(self):
        self.dark_mode = not self.dark_mode
        self.apply_theme()

    # ========================================================================
    # CONNECTION & NETWORKING
    # ========================================================================

    def connect_to_server(self) -> bool:
        """Ask for a name and start the network thread."""
        dialog = LoginDialog(self.username or '', self)
        if not dialog.exec():
            QMessageBox.warning(self, "Error", "Username required")
            return False

        self.username = dialog.name()
        self.chat_widget.add_system_message(f"Connecting to {self.server_host}:{self.server_port}...")
        self.setWindowTitle("Chat Relay - Connecting...")

        self.network_thread = NetworkThread(self.server_host, self.server_port, self.username)
        self.network_thread.message_received.connect(self.handle_message)
        self.network_thread.connected.connect(self.on_connected)
        self.network_thread.disconnected.connect(self.on_disconnected)
        self.network_thread.start()
        return True

    def on_connected(self):
        self.chat_widget.add_system_message("Connected to server")
        self.setWindowTitle(f"Chat Relay - {self.username}")

    def on_disconnected(self):
        self.chat_widget.add_system_message("Disconnected from server")
        self.setWindowTitle("Chat Relay (Disconnected)")

    def handle_message(self, message: dict):
        """Render one message received from the server."""
        try:
            event = event_from_wire(message)
        except (ChatRelayError, ValueError) as e:
            logger.warning(f"[GUI] Ignoring message from server: {e}")
            return

        if isinstance(event, JoinAcknowledged):
            self.session_id = event.session_id
            self.username = event.name
            self.user_label.setText(event.name)
            self.chat_widget.add_system_message(f"Joined as {event.name}")
        elif isinstance(event, RosterUpdated):
            self.roster_panel.set_roster(list(event.names), self.username)
        elif isinstance(event, MessageReceived):
            # The relay echoes our own messages back; that echo is the only copy shown.
            # Names are not unique, so our own lines are not told apart from others
            self.chat_widget.add_message(event.message.author, event.message.text)
        elif isinstance(event, ServerError):
            self.chat_widget.add_system_message(f"Error: {event.message}")

    def on_send_message(self, text: str):
        """Forward typed text to the relay."""
        if not self.network_thread:
            self.chat_widget.add_system_message("Not connected")
            return
        self.network_thread.send_message(create_chat_message(text))

    def closeEvent(self, event):
        """Handle window close event."""
        if self.network_thread:
            self.network_thread.stop()
            self.network_thread.wait()
        event.accept()


# ============================================================================
# NETWORK THREAD
# ============================================================================

class NetworkThread(QThread):
    """Thread for handling network communication."""

    message_received = pyqtSignal(dict)
    connected = pyqtSignal()
    disconnected = pyqtSignal()

    def __init__(self, host: str, port: int, username: str):
        super().__init__()
        self.host = host
        self.port = port
        self.username = username
        self.writer = None
        self.reader = None
        self.running = False
        self.loop = None
        self.loop_ready = threading.Event()

    def run(self):
        """Run network loop."""
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)
        self.loop_ready.set()
        try:
            self.loop.run_until_complete(self._connect_and_listen())
        finally:
            self.loop.close()

    async def _connect_and_listen(self):
        """Connect to server, join and listen for messages."""
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=CONNECT_TIMEOUT
            )
            logger.log_connection(self.host, self.port, True)
            self.connected.emit()
            self.running = True

            await self.send_message_async(create_join_message(self.username))

            while self.running:
                data = await self.reader.readline()
                if not data:
                    logger.info("[NETWORK] Connection closed by server")
                    break
                self.handle_line(data)

        except asyncio.TimeoutError:
            logger.error(f"[NETWORK] Connection timeout: could not reach {self.host}:{self.port}")
        except ConnectionRefusedError:
            logger.error(f"[NETWORK] Connection refused by {self.host}:{self.port}")
        except OSError as e:
            logger.error(f"[NETWORK] Network error: {e}")
        finally:
            self.running = False
            self.disconnected.emit()
            if self.writer:
                self.writer.close()
                try:
                    await self.writer.wait_closed()
                except (ConnectionError, OSError) as e:
                    logger.debug(f"[NETWORK] Error while closing: {e}")

    def handle_line(self, data: bytes):
        """Decode one frame from the server and hand it to the window."""
        try:
            message = decode_line(data)
        except ProtocolError as e:
            logger.warning(f"[NETWORK] Malformed message from server: {e}")
            return
        self.message_received.emit(message)

    async def send_message_async(self, message: dict):
        """Send message asynchronously."""
        if not self.writer:
            return

        try:
            self.writer.write(encode_line(message))
            await self.writer.drain()
        except (ConnectionError, OSError) as e:
            logger.error(f"[NETWORK] Send error: {e}")

    def send_message(self, message: dict):
        """Send message from main thread."""
        if not self.loop_ready.wait(timeout=5.0):
            logger.warning("[NETWORK] Event loop not ready, message not sent")
            return

        if self.loop and self.loop.is_running():
            asyncio.run_coroutine_threadsafe(self.send_message_async(message), self.loop)

    async def _logout_and_close(self):
        await self.send_message_async(create_logout_message())
        if self.writer:
            self.writer.close()

    def stop(self):
        """Log out and stop the network thread."""
        self.running = False
        if self.loop and self.loop.is_running():
            asyncio.run_coroutine_threadsafe(self._logout_and_close(), self.loop)


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def main():
    """Main entry point."""
    app = QApplication(sys.argv)

    server_host = os.environ.get('SERVER_IP', 'localhost')
    server_port = int(os.environ.get('SERVER_PORT', '4000'))

    window = ClientMainWindow(server_host, server_port)
    window.show()

    if not window.connect_to_server():
        sys.exit(1)

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
