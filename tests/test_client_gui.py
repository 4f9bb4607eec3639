#!/usr/bin/env python3
"""
Unit tests for the PyQt6 client widgets.

Covers:
- Blank input never being emitted
- Roster rendering (sorting, duplicates, own name marker)
- Rendering of server events in the main window
- Login dialog validation and theme toggling
- Empty-state placeholders and frame decoding on the network thread
"""

import os
import unittest
from unittest.mock import MagicMock, patch

# Widgets are built without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from PyQt6.QtWidgets import QApplication
from client.ui.client_gui import ChatWidget, ClientMainWindow, LoginDialog, NetworkThread, RosterPanel
from common.constants import MessageTypes


class GuiTestCase(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        """Create QApplication once for all tests."""
        if not QApplication.instance():
            cls.app = QApplication([])
        else:
            cls.app = QApplication.instance()


class TestChatWidget(GuiTestCase):
    """Test cases for the chat input and view."""

    def setUp(self):
        self.chat_widget = ChatWidget()

    def test_send_emits_trimmed_text_and_clears_input(self):
        with patch.object(self.chat_widget, 'message_sent') as mock_signal:
            self.chat_widget.input_field.setText("  hello  ")
            self.chat_widget.send_message()

            mock_signal.emit.assert_called_once_with("hello")
        self.assertEqual(self.chat_widget.input_field.text(), "")

    def test_blank_input_is_not_emitted(self):
        with patch.object(self.chat_widget, 'message_sent') as mock_signal:
            self.chat_widget.input_field.setText("    ")
            self.chat_widget.send_message()

            mock_signal.emit.assert_not_called()

    def test_messages_are_escaped(self):
        self.chat_widget.add_message("<b>eve</b>", "<script>x</script>")

        plain = self.chat_widget.chat_text.toPlainText()
        self.assertIn("<b>eve</b>:", plain)
        self.assertIn("<script>x</script>", plain)

    def test_empty_chat_shows_placeholder(self):
        self.assertEqual(self.chat_widget.chat_text.toPlainText(), "")
        self.assertEqual(self.chat_widget.chat_text.placeholderText(), "No messages yet. Say something!")

    def tearDown(self):
        self.chat_widget.deleteLater()


class TestRosterPanel(GuiTestCase):
    """Test cases for the roster list."""

    def setUp(self):
        self.panel = RosterPanel()

    def _items(self):
        return [self.panel.roster_list.item(i).text() for i in range(self.panel.roster_list.count())]

    def test_roster_is_sorted_and_marks_self_once(self):
        self.panel.set_roster(["bob", "alice", "bob"], own_name="bob")

        self.assertEqual(self._items(), ["alice", "bob (you)", "bob"])
        self.assertEqual(self.panel.title.text(), "Online (3)")

    def test_roster_replaces_previous_contents(self):
        self.panel.set_roster(["alice", "bob"])
        self.panel.set_roster(["bob"])

        self.assertEqual(self._items(), ["bob"])

    def test_empty_roster_shows_placeholder(self):
        self.assertEqual(self._items(), ["No users online"])

        self.panel.set_roster(["alice"])
        self.panel.set_roster([])

        self.assertEqual(self._items(), ["No users online"])
        self.assertEqual(self.panel.title.text(), "Online (0)")
        self.assertEqual(self.panel.names, [])

    def tearDown(self):
        self.panel.deleteLater()


class TestClientMainWindow(GuiTestCase):
    """Test cases for event rendering in the main window."""

    def setUp(self):
        self.window = ClientMainWindow()

    def test_join_ack_and_roster_update_the_view(self):
        self.window.handle_message({"type": MessageTypes.JOIN_ACK, "session_id": 4, "name": "alice"})
        self.window.handle_message({"type": MessageTypes.ROSTER, "names": ["alice", "bob"]})

        self.assertEqual(self.window.session_id, 4)
        self.assertEqual(self.window.user_label.text(), "alice")
        self.assertEqual(self.window.roster_panel.names, ["alice", "bob"])

    def test_chat_messages_are_rendered_once(self):
        self.window.username = "alice"
        with patch.object(self.window.chat_widget, 'add_message') as mock_add:
            self.window.handle_message({"type": MessageTypes.CHAT_MESSAGE, "author": "alice", "text": "hi"})
            self.window.handle_message({"type": MessageTypes.CHAT_MESSAGE, "author": "bob", "text": "yo"})

        self.assertEqual(mock_add.call_count, 2)
        mock_add.assert_any_call("alice", "hi")
        mock_add.assert_any_call("bob", "yo")

    def test_same_name_messages_are_not_marked_as_own(self):
        """Another session may share our name, so no line is flagged as ours."""
        self.window.username = "alice"
        with patch.object(self.window.chat_widget, 'add_message') as mock_add:
            self.window.handle_message(
                {"type": MessageTypes.CHAT_MESSAGE, "author": "alice", "text": "from the other alice"}
            )

        mock_add.assert_called_once_with("alice", "from the other alice")

    def test_server_errors_become_system_lines(self):
        with patch.object(self.window.chat_widget, 'add_system_message') as mock_system:
            self.window.handle_message({"type": MessageTypes.ERROR, "code": "empty_name", "message": "nope"})

        mock_system.assert_called_once_with("Error: nope")

    def test_unknown_messages_are_ignored(self):
        with patch.object(self.window.chat_widget, 'add_message') as mock_add:
            self.window.handle_message({"type": "file_available"})

        mock_add.assert_not_called()

    def test_send_goes_through_network_thread(self):
        self.window.network_thread = MagicMock()
        self.window.on_send_message("hello")

        self.window.network_thread.send_message.assert_called_once_with(
            {"type": MessageTypes.CHAT_MESSAGE, "text": "hello"}
        )
        self.window.network_thread = None

    def test_theme_toggle(self):
        self.assertTrue(self.window.dark_mode)
        self.window.toggle_theme()
        self.assertFalse(self.window.dark_mode)
        self.assertEqual(self.window.theme_btn.text(), "Dark")

    def tearDown(self):
        self.window.deleteLater()


class TestLoginDialog(GuiTestCase):
    """Test cases for name entry."""

    def test_blank_name_keeps_dialog_open(self):
        dialog = LoginDialog()
        dialog.name_input.setText("   ")
        with patch.object(dialog, 'accept') as mock_accept:
            dialog.try_accept()

        mock_accept.assert_not_called()
        self.assertEqual(dialog.error_label.text(), "Username required")
        dialog.deleteLater()

    def test_name_is_trimmed(self):
        dialog = LoginDialog()
        dialog.name_input.setText("  alice ")
        with patch.object(dialog, 'accept') as mock_accept:
            dialog.try_accept()

        mock_accept.assert_called_once()
        self.assertEqual(dialog.name(), "alice")
        dialog.deleteLater()


class TestNetworkThread(GuiTestCase):
    """Test cases for frame decoding on the network thread."""

    def setUp(self):
        self.thread = NetworkThread('localhost', 4000, 'alice')

    def test_frames_are_decoded_and_forwarded(self):
        with patch.object(self.thread, 'message_received') as mock_signal:
            self.thread.handle_line(b'{"type": "roster", "names": ["alice"]}\n')

        mock_signal.emit.assert_called_once_with({"type": "roster", "names": ["alice"]})

    def test_malformed_frames_are_dropped(self):
        with patch.object(self.thread, 'message_received') as mock_signal:
            self.thread.handle_line(b'{not json\n')
            self.thread.handle_line(b'[1, 2]\n')
            self.thread.handle_line(b'{"names": []}\n')

        mock_signal.emit.assert_not_called()

    def tearDown(self):
        self.thread.deleteLater()


if __name__ == '__main__':
    unittest.main()
