#!/usr/bin/env python3
"""
Unit tests for the command-line chat client.
"""

import asyncio
import json
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from client.chat.chat_client import ChatClient
from client.main_client import ChatRelayClient
from common.constants import MessageTypes
from common.protocol_definitions import (
    ChatMessage, JoinAcknowledged, MessageReceived, RosterUpdated, ServerError
)
from server.main_server import ChatRelayServer
from server.utils.config import ServerConfig


def fake_writer():
    writer = MagicMock()
    writer.drain = AsyncMock()
    return writer


def written(writer):
    return [json.loads(call.args[0]) for call in writer.write.call_args_list]


class TestChatClient(unittest.IsolatedAsyncioTestCase):
    """Test cases for intent encoding and event decoding."""

    async def asyncSetUp(self):
        self.writer = fake_writer()
        self.chat_client = ChatClient(self.writer)

    async def test_send_join_trims_name(self):
        self.assertTrue(await self.chat_client.send_join("  alice "))
        self.assertEqual(written(self.writer), [{"type": MessageTypes.JOIN, "name": "alice"}])

    async def test_blank_intents_are_not_sent(self):
        self.assertFalse(await self.chat_client.send_join("   "))
        self.assertFalse(await self.chat_client.send_chat(""))
        self.writer.write.assert_not_called()

    async def test_send_without_connection_fails(self):
        self.assertFalse(await ChatClient().send_chat("hi"))

    async def test_send_failure_is_reported(self):
        self.writer.drain.side_effect = ConnectionResetError("gone")
        self.assertFalse(await self.chat_client.send_chat("hi"))

    async def test_incoming_events_are_queued_in_order(self):
        self.chat_client.handle_message({"type": "roster", "names": ["alice"]})
        self.chat_client.handle_message({"type": "join_ack", "session_id": 7, "name": "alice"})
        self.chat_client.handle_message({"type": "chat_message", "author": "alice", "text": "hi"})

        self.assertEqual(await self.chat_client.next_event(), RosterUpdated(("alice",)))
        self.assertEqual(await self.chat_client.next_event(), JoinAcknowledged(7, "alice"))
        self.assertEqual(await self.chat_client.next_event(), MessageReceived(ChatMessage("alice", "hi")))
        self.assertEqual(self.chat_client.session_id, 7)
        self.assertEqual(self.chat_client.roster, ("alice",))

    async def test_unknown_server_messages_are_ignored(self):
        self.assertIsNone(self.chat_client.handle_message({"type": "file_available"}))
        self.assertTrue(self.chat_client.events.empty())


class TestChatRelayClient(unittest.IsolatedAsyncioTestCase):
    """Test cases for the console client."""

    async def asyncSetUp(self):
        self.client = ChatRelayClient(name="alice")
        self.client.chat_client.set_writer(fake_writer())

    async def test_commands(self):
        with patch.object(self.client.chat_client, 'request_roster', new=AsyncMock()) as who, \
                patch.object(self.client.chat_client, 'send_join', new=AsyncMock()) as join, \
                patch.object(self.client.chat_client, 'send_chat', new=AsyncMock()) as chat:
            self.assertTrue(await self.client.handle_input("/who\n"))
            self.assertTrue(await self.client.handle_input("/name alicia\n"))
            self.assertTrue(await self.client.handle_input("hello\n"))
            self.assertTrue(await self.client.handle_input("   \n"))
            self.assertFalse(await self.client.handle_input("/quit\n"))

        who.assert_awaited_once()
        join.assert_awaited_once_with("alicia")
        chat.assert_awaited_once_with("hello")
        self.assertEqual(self.client.config.name, "alicia")

    async def test_render_uses_logger(self):
        with patch('client.main_client.logger') as mock_logger:
            self.client.render(RosterUpdated(("bob", "alice")))
            self.client.render(MessageReceived(ChatMessage("bob", "yo")))
            self.client.render(ServerError("empty_name", "Display name must not be empty."))

        mock_logger.show_roster.assert_called_once_with(["bob", "alice"])
        mock_logger.show_message.assert_called_once_with("bob", "yo")
        mock_logger.show_server_error.assert_called_once()

    async def test_connect_gives_up_after_retries(self):
        self.client.config.reconnect_delay_base = 0
        with patch('client.main_client.asyncio.open_connection', side_effect=ConnectionRefusedError()):
            self.assertFalse(await self.client.connect(retry_count=2))
        self.assertFalse(self.client.running)

    async def test_reconnect_closes_the_old_connection_first(self):
        old_writer = fake_writer()
        old_writer.wait_closed = AsyncMock()
        self.client.writer = old_writer
        self.client.config.reconnect_delay_base = 0
        closed_before_connect = []

        async def fake_connect(retry_count=None):
            closed_before_connect.append(old_writer.close.called)
            return True

        with patch.object(self.client, 'connect', side_effect=fake_connect), \
                patch.object(self.client, 'send_join', new=AsyncMock()) as join:
            self.assertTrue(await self.client._reconnect())

        self.assertEqual(closed_before_connect, [True])
        old_writer.wait_closed.assert_awaited_once()
        join.assert_awaited_once()
        self.assertIsNot(self.client.writer, old_writer)

    def test_backoff_doubles(self):
        self.assertEqual(
            [self.client.config.backoff_delay(i) for i in range(3)],
            [1.0, 2.0, 4.0]
        )


class TestClientAgainstServer(unittest.IsolatedAsyncioTestCase):
    """The console client talking to a real relay."""

    async def asyncSetUp(self):
        self.server = ChatRelayServer(ServerConfig('127.0.0.1', 0))
        await self.server.open()

    async def asyncTearDown(self):
        await self.server.close()

    async def test_join_and_echo(self):
        client = ChatRelayClient('127.0.0.1', self.server.bound_port(), 'alice')
        self.assertTrue(await client.connect())
        listener = asyncio.create_task(client.listen_for_messages())

        await client.send_join()
        await client.chat_client.send_chat("hi")

        events = []
        while not any(isinstance(e, MessageReceived) for e in events):
            events.append(await asyncio.wait_for(client.chat_client.next_event(), timeout=2.0))

        self.assertEqual(events[0], RosterUpdated(("alice",)))
        self.assertEqual(events[-1], MessageReceived(ChatMessage("alice", "hi")))

        client.running = False
        listener.cancel()
        await asyncio.gather(listener, return_exceptions=True)
        await client.close()


if __name__ == '__main__':
    unittest.main()
