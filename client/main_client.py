#!/usr/bin/env python3
"""
Chat Relay Client - command line client

Connects to the relay, joins under a display name, prints roster updates and
messages as they arrive and sends whatever is typed on stdin.
"""

import asyncio
import sys
from typing import Optional

from client.chat.chat_client import ChatClient
from client.utils.config import ClientConfig
from client.utils.logger import logger
from common.errors import ProtocolError
from common.protocol_definitions import (
    CoreEvent, decode_line, JoinAcknowledged, MessageReceived, RosterUpdated, ServerError
)


class ChatRelayClient:
    """Main client class: connection management plus a console renderer."""

    def __init__(self, host: str = 'localhost', port: int = 4000, name: str = None):
        self.config = ClientConfig(host, port, name)
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.running = False
        self.chat_client = ChatClient()

    async def connect(self, retry_count: int = None) -> bool:
        """Establish connection to the server with retry logic and exponential backoff."""
        retry_count = retry_count or self.config.retry_attempts
        attempt = 0

        while attempt < retry_count:
            try:
                self.reader, self.writer = await asyncio.wait_for(
                    asyncio.open_connection(self.config.host, self.config.port),
                    timeout=self.config.connect_timeout
                )
                logger.log_connection(self.config.host, self.config.port, True)
                self.running = True
                self.chat_client.set_writer(self.writer)
                return True
            except (OSError, asyncio.TimeoutError) as e:
                attempt += 1
                logger.log_connection(self.config.host, self.config.port, False)
                logger.log_error("connection", e)

                if attempt < retry_count:
                    delay = self.config.backoff_delay(attempt - 1)
                    logger.info(f"[INFO] Retrying connection in {delay}s (attempt {attempt}/{retry_count})...")
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"[ERROR] Failed to connect after {retry_count} attempts")
        return False

    async def send_join(self) -> bool:
        """Send the join intent for the configured name."""
        logger.show_join_info(self.config.name)
        return await self.chat_client.send_join(self.config.name)

    async def send_heartbeat(self):
        """Send periodic heartbeat messages."""
        while self.running:
            await asyncio.sleep(self.config.heartbeat_interval)
            if self.running:
                await self.chat_client.send_heartbeat()

    async def listen_for_messages(self):
        """Listen for incoming messages from server with automatic reconnection."""
        while self.running:
            try:
                data = await self.reader.readline()
                if not data:
                    logger.info("[INFO] Server closed connection, attempting to reconnect...")
                    if not await self._reconnect():
                        break
                    continue

                try:
                    self.chat_client.handle_message(decode_line(data))
                except ProtocolError as e:
                    logger.error(f"[ERROR] Bad message from server: {e}")

            except asyncio.CancelledError:
                logger.info("[INFO] Listener cancelled")
                raise
            except (ConnectionError, OSError) as e:
                logger.error(f"[ERROR] Connection lost: {e}")
                if self.running and await self._reconnect():
                    continue
                break

    async def _reconnect(self) -> bool:
        """Reconnect to the server with exponential backoff and join again."""
        await self._close_transport()

        for attempt in range(self.config.reconnect_attempts):
            delay = self.config.backoff_delay(attempt)
            logger.info(f"[INFO] Attempting to reconnect in {delay}s (attempt {attempt + 1}/{self.config.reconnect_attempts})...")
            await asyncio.sleep(delay)

            if await self.connect(retry_count=1):
                logger.info("[INFO] Reconnected successfully!")
                await self.send_join()
                return True

        logger.error("[ERROR] Failed to reconnect after multiple attempts")
        self.running = False
        return False

    def render(self, event: CoreEvent):
        """Print one core event to the console."""
        if isinstance(event, RosterUpdated):
            logger.show_roster(list(event.names))
        elif isinstance(event, MessageReceived):
            logger.show_message(event.message.author, event.message.text)
        elif isinstance(event, JoinAcknowledged):
            logger.show_join_success(event.name, event.session_id)
        elif isinstance(event, ServerError):
            logger.show_server_error(event.code, event.message)

    async def render_events(self):
        """Consume decoded events forever."""
        while True:
            self.render(await self.chat_client.next_event())

    async def handle_input(self, line: str) -> bool:
        """Act on one line typed by the user. Returns False to quit."""
        line = line.strip()
        if not line:
            return True

        if line == '/quit':
            return False
        elif line == '/who':
            await self.chat_client.request_roster()
        elif line.startswith('/name '):
            self.config.name = line[len('/name '):].strip()
            await self.send_join()
        else:
            await self.chat_client.send_chat(line)
        return True

    async def _close_transport(self):
        """Close the current connection, if any, and forget it."""
        writer, self.writer = self.writer, None
        self.chat_client.set_writer(None)
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug(f"[DEBUG] Error while closing: {e}")

    async def close(self):
        """Close the connection."""
        self.running = False
        await self._close_transport()
        logger.info("[INFO] Disconnected from server")

    async def interactive_mode(self):
        """Run client with interactive chat input."""
        if not await self.connect():
            return

        await self.send_join()

        tasks = [
            asyncio.create_task(self.send_heartbeat()),
            asyncio.create_task(self.listen_for_messages()),
            asyncio.create_task(self.render_events()),
        ]

        logger.show_interactive_mode_info()

        loop = asyncio.get_running_loop()
        try:
            while self.running:
                user_input = await loop.run_in_executor(None, sys.stdin.readline)
                if not user_input:
                    break
                if not await self.handle_input(user_input):
                    break
        finally:
            await self.chat_client.send_logout()
            self.running = False

            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

            await self.close()


async def main():
    """Main entry point."""
    if len(sys.argv) > 1:
        name = sys.argv[1]
    else:
        name = input("Enter display name: ").strip() or "anonymous"

    client = ChatRelayClient(name=name)
    await client.interactive_mode()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n[INFO] Client terminated")
