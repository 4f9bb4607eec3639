#!/usr/bin/env python3
"""
Chat Relay Server - Main Entry Point

This is the main entry point for the server application.
It accepts TCP connections speaking line-delimited JSON and hands every
decoded intent to the chat server.
"""

import argparse
import asyncio
from typing import Dict, Optional

from common.errors import ChatRelayError, ProtocolError
from common.protocol_definitions import ServerError, decode_line, encode_line
from server.chat.chat_server import ChatServer
from server.chat.session_registry import SessionOutbox
from server.utils.config import ServerConfig
from server.utils.logger import logger


class ChatRelayServer:
    """Main server class: one reader task and one writer task per connection."""

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.chat_server = ChatServer()
        self.server: Optional[asyncio.AbstractServer] = None
        self.writer_tasks: Dict[int, asyncio.Task] = {}  # session_id -> writer task

    @property
    def registry(self):
        return self.chat_server.registry

    async def _pump_outbox(self, session_id: int, outbox: SessionOutbox, writer: asyncio.StreamWriter):
        """Write queued events to the socket until the outbox closes."""
        while True:
            event = await outbox.get()
            if event is None:
                break

            # Whatever else is already queued goes out in the same write
            batch = [event] + outbox.pending()
            try:
                writer.write(b''.join(encode_line(e.to_wire()) for e in batch))
                await writer.drain()
            except (ConnectionError, OSError) as e:
                logger.warning(f"Failed to deliver to session_id={session_id}: {e}")
                # Closing the transport makes the reader see EOF and clean up
                writer.close()
                break

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle individual client connection."""
        addr = writer.get_extra_info('peername')

        session_id = await self.chat_server.open_session()
        outbox = await self.chat_server.outbox_for(session_id)
        logger.log_connection(addr, session_id, self.registry.session_count())

        self.writer_tasks[session_id] = asyncio.create_task(
            self._pump_outbox(session_id, outbox, writer)
        )

        try:
            while True:
                try:
                    data = await reader.readline()
                except ValueError:
                    # Line exceeded the stream limit; the reader already dropped it
                    logger.warning(f"Message too large from session_id={session_id}")
                    error = ProtocolError('Message too large')
                    outbox.deliver(ServerError(error.code, error.message))
                    continue

                if not data:
                    break

                try:
                    message = decode_line(data, self.config.max_line_bytes)
                    if not await self.chat_server.handle(session_id, message):
                        break
                except ChatRelayError as e:
                    logger.log_rejected(session_id, e)
                    outbox.deliver(ServerError(e.code, e.message))

        except asyncio.CancelledError:
            logger.info(f"Connection cancelled for session_id={session_id}")
            raise
        except (ConnectionError, OSError) as e:
            logger.error(f"Socket error for session_id={session_id}: {e}")
        finally:
            await self.disconnect_client(session_id, writer)

    async def disconnect_client(self, session_id: int, writer: asyncio.StreamWriter):
        """Evict the session, stop its writer and close the socket."""
        await self.chat_server.close_session(session_id)

        task = self.writer_tasks.pop(session_id, None)
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug(f"Socket for session_id={session_id} closed with error: {e}")

    async def open(self) -> asyncio.AbstractServer:
        """Bind the listening socket."""
        self.server = await asyncio.start_server(
            self.handle_client,
            self.config.host,
            self.config.port,
            limit=self.config.max_line_bytes
        )

        addr = ', '.join(str(sock.getsockname()) for sock in self.server.sockets)
        logger.info(f"Server listening on {addr}")
        return self.server

    def bound_port(self) -> int:
        """Port actually bound (useful when configured with port 0)."""
        return self.server.sockets[0].getsockname()[1]

    async def close(self):
        """Stop accepting connections."""
        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()
            self.server = None

    async def start(self):
        """Start the server and serve until cancelled."""
        server = await self.open()
        async with server:
            await server.serve_forever()


def build_arg_parser() -> argparse.ArgumentParser:
    """Command line flags, defaulting to the environment."""
    defaults = ServerConfig.from_env()
    parser = argparse.ArgumentParser(description='Chat Relay Server')
    parser.add_argument('--host', type=str, default=defaults.host,
                        help=f'Host to bind to (default: {defaults.host})')
    parser.add_argument('--port', type=int, default=defaults.port,
                        help=f'TCP port (default: {defaults.port})')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: INFO)')
    return parser


def main(argv=None):
    """Parse arguments and run the server."""
    args = build_arg_parser().parse_args(argv)
    config = ServerConfig(args.host, args.port, args.log_level)
    logger.set_level(config.get_log_level())

    try:
        asyncio.run(ChatRelayServer(config).start())
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    except OSError as e:
        logger.log_error("server", e)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
