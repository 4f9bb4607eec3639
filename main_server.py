#!/usr/bin/env python3
"""
Chat Relay Server - Main Entry Point

Relays chat messages and the live roster between every connected client.

Usage:
    python main_server.py

Optional arguments:
    --host HOST           Bind address (default: $CHAT_RELAY_HOST or 0.0.0.0)
    --port PORT           TCP port (default: $CHAT_RELAY_PORT or 4000)
    --log-level LEVEL     DEBUG, INFO, WARNING or ERROR (default: INFO)
"""

if __name__ == "__main__":
    from server.main_server import main

    main()
