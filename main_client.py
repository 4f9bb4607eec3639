#!/usr/bin/env python3
"""
Chat Relay Client - Main Entry Point

Usage:
    python main_client.py [--name NAME] [--server-ip HOST] [--port PORT] [--cli]

Modes:
    (default)    Launch with PyQt6 GUI
    --cli        Launch with command-line interface
"""

import sys
import os
import argparse

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def run_gui_client(name: str = None, server_host: str = 'localhost', server_port: int = 4000):
    """Run the GUI client."""
    try:
        from client.ui.client_gui import ClientMainWindow
        from PyQt6.QtWidgets import QApplication
    except ImportError:
        print("[ERROR] PyQt6 not installed. Install with: pip install PyQt6")
        sys.exit(1)

    app = QApplication(sys.argv)

    window = ClientMainWindow(server_host, server_port)
    window.username = name
    window.show()

    # The name is confirmed in the login dialog
    if not window.connect_to_server():
        sys.exit(1)

    sys.exit(app.exec())


def run_cli_client(name: str = None, server_host: str = 'localhost', server_port: int = 4000):
    """Run the CLI client."""
    import asyncio
    from client.main_client import ChatRelayClient

    while not name:
        name = input("Enter display name: ").strip()

    client = ChatRelayClient(host=server_host, port=server_port, name=name)

    try:
        asyncio.run(client.interactive_mode())
    except KeyboardInterrupt:
        print("\n[INFO] Interrupted by user")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Chat Relay Client')
    parser.add_argument('--name', type=str, default=None,
                        help='Display name (default: asked at startup)')
    parser.add_argument('--server-ip', type=str, default='localhost',
                        help='Server IP address (default: localhost)')
    parser.add_argument('--port', type=int, default=4000,
                        help='Server port (default: 4000)')
    parser.add_argument('--cli', action='store_true',
                        help='Run in command-line mode (GUI is default)')

    args = parser.parse_args()

    if args.cli:
        run_cli_client(args.name, args.server_ip, args.port)
    else:
        run_gui_client(args.name, args.server_ip, args.port)


if __name__ == "__main__":
    main()
