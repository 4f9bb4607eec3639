"""
Server package for the Chat Relay system.

This package contains all server-side functionality including:
- Session registry and roster tracking
- Broadcast fan-out of messages and roster updates
- Client connection management
- Configuration and utilities
"""
