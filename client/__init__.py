"""
Client package for the Chat Relay system.

This package contains the reference presentation client:
- Chat protocol client
- Command-line and PyQt6 user interfaces
- Configuration and utilities
"""
