"""
Chat module for server-side messaging functionality.

Handles:
- Session admission, naming and eviction
- Roster broadcasting
- Message fan-out
"""
