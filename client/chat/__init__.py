"""
Chat module for client-side messaging functionality.

Encodes join and chat intents and decodes roster and message events.
"""
