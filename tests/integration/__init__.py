"""
Integration test package.

Tests here start the stub chat server (in-process via the Flask test
client, or live in a background thread) and demonstrate:
- SSE stream contract checks
- Conversation continuity over real HTTP
- Failure accounting for rejected requests
"""
