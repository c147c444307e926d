"""
Locust scenario user classes.

- :mod:`.base` — abstract :class:`ChatApiUser` with the chat primitive
- :mod:`.chat` — :class:`DifyChatUser`, a multi-turn conversation
"""
