# ruff: noqa: E402
"""
Locust entrypoint for the chat load test.

This is the file that the ``locust`` CLI discovers and loads (see
:file:`locust.conf` at the project root for the default run shape:
30 users for 5 minutes, headless).  It exposes the concrete user class
and registers the run lifecycle listeners.

Usage examples::

    # Default run using locust.conf and DIFY_* settings from .env:
    locust

    # Against a local stub server:
    locust -f loadtest/locustfile.py --host http://127.0.0.1:5050 -u 5 -t 30s
"""

from __future__ import annotations

import sys
from pathlib import Path

from locust import events

# Locust may be invoked from any directory.  Inserting the project root
# onto ``sys.path`` guarantees that ``config`` and ``loadtest`` resolve.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from loadtest.listeners import on_init, on_quitting, on_test_start
from loadtest.scenarios.chat import DifyChatUser

__all__ = ["DifyChatUser"]

events.init.add_listener(on_init)
events.test_start.add_listener(on_test_start)
events.quitting.add_listener(on_quitting)
