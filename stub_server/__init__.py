"""
Stub Chat Server — Application Factory.

A small Flask application that imitates a Dify chat app's
``POST /chat-messages`` endpoint, streaming ``text/event-stream``
answers that carry a ``conversation_id``.  Point the load test at it
for dry runs and integration tests without touching a real deployment.
"""

from __future__ import annotations

import logging

from flask import Flask

from stub_server.config import get_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None) -> Flask:
    """
    Construct and configure the stub Flask application.

    Args:
        config_name: Optional environment key ("development", "testing",
            "production").  When *None*, the FLASK_ENV environment
            variable is consulted, defaulting to "development".

    Returns:
        A configured Flask application with the chat blueprint registered.
    """
    app = Flask(__name__)
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    logger.info("Creating stub chat app with config: %s", config_class.__name__)

    from stub_server.routes import chat_bp

    app.register_blueprint(chat_bp)
    return app
