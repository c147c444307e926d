"""
Stub Chat Server — Configuration.

Defines environment-specific configuration classes for the local stub
that stands in for a Dify chat app during dry runs and integration
tests.  The ``get_config`` factory selects the right class based on the
``FLASK_ENV`` environment variable (or an explicit key).
"""

from __future__ import annotations

import os


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in {"1", "true", "yes"}


class Config:
    """
    Base (shared) configuration for the stub server.

    All environment-specific classes inherit from ``Config`` so that
    common defaults only need to be stated once.
    """

    # Bearer token clients must present; matches DIFY_APP_PUBLIC_TOKEN.
    STUB_API_TOKEN: str = os.environ.get("STUB_API_TOKEN", "stub-token")

    # New conversation ids look like ``<prefix>-<uuid4 hex>``.
    STUB_CONVERSATION_PREFIX: str = os.environ.get("STUB_CONVERSATION_PREFIX", "conv")

    # Number of ``message`` chunks streamed per answer.
    STUB_MESSAGE_CHUNKS: int = int(os.environ.get("STUB_MESSAGE_CHUNKS", "3"))

    # Emit an ``event: ping`` block before the first data block.
    STUB_EMIT_PING: bool = _flag("STUB_EMIT_PING", "true")

    # Emit one non-JSON ``data:`` block ahead of the real ones.
    STUB_EMIT_MALFORMED_BLOCK: bool = _flag("STUB_EMIT_MALFORMED_BLOCK", "false")


class DevelopmentConfig(Config):
    """Development-oriented overrides."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """
    Test-suite overrides.

    Uses a fixed token and prefix so assertions do not depend on the
    caller's environment.
    """

    DEBUG: bool = True
    TESTING: bool = True
    STUB_API_TOKEN: str = "test-token"
    STUB_CONVERSATION_PREFIX: str = "test-conv"
    STUB_EMIT_MALFORMED_BLOCK: bool = True


class ProductionConfig(Config):
    """Non-debug settings for longer soak runs against the stub."""

    DEBUG: bool = False
    TESTING: bool = False


# Lookup table mapping environment name strings to their config classes.
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Return the configuration class for the given environment.

    Args:
        env: One of ``"development"``, ``"testing"``, or
            ``"production"``.  When *None*, the ``FLASK_ENV``
            environment variable is consulted, falling back to
            ``"development"`` if unset.

    Returns:
        The ``Config`` subclass matching the requested environment,
        or ``DevelopmentConfig`` if the key is unrecognised.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
