"""
Load-test configuration module.

This module defines configuration classes for different environments
(development, testing, production).  Values are loaded from environment
variables, optionally seeded from a ``.env`` file at the project root,
with sensible defaults for everything except the Dify credentials.

Key Concepts Demonstrated:
- Class-based configuration with inheritance for DRY defaults
- ``.env`` support so credentials never live in the locustfile
- Fail-fast validation into an immutable settings object
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent

# Real environment variables always win over values in ``.env``.
load_dotenv(BASE_DIR / ".env", override=False)


class ConfigurationError(RuntimeError):
    """Raised when required load-test configuration is missing or invalid."""


class Config:
    """Base configuration with default settings."""

    # Root URL of the Dify API, e.g. ``https://dify.example.com/v1``.
    DIFY_HOST: str = os.environ.get("DIFY_HOST", "")
    DIFY_APP_ID: str = os.environ.get("DIFY_APP_ID", "")
    DIFY_APP_PUBLIC_TOKEN: str = os.environ.get("DIFY_APP_PUBLIC_TOKEN", "")

    # Maximum seconds to receive the full event stream.
    REQUEST_TIMEOUT: float = float(os.environ.get("REQUEST_TIMEOUT", "30"))

    # Think time between questions, in seconds.
    THINK_TIME_MIN: float = float(os.environ.get("THINK_TIME_MIN", "2"))
    THINK_TIME_MAX: float = float(os.environ.get("THINK_TIME_MAX", "5"))

    SUMMARY_PATH: str = os.environ.get("SUMMARY_PATH", "summary.json")
    THRESHOLDS_PATH: str = os.environ.get(
        "THRESHOLDS_PATH",
        str(BASE_DIR / "loadtest" / "thresholds.yml"),
    )

    # Optional YAML list of queries replacing the built-in pool.
    QUERY_POOL_FILE: str = os.environ.get("QUERY_POOL_FILE", "")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """
    Testing environment configuration.

    Points at a non-routable host with fixed credentials so unit tests
    never need a ``.env`` file and never reach a real Dify deployment.
    """

    DEBUG: bool = True
    TESTING: bool = True

    DIFY_HOST: str = os.environ.get("TEST_DIFY_HOST", "http://dify.test")
    DIFY_APP_ID: str = os.environ.get("TEST_DIFY_APP_ID", "test-app")
    DIFY_APP_PUBLIC_TOKEN: str = os.environ.get("TEST_DIFY_APP_PUBLIC_TOKEN", "test-token")
    REQUEST_TIMEOUT: float = float(os.environ.get("TEST_REQUEST_TIMEOUT", "5"))
    THINK_TIME_MIN: float = 0.0
    THINK_TIME_MAX: float = 0.0


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG: bool = False
    TESTING: bool = False


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (development, testing, production).
             If None, uses the LOADTEST_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("LOADTEST_ENV", "development")
    return config.get(env, config["default"])


@dataclass(frozen=True)
class ChatLoadSettings:
    """Validated, immutable settings for one load-test run."""

    host: str
    app_id: str
    token: str
    request_timeout: float
    think_time_min: float
    think_time_max: float
    summary_path: Path
    thresholds_path: Path
    query_pool_file: Path | None = None


def load_settings(config_class: type[Config], *, host_override: str | None = None) -> ChatLoadSettings:
    """
    Validate a configuration class and freeze it into settings.

    Args:
        config_class: The ``Config`` subclass to read values from.
        host_override: Host given on the Locust command line (``--host``);
            takes precedence over ``DIFY_HOST``.

    Returns:
        A ``ChatLoadSettings`` instance.

    Raises:
        ConfigurationError: If the app id, token or host is missing, or
            the think-time range is inverted.
    """
    missing = [
        name
        for name in ("DIFY_APP_ID", "DIFY_APP_PUBLIC_TOKEN")
        if not getattr(config_class, name, "")
    ]
    if missing:
        raise ConfigurationError(
            f"{' and '.join(missing)} must be set in the environment or .env file"
        )

    host = (host_override or config_class.DIFY_HOST).rstrip("/")
    if not host:
        raise ConfigurationError("DIFY_HOST must be set (or pass --host)")

    if config_class.THINK_TIME_MIN > config_class.THINK_TIME_MAX:
        raise ConfigurationError("THINK_TIME_MIN must not exceed THINK_TIME_MAX")

    query_pool_file = Path(config_class.QUERY_POOL_FILE) if config_class.QUERY_POOL_FILE else None
    return ChatLoadSettings(
        host=host,
        app_id=config_class.DIFY_APP_ID,
        token=config_class.DIFY_APP_PUBLIC_TOKEN,
        request_timeout=config_class.REQUEST_TIMEOUT,
        think_time_min=config_class.THINK_TIME_MIN,
        think_time_max=config_class.THINK_TIME_MAX,
        summary_path=Path(config_class.SUMMARY_PATH),
        thresholds_path=Path(config_class.THRESHOLDS_PATH),
        query_pool_file=query_pool_file,
    )
