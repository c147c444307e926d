"""
Fixtures for integration tests against the stub chat server.

Provides the stub Flask app, its in-process test client, and a live
server running in a background thread for end-to-end Locust user runs.

Key Concepts Demonstrated:
- Flask test client for fast, network-free endpoint tests
- Live server fixture with a health poll instead of a fixed sleep
"""

from __future__ import annotations

import socket
import threading
import time
from collections.abc import Generator

import pytest
import requests

from stub_server import create_app


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def wait_for_stub_healthy(url: str, timeout: int = 15, interval: float = 0.2) -> None:
    """Poll the stub's health endpoint until ready or timeout."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            response = requests.get(f"{url}/health", timeout=2)
            if response.status_code == 200:
                return
        except requests.RequestException:
            pass
        time.sleep(interval)
    raise RuntimeError(f"Stub chat server at {url} not healthy after {timeout}s")


@pytest.fixture(scope="session")
def stub_app():
    """Stub chat app with the testing configuration."""
    return create_app("testing")


@pytest.fixture(scope="function")
def stub_client(stub_app):
    """Flask test client scoped to a single test function."""
    with stub_app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="session")
def live_stub_server(stub_app) -> Generator[str, None, None]:
    """
    Start the stub chat server in a background thread.

    Yields:
        str: Base URL of the running server.
    """
    host = "127.0.0.1"
    port = _free_port()

    server_thread = threading.Thread(
        target=lambda: stub_app.run(host=host, port=port, use_reloader=False, threaded=True)
    )
    server_thread.daemon = True
    server_thread.start()

    base_url = f"http://{host}:{port}"
    wait_for_stub_healthy(base_url)

    yield base_url

    # Server stops when the test session ends (daemon thread)
