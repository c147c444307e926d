"""
End-to-end tests: Locust chat users against a live stub server.

Runs real iterations of :class:`DifyChatUser` over HTTP, without starting the
Locust runner, to check that conversation ids picked up from a real
event stream are carried on later requests.
"""

from __future__ import annotations

from dataclasses import replace

import pytest
from gevent import monkey
from locust.env import Environment

from loadtest.context import attach_context
from loadtest.scenarios.chat import DifyChatUser

pytestmark = pytest.mark.integration


@pytest.fixture
def live_environment(live_stub_server, run_context):
    """Environment whose run context points at the live stub."""
    run_context.settings = replace(run_context.settings, host=live_stub_server)

    class LiveChatUser(DifyChatUser):
        host = live_stub_server

    env = Environment(user_classes=[LiveChatUser], host=live_stub_server)
    # The runner wires request events into env.stats; it is never started.
    env.create_local_runner()
    attach_context(env, run_context)
    return env, LiveChatUser


def test_gevent_patches_ssl_before_http_clients_load():
    """Locust must patch ssl before requests imports it, or HTTPS recurses."""
    assert monkey.is_module_patched("ssl")
    assert monkey.is_module_patched("socket")


def test_user_keeps_one_conversation_across_iterations(live_environment, metrics):
    # Arrange
    env, user_class = live_environment
    user = user_class(env)
    user.on_start()

    # Act
    user.chat()
    first_id = user.state.conversation_id
    user.chat()
    user.chat()

    # Assert
    assert first_id is not None and first_id.startswith("test-conv-")
    assert user.state.conversation_id == first_id
    assert metrics.successful_chat_interactions == 3
    assert metrics.conversations_started == 1
    assert env.stats.get("Chat with Dify App", "POST").num_requests == 3
    assert env.stats.total.num_failures == 0


def test_users_get_separate_conversations(live_environment):
    # Arrange
    env, user_class = live_environment
    first, second = user_class(env), user_class(env)
    first.on_start()
    second.on_start()

    # Act
    first.chat()
    second.chat()

    # Assert
    assert first.state.conversation_id != second.state.conversation_id


def test_wrong_token_counts_as_failure(live_environment, run_context, metrics):
    # Arrange
    env, user_class = live_environment
    run_context.settings = replace(run_context.settings, token="wrong-token")
    user = user_class(env)
    user.on_start()

    # Act
    user.chat()

    # Assert
    assert metrics.failed_chat_interactions == 1
    assert user.state.conversation_id is None
    assert env.stats.total.num_failures == 1
