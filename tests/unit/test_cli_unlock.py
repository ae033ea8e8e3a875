"""
Unit tests for the CLI's remote lock override.
"""

import json

import httpx
import pytest

from src.cli.vigilant_cli import request_remote_unlock
from src.core.domain import OverrideActor


def _transport(seen, status_code=200, lock_state="unlocked"):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status_code, json={"lock_state": lock_state})

    return httpx.MockTransport(handler)


class TestRemoteUnlock:
    def test_posts_actor_to_api(self):
        seen = []

        state = request_remote_unlock("http://vigilant.test", "guardian", transport=_transport(seen))

        assert state == "unlocked"
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/api/lock/unlock"
        assert json.loads(seen[0].content) == {"actor": "guardian"}

    def test_default_actor_is_user(self):
        seen = []

        request_remote_unlock("http://vigilant.test", transport=_transport(seen))

        assert json.loads(seen[0].content) == {"actor": OverrideActor.USER.value}

    def test_server_error_raises(self):
        with pytest.raises(httpx.HTTPStatusError):
            request_remote_unlock("http://vigilant.test", transport=_transport([], status_code=500))

    def test_unknown_actor_rejected_before_request(self):
        seen = []

        with pytest.raises(ValueError):
            request_remote_unlock("http://vigilant.test", "stranger", transport=_transport(seen))
        assert seen == []
