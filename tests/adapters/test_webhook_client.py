"""Unit tests for WebhookClient delivery and retry."""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from discord_relay.adapters.webhook.client import WebhookClient
from discord_relay.config import SHARED_SECRET_HEADER
from discord_relay.domain.models import Command, Identity
from discord_relay.domain.payload import build_payload
from discord_relay.ports.outbound import DeliveryStatus

URL = "https://hooks.example.com/relay"


def _mock_aiohttp_session(outcomes):
    """Return a stand-in for aiohttp.ClientSession.

    outcomes: list consumed in order by successive post() calls; an int is
    a response status, an exception instance is raised on entry.
    """
    calls = []
    sessions = []

    class FakeResponse:
        def __init__(self, outcome):
            self._outcome = outcome

        async def __aenter__(self):
            if isinstance(self._outcome, BaseException):
                raise self._outcome
            self.status = self._outcome
            return self

        async def __aexit__(self, *args):
            pass

    class FakeSession:
        def __init__(self, **kwargs):
            self.kwargs = kwargs
            sessions.append(self)

        def post(self, url, **kwargs):
            calls.append((url, kwargs))
            return FakeResponse(outcomes[len(calls) - 1])

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            pass

    FakeSession.calls = calls
    FakeSession.sessions = sessions
    return FakeSession


@pytest.fixture
def payload(make_event, me):
    identity = Identity(
        user_id="1234", username="alice", global_name=None, discriminator="0", is_bot=False
    )
    return build_payload(Command("ping", ("a",)), identity, (), make_event(content="!ping a"), me)


def _client(max_retries=3):
    sleep = AsyncMock()
    return WebhookClient(URL, "s3cret", max_retries=max_retries, sleep=sleep), sleep


class TestDeliver:
    @pytest.mark.asyncio
    async def test_first_attempt_success(self, payload):
        session = _mock_aiohttp_session([204])
        client, sleep = _client()
        with patch("discord_relay.adapters.webhook.client.aiohttp.ClientSession", session):
            result = await client.deliver(payload)

        assert result.status is DeliveryStatus.DELIVERED
        assert result.attempts == 1
        assert result.last_error is None
        sleep.assert_not_awaited()

        url, kwargs = session.calls[0]
        assert url == URL
        assert kwargs["headers"][SHARED_SECRET_HEADER] == "s3cret"
        assert kwargs["headers"]["Content-Type"] == "application/json"
        body = json.loads(kwargs["data"])
        assert body["event_type"] == "command"
        assert body["command"] == "ping"

    @pytest.mark.asyncio
    async def test_succeeds_on_fourth_attempt(self, payload):
        session = _mock_aiohttp_session([
            500,
            aiohttp.ClientConnectionError("refused"),
            asyncio.TimeoutError(),
            200,
        ])
        client, sleep = _client(max_retries=3)
        with patch("discord_relay.adapters.webhook.client.aiohttp.ClientSession", session):
            result = await client.deliver(payload)

        assert result.delivered
        assert result.attempts == 4
        assert len(session.calls) == 4
        assert [c.args[0] for c in sleep.await_args_list] == [2.0, 4.0, 6.0]

    @pytest.mark.asyncio
    async def test_permanent_failure(self, payload):
        session = _mock_aiohttp_session([502, 502, 502, 503, 200])
        client, sleep = _client(max_retries=3)
        with patch("discord_relay.adapters.webhook.client.aiohttp.ClientSession", session):
            result = await client.deliver(payload)

        assert result.status is DeliveryStatus.PERMANENT_FAILURE
        assert result.attempts == 4
        assert result.last_error == "HTTP 503"
        # No fifth attempt and no trailing backoff
        assert len(session.calls) == 4
        assert sleep.await_count == 3

    @pytest.mark.asyncio
    async def test_backoff_capped(self, payload):
        session = _mock_aiohttp_session([500] * 6)
        client, sleep = _client(max_retries=5)
        with patch("discord_relay.adapters.webhook.client.aiohttp.ClientSession", session):
            result = await client.deliver(payload)

        assert not result.delivered
        assert [c.args[0] for c in sleep.await_args_list] == [2.0, 4.0, 6.0, 8.0, 8.0]

    @pytest.mark.asyncio
    async def test_zero_retries(self, payload):
        session = _mock_aiohttp_session([500])
        client, sleep = _client(max_retries=0)
        with patch("discord_relay.adapters.webhook.client.aiohttp.ClientSession", session):
            result = await client.deliver(payload)

        assert result.attempts == 1
        assert not result.delivered
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_session_timeout(self, payload):
        session = _mock_aiohttp_session([200])
        client, _ = _client()
        with patch("discord_relay.adapters.webhook.client.aiohttp.ClientSession", session):
            await client.deliver(payload)

        assert session.sessions[0].kwargs["timeout"].total == 10


class TestFromConfig:
    def test_from_config(self, config):
        client = WebhookClient.from_config(config)
        assert client.url == config.webhook_url
        assert client.policy.total_attempts == config.max_retries + 1
        assert client.headers[SHARED_SECRET_HEADER] == config.shared_secret
