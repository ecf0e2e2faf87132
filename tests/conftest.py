"""Shared builders for relay tests."""

import pytest

from discord_relay.config import AppConfig
from discord_relay.domain.models import SelfIdentity
from discord_relay.ports.inbound import InboundEvent

BOT_USER_ID = "999"
AUTHOR_ID = "1234"
CHANNEL_ID = "200"
GUILD_ID = "50"


@pytest.fixture
def me():
    return SelfIdentity(user_id=BOT_USER_ID, username="relay")


@pytest.fixture
def config():
    return AppConfig(
        discord_token="tok",
        webhook_url="https://hooks.example.com/relay",
        shared_secret="s3cret",
    )


@pytest.fixture
def make_event():
    def _make(**overrides) -> InboundEvent:
        fields = dict(
            message_id="7000",
            channel_id=CHANNEL_ID,
            guild_id=GUILD_ID,
            author_id=AUTHOR_ID,
            author_username="alice",
            author_is_bot=False,
            content="hello there",
            created_at_ms=1_700_000_000_000,
            author_global_name="Alice",
            author_discriminator="0",
            channel_name="general",
        )
        fields.update(overrides)
        return InboundEvent(**fields)

    return _make
