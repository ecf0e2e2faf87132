"""Tests for AppConfig.from_env."""

import pytest

from discord_relay.config import (
    DEFAULT_CHAT_TRIGGERS,
    AppConfig,
    ChatTrigger,
    ConfigError,
    parse_channel_list,
    parse_chat_triggers,
)

REQUIRED = {
    "DISCORD_TOKEN": "tok",
    "WEBHOOK_URL": "https://hooks.example.com/relay",
    "SHARED_SECRET": "s3cret",
}


class TestRequired:
    def test_all_present(self):
        c = AppConfig.from_env(dict(REQUIRED))
        assert c.discord_token == "tok"
        assert c.webhook_url == "https://hooks.example.com/relay"
        assert c.shared_secret == "s3cret"

    @pytest.mark.parametrize("missing", sorted(REQUIRED))
    def test_missing_is_fatal(self, missing):
        env = {k: v for k, v in REQUIRED.items() if k != missing}
        with pytest.raises(ConfigError, match=missing):
            AppConfig.from_env(env)

    def test_blank_counts_as_missing(self):
        with pytest.raises(ConfigError):
            AppConfig.from_env({**REQUIRED, "SHARED_SECRET": "  "})

    def test_legacy_webhook_variable(self):
        env = {k: v for k, v in REQUIRED.items() if k != "WEBHOOK_URL"}
        env["N8N_WEBHOOK_URL"] = "https://n8n.example.com/webhook/discord-relay"
        assert AppConfig.from_env(env).webhook_url.startswith("https://n8n")


class TestDefaults:
    def test_defaults(self):
        c = AppConfig.from_env(dict(REQUIRED))
        assert c.allowed_channels == frozenset()
        assert c.command_prefix == "!"
        assert c.chat_triggers == DEFAULT_CHAT_TRIGGERS
        assert c.context_messages == 0
        assert c.enrich_members is True
        assert c.max_retries == 3
        assert c.health_port == 3000


class TestOptional:
    def test_overrides(self):
        c = AppConfig.from_env({
            **REQUIRED,
            "ALLOWED_CHANNELS": " 1, 2,,3 ",
            "COMMAND_PREFIX": "?",
            "CHAT_TRIGGERS": "mention, all",
            "CONTEXT_MESSAGES": "5",
            "ENRICH_MEMBERS": "off",
            "MAX_RETRIES": "1",
            "HEALTH_PORT": "8080",
        })
        assert c.allowed_channels == frozenset({"1", "2", "3"})
        assert c.command_prefix == "?"
        assert c.chat_triggers == frozenset({ChatTrigger.MENTION, ChatTrigger.ALL})
        assert c.context_messages == 5
        assert c.enrich_members is False
        assert c.max_retries == 1
        assert c.health_port == 8080

    def test_context_clamped(self):
        assert AppConfig.from_env({**REQUIRED, "CONTEXT_MESSAGES": "99"}).context_messages == 20

    def test_bad_numbers_fall_back(self):
        c = AppConfig.from_env({**REQUIRED, "MAX_RETRIES": "lots", "HEALTH_PORT": "x"})
        assert c.max_retries == 3
        assert c.health_port == 3000

    def test_negative_retries_fall_back(self):
        assert AppConfig.from_env({**REQUIRED, "MAX_RETRIES": "-2"}).max_retries == 3


class TestParsers:
    def test_channel_list(self):
        assert parse_channel_list("") == frozenset()
        assert parse_channel_list("a,b") == frozenset({"a", "b"})

    def test_unknown_trigger_skipped(self):
        assert parse_chat_triggers("DM,bogus") == frozenset({ChatTrigger.DM})

    def test_only_unknown_triggers_use_default(self):
        assert parse_chat_triggers("bogus") == DEFAULT_CHAT_TRIGGERS
