"""Configuration loaded from the environment."""

__version__ = "0.1.0"

import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Mapping, Optional

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)

SHARED_SECRET_HEADER = "X-Discord-Relay"
REQUEST_TIMEOUT_SECONDS = 10
MAX_CONTEXT_MESSAGES = 20


class ConfigError(Exception):
    """Raised when a required setting is missing."""


class ChatTrigger(str, Enum):
    MENTION = "MENTION"
    DM = "DM"
    REPLY = "REPLY"
    ALL = "ALL"


DEFAULT_CHAT_TRIGGERS = frozenset({ChatTrigger.MENTION, ChatTrigger.DM, ChatTrigger.REPLY})


def parse_channel_list(raw: str) -> FrozenSet[str]:
    """Comma-separated channel IDs -> set, blanks dropped."""
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def parse_chat_triggers(raw: str) -> FrozenSet[ChatTrigger]:
    names = [part.strip().upper() for part in raw.split(",") if part.strip()]
    if not names:
        return DEFAULT_CHAT_TRIGGERS
    triggers = set()
    for name in names:
        try:
            triggers.add(ChatTrigger(name))
        except ValueError:
            _stderr_print(f"Unknown chat trigger {name!r}, ignoring")
    return frozenset(triggers) if triggers else DEFAULT_CHAT_TRIGGERS


def _parse_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _stderr_print(f"Invalid {key}={raw!r}, falling back to {default}")
        return default


def _parse_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AppConfig:
    """Typed relay configuration. Read-only once the process has started."""

    discord_token: str = ""
    webhook_url: str = ""
    shared_secret: str = ""
    allowed_channels: FrozenSet[str] = field(default_factory=frozenset)
    command_prefix: str = "!"
    chat_triggers: FrozenSet[ChatTrigger] = DEFAULT_CHAT_TRIGGERS
    context_messages: int = 0
    enrich_members: bool = True
    max_retries: int = 3
    health_port: int = 3000

    @property
    def context_limit(self) -> int:
        return max(0, min(self.context_messages, MAX_CONTEXT_MESSAGES))

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Create AppConfig from environment variables.

        Raises ConfigError listing every missing required variable.
        """
        env = os.environ if env is None else env

        token = env.get("DISCORD_TOKEN", "").strip()
        webhook_url = (env.get("WEBHOOK_URL") or env.get("N8N_WEBHOOK_URL") or "").strip()
        secret = env.get("SHARED_SECRET", "").strip()

        missing: List[str] = []
        if not token:
            missing.append("DISCORD_TOKEN")
        if not webhook_url:
            missing.append("WEBHOOK_URL")
        if not secret:
            missing.append("SHARED_SECRET")
        if missing:
            raise ConfigError(f"Missing required env: {', '.join(missing)}")

        max_retries = _parse_int(env, "MAX_RETRIES", 3)
        if max_retries < 0:
            _stderr_print(f"Invalid MAX_RETRIES={max_retries}, falling back to 3")
            max_retries = 3

        context_messages = _parse_int(env, "CONTEXT_MESSAGES", 0)
        if context_messages > MAX_CONTEXT_MESSAGES:
            _stderr_print(
                f"CONTEXT_MESSAGES={context_messages} exceeds {MAX_CONTEXT_MESSAGES}, clamping"
            )
        context_messages = max(0, min(context_messages, MAX_CONTEXT_MESSAGES))

        return cls(
            discord_token=token,
            webhook_url=webhook_url,
            shared_secret=secret,
            allowed_channels=parse_channel_list(env.get("ALLOWED_CHANNELS", "")),
            command_prefix=env.get("COMMAND_PREFIX") or "!",
            chat_triggers=parse_chat_triggers(env.get("CHAT_TRIGGERS", "")),
            context_messages=context_messages,
            enrich_members=_parse_bool(env, "ENRICH_MEMBERS", True),
            max_retries=max_retries,
            health_port=_parse_int(env, "HEALTH_PORT", 3000),
        )
