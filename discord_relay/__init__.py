"""Forward classified Discord messages to a webhook."""

from discord_relay.config import AppConfig, ChatTrigger, ConfigError, __version__

__all__ = ["AppConfig", "ChatTrigger", "ConfigError", "__version__"]
