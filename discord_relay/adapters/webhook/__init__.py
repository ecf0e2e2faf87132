from discord_relay.adapters.webhook.client import WebhookClient

__all__ = ["WebhookClient"]
