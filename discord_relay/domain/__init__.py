"""Domain layer — pure Python, no framework dependencies."""

from discord_relay.domain.models import (
    Chat,
    ChatPayload,
    Classification,
    Command,
    CommandPayload,
    ContextMessage,
    ConversationKeys,
    Identity,
    Ignore,
    OutboundPayload,
    Role,
    SelfIdentity,
)

__all__ = [
    "Chat",
    "ChatPayload",
    "Classification",
    "Command",
    "CommandPayload",
    "ContextMessage",
    "ConversationKeys",
    "Identity",
    "Ignore",
    "OutboundPayload",
    "Role",
    "SelfIdentity",
]
