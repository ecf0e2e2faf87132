"""Trigger evaluation — decides command vs. chat vs. ignore.

Pure Python, no framework dependencies.
"""

from typing import Tuple

from discord_relay.config import AppConfig, ChatTrigger
from discord_relay.domain.models import Chat, Classification, Command, Ignore, SelfIdentity
from discord_relay.ports.inbound import InboundEvent


def parse_command(content: str, prefix: str) -> Tuple[str, Tuple[str, ...]]:
    """Split a prefixed message into (cmd, args)."""
    tokens = content[len(prefix):].split()
    if not tokens:
        return "", ()
    return tokens[0], tuple(tokens[1:])


def is_self_mentioned(event: InboundEvent, me: SelfIdentity) -> bool:
    return me.user_id in event.mention_ids


def is_reply_to_self(event: InboundEvent, me: SelfIdentity) -> bool:
    return event.reply_to_message_id is not None and event.reply_to_author_id == me.user_id


def classify(event: InboundEvent, config: AppConfig, me: SelfIdentity) -> Classification:
    """Classify an inbound event. First matching rule wins."""
    if event.author_is_bot:
        return Ignore("bot author")

    if config.allowed_channels and event.channel_id not in config.allowed_channels:
        return Ignore("channel not allowed")

    if config.command_prefix and event.content.startswith(config.command_prefix):
        cmd, args = parse_command(event.content, config.command_prefix)
        return Command(cmd=cmd, args=args)

    triggers = config.chat_triggers
    mentioned = is_self_mentioned(event, me)

    if ChatTrigger.ALL in triggers:
        return Chat(mentioned_bot=mentioned)
    if ChatTrigger.DM in triggers and event.is_dm:
        return Chat(mentioned_bot=mentioned)
    if ChatTrigger.MENTION in triggers and mentioned:
        return Chat(mentioned_bot=True)
    if ChatTrigger.REPLY in triggers and is_reply_to_self(event, me):
        return Chat(mentioned_bot=mentioned)
    return Ignore("no trigger matched")


def needs_reply_author(event: InboundEvent, config: AppConfig, me: SelfIdentity) -> bool:
    """True when classification would be decided by the REPLY rule.

    ``event`` is the snapshot taken before the referenced author is known.
    """
    if event.reply_to_message_id is None or event.author_is_bot:
        return False
    if config.allowed_channels and event.channel_id not in config.allowed_channels:
        return False
    if config.command_prefix and event.content.startswith(config.command_prefix):
        return False

    triggers = config.chat_triggers
    if ChatTrigger.REPLY not in triggers or ChatTrigger.ALL in triggers:
        return False
    if ChatTrigger.DM in triggers and event.is_dm:
        return False
    if ChatTrigger.MENTION in triggers and is_self_mentioned(event, me):
        return False
    return True
