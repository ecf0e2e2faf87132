"""Payload building: merges classification, identity and context.

Deterministic and side-effect free.
"""

import re
from typing import Optional, Sequence, Union

from discord_relay.domain.models import (
    Chat,
    ChatPayload,
    Command,
    CommandPayload,
    ContextMessage,
    ConversationKeys,
    Identity,
    OutboundPayload,
    SelfIdentity,
)
from discord_relay.ports.inbound import InboundEvent

DM_SEGMENT = "dm"


def conversation_keys(guild_id: Optional[str], channel_id: str, author_id: str) -> ConversationKeys:
    """user_key spans every channel of a guild; convo_key is per channel."""
    scope = guild_id or DM_SEGMENT
    return ConversationKeys(
        user_key=f"{scope}:{author_id}",
        convo_key=f"{scope}:{channel_id}:{author_id}",
    )


def _leading_mention_re(me: SelfIdentity) -> "re.Pattern[str]":
    return re.compile(rf"^<@!?{re.escape(me.user_id)}>\s*", re.IGNORECASE)


def clean_content(content: str, me: SelfIdentity) -> str:
    """Strip one leading self-mention token. Mid-message mentions stay."""
    return _leading_mention_re(me).sub("", content, count=1)


def build_payload(
    classification: Union[Command, Chat],
    identity: Identity,
    context: Sequence[ContextMessage],
    event: InboundEvent,
    me: SelfIdentity,
) -> OutboundPayload:
    keys = conversation_keys(event.guild_id, event.channel_id, event.author_id)
    envelope = dict(
        channel_id=event.channel_id,
        channel_name=event.channel_name,
        guild_id=event.guild_id,
        message_id=event.message_id,
        user_key=keys.user_key,
        convo_key=keys.convo_key,
        user=identity,
        timestamp=event.created_at_ms,
        attachments=tuple(event.attachments),
    )

    if isinstance(classification, Command):
        return CommandPayload(
            **envelope,
            command=classification.cmd,
            args=tuple(classification.args),
            content=event.content,
        )

    if isinstance(classification, Chat):
        return ChatPayload(
            **envelope,
            content=event.content,
            cleaned_content=clean_content(event.content, me),
            mentioned_bot=classification.mentioned_bot,
            is_dm=event.is_dm,
            context=tuple(context),
        )

    raise TypeError(f"cannot build payload for {classification!r}")
