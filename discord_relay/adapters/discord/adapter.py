"""Discord adapter — bridges discord.Client to RelayPipeline.

Converts discord.Message -> InboundEvent at the boundary and runs one
asyncio task per event. DiscordGateway serves the lazy member/history
reads the context assembler needs.
"""

import asyncio
import sys
from dataclasses import replace
from typing import List, Optional, Set, Tuple

import discord

from discord_relay.config import AppConfig
from discord_relay.domain.context import LOOKUP_TIMEOUT_SECONDS
from discord_relay.domain.models import (
    AttachmentInfo,
    ContextAuthor,
    ContextMessage,
    Role,
    SelfIdentity,
)
from discord_relay.domain.pipeline import RelayPipeline
from discord_relay.domain.triggers import needs_reply_author
from discord_relay.ports.inbound import InboundEvent
from discord_relay.ports.outbound import MemberInfo, WebhookPort


def _log(msg: str):
    print(msg, file=sys.stderr)


def _epoch_ms(message: discord.Message) -> int:
    return int(message.created_at.timestamp() * 1000)


def to_context_message(message: discord.Message) -> ContextMessage:
    return ContextMessage(
        id=str(message.id),
        author=ContextAuthor(
            id=str(message.author.id),
            username=message.author.name,
            is_bot=bool(message.author.bot),
        ),
        content=message.content or "",
        timestamp=_epoch_ms(message),
        is_reply=message.reference is not None,
    )


def _member_roles(member: discord.Member) -> Tuple[Role, ...]:
    return tuple(Role(id=str(r.id), name=r.name) for r in member.roles if not r.is_default())


def to_inbound(message: discord.Message, reply_to_author_id: Optional[str] = None) -> InboundEvent:
    """Convert a Discord message to a platform-agnostic InboundEvent."""
    author = message.author
    is_member = isinstance(author, discord.Member)
    reference = message.reference
    reply_to_message_id = None
    if reference is not None and reference.message_id is not None:
        reply_to_message_id = str(reference.message_id)

    return InboundEvent(
        message_id=str(message.id),
        channel_id=str(message.channel.id),
        guild_id=str(message.guild.id) if message.guild else None,
        author_id=str(author.id),
        author_username=author.name,
        author_is_bot=bool(author.bot),
        content=message.content or "",
        created_at_ms=_epoch_ms(message),
        author_global_name=getattr(author, "global_name", None),
        author_discriminator=getattr(author, "discriminator", None),
        channel_name=getattr(message.channel, "name", None),
        reply_to_message_id=reply_to_message_id,
        reply_to_author_id=reply_to_author_id if reply_to_message_id else None,
        attachments=tuple(
            AttachmentInfo(
                id=str(a.id),
                name=a.filename,
                url=a.url,
                content_type=a.content_type,
                size=a.size,
            )
            for a in message.attachments
        ),
        mention_ids=tuple(str(u.id) for u in message.mentions),
        author_display_name=author.display_name if is_member else None,
        author_roles=_member_roles(author) if is_member else None,
    )


async def resolve_reply_author(message: discord.Message) -> Optional[str]:
    """Author ID of the referenced message, fetched lazily if not cached."""
    reference = message.reference
    if reference is None or reference.message_id is None:
        return None
    resolved = reference.resolved
    if isinstance(resolved, discord.Message):
        return str(resolved.author.id)
    if isinstance(resolved, discord.DeletedReferencedMessage):
        return None
    try:
        referenced = await message.channel.fetch_message(reference.message_id)
    except discord.HTTPException as e:
        _log(f"[discord] reply lookup failed msg={reference.message_id}: {e}")
        return None
    return str(referenced.author.id)


class DiscordGateway:
    """GatewayPort implementation using discord.Client caches and REST."""

    def __init__(self, client: discord.Client):
        self._client = client

    async def fetch_member(self, guild_id: str, user_id: str) -> Optional[MemberInfo]:
        guild = self._client.get_guild(int(guild_id))
        if guild is None:
            return None
        member = guild.get_member(int(user_id)) or await guild.fetch_member(int(user_id))
        return MemberInfo(
            display_name=member.display_name,
            roles=_member_roles(member),
        )

    async def fetch_history(
        self, channel_id: str, before_message_id: str, limit: int
    ) -> List[ContextMessage]:
        channel = self._client.get_channel(int(channel_id))
        if channel is None:
            channel = await self._client.fetch_channel(int(channel_id))
        before = discord.Object(id=int(before_message_id))
        return [
            to_context_message(m)
            async for m in channel.history(limit=limit, before=before)
        ]


class RelayBot(discord.Client):
    """Gateway client that relays every new message through RelayPipeline."""

    def __init__(self, config: AppConfig, webhook: WebhookPort, **discord_kwargs):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents, **discord_kwargs)
        self.config = config
        self._webhook = webhook
        self.gateway = DiscordGateway(self)
        self.pipeline: Optional[RelayPipeline] = None
        self._event_tasks: Set[asyncio.Task] = set()

    async def on_ready(self):
        if self.pipeline is not None:
            return
        me = SelfIdentity(user_id=str(self.user.id), username=self.user.name)
        self.pipeline = RelayPipeline(self.config, me, self.gateway, self._webhook)
        _log(f"[discord] logged in as {self.user}")

    async def on_message(self, message: discord.Message):
        # Events before self-identity is known cannot be classified
        if self.pipeline is None:
            return
        task = asyncio.create_task(self._relay(message))
        self._event_tasks.add(task)
        task.add_done_callback(self._event_tasks.discard)

    async def _relay(self, message: discord.Message):
        try:
            event = to_inbound(message)
            if needs_reply_author(event, self.config, self.pipeline.me):
                reply_author = await self._lookup_reply_author(message)
                event = replace(event, reply_to_author_id=reply_author)
        except Exception as e:
            _log(f"[relay] handler error: msg={message.id} {e!r}")
            return
        await self.pipeline.handle(event)

    async def _lookup_reply_author(self, message: discord.Message) -> Optional[str]:
        try:
            return await asyncio.wait_for(resolve_reply_author(message), LOOKUP_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            _log(f"[discord] reply lookup timed out msg={message.id}")
            return None

    @property
    def in_flight(self) -> int:
        return len(self._event_tasks)

    async def close(self):
        await super().close()
        # In-flight deliveries are abandoned, not drained
        for task in list(self._event_tasks):
            task.cancel()
