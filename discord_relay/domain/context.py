"""Context assembly — sender identity and a bounded channel history.

Every gateway read is best-effort: failures degrade to fallback values
and are never raised to the caller.
"""

import asyncio
import sys
from typing import List, Optional, Tuple

from discord_relay.config import MAX_CONTEXT_MESSAGES, AppConfig
from discord_relay.domain.models import ContextMessage, Identity
from discord_relay.ports.inbound import InboundEvent
from discord_relay.ports.outbound import GatewayPort, MemberInfo

LOOKUP_TIMEOUT_SECONDS = 5


def _log(msg: str):
    print(msg, file=sys.stderr)


def base_identity(event: InboundEvent) -> Identity:
    return Identity(
        user_id=event.author_id,
        username=event.author_username,
        global_name=event.author_global_name,
        discriminator=event.author_discriminator,
        is_bot=event.author_is_bot,
    )


class ContextAssembler:
    """Gathers identity and context window for a single event."""

    def __init__(
        self,
        gateway: GatewayPort,
        config: AppConfig,
        lookup_timeout: float = LOOKUP_TIMEOUT_SECONDS,
    ):
        self._gateway = gateway
        self._config = config
        self._lookup_timeout = lookup_timeout

    async def resolve_identity(self, event: InboundEvent) -> Identity:
        identity = base_identity(event)
        if not self._config.enrich_members or event.guild_id is None:
            return identity

        if event.author_roles is not None:
            member = MemberInfo(display_name=event.author_display_name, roles=event.author_roles)
        else:
            member = await self._fetch_member(event.guild_id, event.author_id)
        if member is None:
            return identity
        return Identity(
            user_id=identity.user_id,
            username=identity.username,
            global_name=identity.global_name,
            discriminator=identity.discriminator,
            is_bot=identity.is_bot,
            display_name=member.display_name,
            roles=tuple(member.roles),
        )

    async def _fetch_member(self, guild_id: str, user_id: str) -> Optional[MemberInfo]:
        try:
            return await asyncio.wait_for(
                self._gateway.fetch_member(guild_id, user_id), self._lookup_timeout
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            _log(f"[relay] member enrichment failed guild={guild_id} user={user_id}: {e!r}")
            return None

    async def resolve_context(self, event: InboundEvent) -> Tuple[ContextMessage, ...]:
        """Up to N messages before the event, oldest first."""
        limit = min(self._config.context_limit, MAX_CONTEXT_MESSAGES)
        if limit <= 0:
            return ()

        try:
            messages: List[ContextMessage] = await asyncio.wait_for(
                self._gateway.fetch_history(event.channel_id, event.message_id, limit),
                self._lookup_timeout,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            _log(f"[relay] history fetch failed ch={event.channel_id}: {e!r}")
            return ()

        newest = sorted(messages, key=lambda m: m.timestamp, reverse=True)[:limit]
        return tuple(reversed(newest))

    async def assemble(self, event: InboundEvent) -> Tuple[Identity, Tuple[ContextMessage, ...]]:
        """Identity and context window, resolved concurrently."""
        identity, context = await asyncio.gather(
            self.resolve_identity(event),
            self.resolve_context(event),
        )
        return identity, context
