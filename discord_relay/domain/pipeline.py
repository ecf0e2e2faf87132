"""RelayPipeline — one pass of Evaluator -> Assembler -> Builder -> Delivery.

One instance is shared by every event task; it holds only read-only
configuration and collaborators, never per-event state.
"""

import asyncio
import sys
from typing import Optional

from discord_relay.config import AppConfig
from discord_relay.domain.context import ContextAssembler
from discord_relay.domain.models import Chat, Command, Ignore, SelfIdentity
from discord_relay.domain.payload import build_payload
from discord_relay.domain.triggers import classify
from discord_relay.ports.inbound import InboundEvent
from discord_relay.ports.outbound import DeliveryResult, GatewayPort, WebhookPort


def _log(msg: str):
    print(msg, file=sys.stderr)


class RelayPipeline:
    def __init__(
        self,
        config: AppConfig,
        me: SelfIdentity,
        gateway: GatewayPort,
        webhook: WebhookPort,
    ):
        self.config = config
        self.me = me
        self._assembler = ContextAssembler(gateway, config)
        self._webhook = webhook

    async def handle(self, event: InboundEvent) -> Optional[DeliveryResult]:
        """Process one event. Never raises; returns None when nothing was sent."""
        try:
            return await self._process(event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            _log(f"[relay] handler error: msg={event.message_id} {e!r}")
            return None

    async def _process(self, event: InboundEvent) -> Optional[DeliveryResult]:
        classification = classify(event, self.config, self.me)
        if isinstance(classification, Ignore):
            return None

        if isinstance(classification, Command):
            identity = await self._assembler.resolve_identity(event)
            context = ()
        elif isinstance(classification, Chat):
            identity, context = await self._assembler.assemble(event)
        else:
            raise TypeError(f"unexpected classification {classification!r}")

        payload = build_payload(classification, identity, context, event, self.me)
        result = await self._webhook.deliver(payload)
        if result.delivered:
            _log(
                f"[relay] delivered {payload.event_type} msg={event.message_id} "
                f"(attempts={result.attempts})"
            )
        return result
