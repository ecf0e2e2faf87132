"""Port interfaces (Hexagonal Architecture)."""

from discord_relay.ports.inbound import AttachmentInfo, InboundEvent
from discord_relay.ports.outbound import (
    DeliveryResult,
    DeliveryStatus,
    GatewayPort,
    MemberInfo,
    WebhookPort,
)

__all__ = [
    "AttachmentInfo",
    "InboundEvent",
    "DeliveryResult",
    "DeliveryStatus",
    "GatewayPort",
    "MemberInfo",
    "WebhookPort",
]
