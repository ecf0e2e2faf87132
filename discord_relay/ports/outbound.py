"""Outbound ports — interfaces for the gateway reads and webhook delivery."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Tuple, runtime_checkable

from discord_relay.domain.models import ContextMessage, OutboundPayload, Role


@dataclass(frozen=True)
class MemberInfo:
    """Guild-scoped profile of a message author."""

    display_name: Optional[str]
    roles: Tuple[Role, ...] = ()


class DeliveryStatus(str, Enum):
    DELIVERED = "delivered"
    PERMANENT_FAILURE = "permanent_failure"


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one delivery sequence."""

    status: DeliveryStatus
    attempts: int
    last_error: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.status is DeliveryStatus.DELIVERED


@runtime_checkable
class GatewayPort(Protocol):
    """Lazy reads against the event source connection."""

    async def fetch_member(self, guild_id: str, user_id: str) -> Optional[MemberInfo]: ...

    async def fetch_history(
        self, channel_id: str, before_message_id: str, limit: int
    ) -> List[ContextMessage]: ...


@runtime_checkable
class WebhookPort(Protocol):
    """Interface for delivering a payload downstream."""

    async def deliver(self, payload: OutboundPayload) -> DeliveryResult: ...
