"""Inbound port — platform-agnostic message event."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from discord_relay.domain.models import AttachmentInfo, Role


@dataclass(frozen=True)
class InboundEvent:
    """Immutable snapshot of one newly created message.

    Built once by the gateway adapter; every optional field is an explicit
    None rather than a missing attribute.
    """

    message_id: str
    channel_id: str
    guild_id: Optional[str]
    author_id: str
    author_username: str
    author_is_bot: bool
    content: str
    created_at_ms: int
    author_global_name: Optional[str] = None
    author_discriminator: Optional[str] = None
    channel_name: Optional[str] = None
    reply_to_message_id: Optional[str] = None
    reply_to_author_id: Optional[str] = None
    attachments: Tuple[AttachmentInfo, ...] = ()
    mention_ids: Tuple[str, ...] = field(default_factory=tuple)
    # Guild profile carried by the message itself; None when not delivered
    author_display_name: Optional[str] = None
    author_roles: Optional[Tuple[Role, ...]] = None

    @property
    def is_dm(self) -> bool:
        return self.guild_id is None
