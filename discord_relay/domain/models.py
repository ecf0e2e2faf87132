"""Domain data models — pure Python dataclasses."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class AttachmentInfo:
    id: str
    name: str
    url: str
    content_type: Optional[str] = None
    size: int = 0


@dataclass(frozen=True)
class SelfIdentity:
    """Who the relay is on the platform. Discovered once after login."""

    user_id: str
    username: str


@dataclass(frozen=True)
class Role:
    id: str
    name: str


@dataclass(frozen=True)
class Identity:
    """Sender identity.

    display_name/roles are always present: None/() when enrichment was
    skipped or failed.
    """

    user_id: str
    username: str
    global_name: Optional[str]
    discriminator: Optional[str]
    is_bot: bool
    display_name: Optional[str] = None
    roles: Tuple[Role, ...] = ()


@dataclass(frozen=True)
class ConversationKeys:
    user_key: str
    convo_key: str


@dataclass(frozen=True)
class ContextAuthor:
    id: str
    username: str
    is_bot: bool


@dataclass(frozen=True)
class ContextMessage:
    """One prior channel message, reduced for the context window."""

    id: str
    author: ContextAuthor
    content: str
    timestamp: int
    is_reply: bool = False


# Classification results


@dataclass(frozen=True)
class Ignore:
    reason: str = ""


@dataclass(frozen=True)
class Command:
    cmd: str
    args: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Chat:
    mentioned_bot: bool = False


Classification = Union[Ignore, Command, Chat]


# Outbound payloads


@dataclass(frozen=True)
class _Envelope:
    channel_id: str
    channel_name: Optional[str]
    guild_id: Optional[str]
    message_id: str
    user_key: str
    convo_key: str
    user: Identity
    timestamp: int
    attachments: Tuple[AttachmentInfo, ...]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["attachments"] = list(data["attachments"])
        data["user"]["roles"] = list(data["user"]["roles"])
        return {"event_type": self.event_type, **data}


@dataclass(frozen=True)
class CommandPayload(_Envelope):
    command: str = ""
    args: Tuple[str, ...] = ()
    content: str = ""

    event_type = "command"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["args"] = list(self.args)
        return data


@dataclass(frozen=True)
class ChatPayload(_Envelope):
    content: str = ""
    cleaned_content: str = ""
    mentioned_bot: bool = False
    is_dm: bool = False
    context: Tuple[ContextMessage, ...] = field(default_factory=tuple)

    event_type = "chat"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["context"] = list(data["context"])
        return data


OutboundPayload = Union[CommandPayload, ChatPayload]
