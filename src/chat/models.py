"""Data models for chat sessions and inbound event payloads.

Attributes are snake_case; the wire format is camelCase (``clientId``,
``lastActivity``...) and a message's author is sent as ``from``. Always
serialize with :func:`to_wire` so the aliases are applied.
"""

import time
import uuid
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Sender = Literal["client", "admin"]


def now_ms() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())


class WireModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Message(WireModel):
    """A single chat message."""

    id: str = Field(default_factory=new_id)
    sender: Sender = Field(alias="from")
    text: str
    time: int = Field(default_factory=now_ms)
    seen: bool = False


class Session(WireModel):
    """A chat thread bound to one client identity."""

    id: str = Field(default_factory=new_id)
    client_id: str
    messages: List[Message] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ms)
    last_activity: int = Field(default_factory=now_ms)

    @property
    def last_message(self) -> Optional[Message]:
        return self.messages[-1] if self.messages else None

    @property
    def unread(self) -> bool:
        """True if any client-authored message has not been seen."""
        return any(m.sender == "client" and not m.seen for m in self.messages)

    def touch(self, timestamp: int) -> None:
        # lastActivity never moves backwards
        self.last_activity = max(self.last_activity, timestamp)


class SessionSummary(WireModel):
    """Condensed view of a session for admin list views."""

    id: str
    client_id: str
    created_at: int
    last_activity: int
    last_message: Optional[Message] = None
    unread: bool = False


def summarize(session: Session) -> SessionSummary:
    """Build the list-view summary of a session."""
    return SessionSummary(
        id=session.id,
        client_id=session.client_id,
        created_at=session.created_at,
        last_activity=session.last_activity,
        last_message=session.last_message,
        unread=session.unread,
    )


def to_wire(model: BaseModel) -> Dict[str, Any]:
    """Serialize a model to a JSON-ready dict with wire aliases."""
    return model.model_dump(mode="json", by_alias=True)


# --- Inbound event payloads ---


class IdentifyClientPayload(WireModel):
    client_id: Optional[str] = None


class IdentifyAdminPayload(WireModel):
    pass


class ClientMessagePayload(WireModel):
    client_id: str = Field(min_length=1)
    text: str


class AdminMessagePayload(WireModel):
    chat_id: str = Field(min_length=1)
    text: str


class ChatRefPayload(WireModel):
    """Payload that only names a chat (mark_seen, open_chat, delete_chat)."""

    chat_id: str = Field(min_length=1)
