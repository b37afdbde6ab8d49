"""Chat module: sessions, routing and expiry."""

from .errors import ChatError, ChatNotFoundError, InvalidPayloadError
from .models import Message, Session, SessionSummary, summarize, to_wire
from .router import MessageRouter
from .store import SessionStore
from .sweeper import ExpirySweeper

__all__ = [
    "ChatError",
    "ChatNotFoundError",
    "InvalidPayloadError",
    "Message",
    "Session",
    "SessionSummary",
    "summarize",
    "to_wire",
    "MessageRouter",
    "SessionStore",
    "ExpirySweeper",
]
