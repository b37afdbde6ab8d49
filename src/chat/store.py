"""In-memory session store.

All sessions live in process memory and disappear on restart. Every method
runs to completion without awaiting. Callers that mutate and then send
notifications hold ``lock`` across both steps so that notifications leave
in mutation order.
"""

import asyncio
from typing import Callable, Dict, List, Optional

from .models import Message, Sender, Session, now_ms
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SessionStore:
    """Maps chat session ids to sessions."""

    def __init__(self, clock: Callable[[], int] = now_ms):
        """
        Initialize an empty store.

        Args:
            clock: Callable returning the current time in milliseconds
        """
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        # 变更 + 通知 作为一个整体串行执行
        self.lock = asyncio.Lock()

    def now(self) -> int:
        return self._clock()

    def find_by_client_id(self, client_id: str) -> Optional[Session]:
        """
        Find the open session of a client identity.

        Args:
            client_id: External client identity

        Returns:
            The session or None
        """
        for session in self._sessions.values():
            if session.client_id == client_id:
                return session
        return None

    def get_or_create(self, client_id: str) -> Session:
        """
        Return the client's session, creating an empty one if needed.

        Args:
            client_id: External client identity

        Returns:
            Existing or newly created session
        """
        session = self.find_by_client_id(client_id)
        if session is None:
            timestamp = self.now()
            session = Session(
                client_id=client_id,
                created_at=timestamp,
                last_activity=timestamp,
            )
            self._sessions[session.id] = session
            logger.info(f"新会话 {session.id} (client: {client_id})")
        return session

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> Optional[Session]:
        """
        Remove a session.

        Args:
            session_id: Session identifier

        Returns:
            The removed session, or None if it did not exist
        """
        session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.info(f"会话 {session_id} 已删除")
        return session

    def list_all(self) -> List[Session]:
        return list(self._sessions.values())

    def append_message(self, session: Session, sender: Sender, text: str) -> Message:
        """
        Append a message to a session and bump its activity.

        Args:
            session: Target session
            sender: "client" or "admin"
            text: Message body

        Returns:
            The new message
        """
        timestamp = self.now()
        message = Message(sender=sender, text=text, time=timestamp)
        session.messages.append(message)
        session.touch(timestamp)
        logger.debug(f"[会话 {session.id}] {sender} 消息 {message.id}")
        return message

    def mark_seen(self, session: Session) -> int:
        """
        Mark every client-authored message as seen.

        Admin messages are left alone. Re-applying is harmless.

        Returns:
            Number of messages that flipped from unseen to seen
        """
        flipped = 0
        for message in session.messages:
            if message.sender == "client" and not message.seen:
                message.seen = True
                flipped += 1
        session.touch(self.now())
        return flipped

    def idle_sessions(self, idle_ms: int, now: Optional[int] = None) -> List[Session]:
        """Sessions whose last activity is more than ``idle_ms`` ago."""
        if now is None:
            now = self.now()
        return [s for s in self._sessions.values() if now - s.last_activity > idle_ms]

    def clear(self) -> None:
        """Drop every session."""
        count = len(self._sessions)
        self._sessions.clear()
        logger.info(f"会话存储已清空 ({count} 个会话)")

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
