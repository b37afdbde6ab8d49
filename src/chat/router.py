"""Message router: applies inbound events to the store and fans out updates."""

from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import InvalidPayloadError
from .models import (
    AdminMessagePayload,
    ChatRefPayload,
    ClientMessagePayload,
    IdentifyAdminPayload,
    IdentifyClientPayload,
    Session,
    new_id,
    summarize,
    to_wire,
)
from .rooms import ADMIN_ROOM, announce_deleted, client_room
from .store import SessionStore
from ..transport.base import Transport
from ..utils.logger import get_logger

logger = get_logger(__name__)

P = TypeVar("P", bound=BaseModel)
Handler = Callable[[Any, Dict[str, Any]], Awaitable[None]]


def parse_payload(event: str, model: Type[P], data: Any) -> P:
    """
    Validate an inbound payload.

    Args:
        event: Event name, used in the error message
        model: Payload model
        data: Raw payload

    Returns:
        Parsed payload

    Raises:
        InvalidPayloadError: If the payload is not an object or fails validation
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidPayloadError(event, "payload must be an object")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise InvalidPayloadError(event, f"invalid or missing fields: {fields}") from e


class MessageRouter:
    """
    Routes chat events between clients and admins.

    Each handler holds the store lock for its whole run: the mutation, the
    serialization of every outbound payload, and the sends. Handlers and
    the sweeper therefore never interleave, and rooms see notifications in
    the same order the mutations happened. Per-chat events that name an
    unknown chat are ignored.
    """

    def __init__(self, store: SessionStore, transport: Transport):
        """
        Initialize the router.

        Args:
            store: Session store
            transport: Transport used to reach clients and admins
        """
        self.store = store
        self.transport = transport
        self._handlers: Dict[str, Handler] = {
            "identify_client": self.identify_client,
            "identify_admin": self.identify_admin,
            "client_message": self.client_message,
            "admin_message": self.admin_message,
            "mark_seen": self.mark_seen,
            # open_chat 与 mark_seen 行为相同
            "open_chat": self.mark_seen,
            "delete_chat": self.delete_chat,
        }

    async def dispatch(self, connection: Any, event: str, data: Optional[Dict[str, Any]] = None) -> bool:
        """
        Route one inbound event to its handler.

        Args:
            connection: Connection the event came from
            event: Event name
            data: Event payload

        Returns:
            False if the event name is unknown

        Raises:
            InvalidPayloadError: If the payload is malformed
        """
        handler = self._handlers.get(event)
        if handler is None:
            logger.warning(f"未知事件: {event}")
            return False
        await handler(connection, data if data is not None else {})
        return True

    async def identify_client(self, connection: Any, data: Dict[str, Any]) -> None:
        payload = parse_payload("identify_client", IdentifyClientPayload, data)
        client_id = payload.client_id or new_id()
        async with self.store.lock:
            session = self.store.get_or_create(client_id)
            self.transport.join_room(connection, client_room(session.id))
            _set_connection_data(connection, role="client", chatId=session.id)
            logger.info(f"客户端 {client_id} 已识别，会话 {session.id}")
            history = to_wire(session)
            summary = to_wire(summarize(session))
            assigned = {"clientId": client_id, "chatId": session.id}

            await self.transport.emit(connection, "chat_history", history)
            await self.transport.emit_to_room(ADMIN_ROOM, "chat_list_update", summary)
            await self.transport.emit(connection, "client_id_assigned", assigned)

    async def identify_admin(self, connection: Any, data: Dict[str, Any]) -> None:
        parse_payload("identify_admin", IdentifyAdminPayload, data)
        async with self.store.lock:
            self.transport.join_room(connection, ADMIN_ROOM)
            _set_connection_data(connection, role="admin")
            summaries = [to_wire(summarize(s)) for s in self.store.list_all()]
            logger.info(f"管理员已识别，当前 {len(summaries)} 个会话")
            await self.transport.emit(connection, "chat_list", summaries)

    async def client_message(self, connection: Any, data: Dict[str, Any]) -> None:
        payload = parse_payload("client_message", ClientMessagePayload, data)
        async with self.store.lock:
            session = self.store.get_or_create(payload.client_id)
            message = self.store.append_message(session, "client", payload.text)
            wire_message = to_wire(message)
            wire_session = to_wire(session)

            await self.transport.emit_to_room(
                ADMIN_ROOM, "new_message", {"chatId": session.id, "message": wire_message}
            )
            await self.transport.emit(connection, "message_sent", wire_message)
            await self.transport.emit_to_room(client_room(session.id), "chat_update", wire_session)

    async def admin_message(self, connection: Any, data: Dict[str, Any]) -> None:
        payload = parse_payload("admin_message", AdminMessagePayload, data)
        async with self.store.lock:
            session = self._lookup("admin_message", payload.chat_id)
            if session is None:
                return
            message = self.store.append_message(session, "admin", payload.text)
            wire_session = to_wire(session)
            wire_message = to_wire(message)

            await self.transport.emit_to_room(ADMIN_ROOM, "chat_update", wire_session)
            await self.transport.emit_to_room(
                client_room(session.id),
                "new_message_from_admin",
                {"chatId": session.id, "message": wire_message},
            )

    async def mark_seen(self, connection: Any, data: Dict[str, Any]) -> None:
        """Mark a chat's client messages as seen (``mark_seen`` and ``open_chat``)."""
        payload = parse_payload("mark_seen", ChatRefPayload, data)
        async with self.store.lock:
            session = self._lookup("mark_seen", payload.chat_id)
            if session is None:
                return
            flipped = self.store.mark_seen(session)
            logger.debug(f"[会话 {session.id}] {flipped} 条消息标记已读")
            wire_session = to_wire(session)

            await self.transport.emit_to_room(ADMIN_ROOM, "chat_update", wire_session)
            await self.transport.emit_to_room(
                client_room(session.id), "messages_seen", {"chatId": session.id}
            )

    async def delete_chat(self, connection: Any, data: Dict[str, Any]) -> None:
        payload = parse_payload("delete_chat", ChatRefPayload, data)
        async with self.store.lock:
            session = self.store.delete(payload.chat_id)
            if session is None:
                logger.debug(f"delete_chat: 会话 {payload.chat_id} 不存在，忽略")
                return
            await announce_deleted(self.transport, session.id)

    def disconnect(self, connection: Any) -> None:
        """Drop a closed connection from its rooms. Sessions are kept."""
        info = getattr(connection, "data", None) or {}
        role = info.get("role", "unidentified")
        if role == "client":
            logger.info(f"客户端离开会话 {info.get('chatId')}，会话保留")
        else:
            logger.info(f"{role} 连接离开")
        self.transport.leave_all(connection)

    def _lookup(self, event: str, chat_id: str) -> Optional[Session]:
        session = self.store.get(chat_id)
        if session is None:
            logger.debug(f"{event}: 会话 {chat_id} 不存在，忽略")
        return session


def _set_connection_data(connection: Any, **values: Any) -> None:
    data = getattr(connection, "data", None)
    if isinstance(data, dict):
        data.clear()
        data.update(values)
