"""WebSocket connection hub with room-based multicast."""

import uuid
from typing import Any, Dict, List, Optional, Set

from fastapi import WebSocket

from .base import Transport
from ..utils.logger import get_logger

logger = get_logger(__name__)


class Connection:
    """A connected WebSocket plus the state the relay keeps about it."""

    def __init__(self, websocket: WebSocket, connection_id: Optional[str] = None):
        self.id = connection_id or f"conn_{uuid.uuid4().hex[:8]}"
        self.websocket = websocket
        self.rooms: Set[str] = set()
        # role / chatId，由 identify_* 事件写入
        self.data: Dict[str, Any] = {}

    async def send(self, event: str, payload: Any) -> None:
        await self.websocket.send_json({"type": event, "data": payload})

    def __repr__(self) -> str:
        return f"Connection({self.id}, rooms={sorted(self.rooms)})"


class ConnectionHub(Transport):
    """Tracks live connections and the rooms they belong to."""

    def __init__(self):
        self._connections: Dict[str, Connection] = {}
        self._rooms: Dict[str, Set[str]] = {}

    def register(self, websocket: WebSocket) -> Connection:
        """
        Register an accepted WebSocket.

        Args:
            websocket: Accepted WebSocket

        Returns:
            The new connection
        """
        connection = Connection(websocket)
        self._connections[connection.id] = connection
        logger.info(f"连接 {connection.id} 已建立")
        return connection

    def unregister(self, connection: Connection) -> None:
        """Forget a connection and drop it from all rooms."""
        self.leave_all(connection)
        self._connections.pop(connection.id, None)
        logger.info(f"连接 {connection.id} 已断开")

    def join_room(self, connection: Connection, room: str) -> None:
        self._rooms.setdefault(room, set()).add(connection.id)
        connection.rooms.add(room)
        logger.debug(f"连接 {connection.id} 加入房间 {room}")

    def leave_all(self, connection: Connection) -> None:
        for room in list(connection.rooms):
            members = self._rooms.get(room)
            if members is None:
                continue
            members.discard(connection.id)
            if not members:
                del self._rooms[room]
        connection.rooms.clear()

    def members(self, room: str) -> List[Connection]:
        """Connections currently in a room."""
        return [
            self._connections[cid]
            for cid in self._rooms.get(room, ())
            if cid in self._connections
        ]

    async def emit(self, connection: Connection, event: str, payload: Any) -> None:
        try:
            await connection.send(event, payload)
        except Exception as e:
            # 尽力投递：发送失败只记录，不影响调用方
            logger.warning(f"发送 {event} 到 {connection.id} 失败: {e}")

    async def emit_to_room(self, room: str, event: str, payload: Any) -> None:
        # 先取快照，发送期间房间成员可能变化
        for connection in self.members(room):
            await self.emit(connection, event, payload)

    def room_sizes(self) -> Dict[str, int]:
        """Member count per room."""
        return {room: len(members) for room, members in self._rooms.items()}

    def role_counts(self) -> Dict[str, int]:
        """Live connections per identified role (client / admin)."""
        counts: Dict[str, int] = {}
        for connection in self._connections.values():
            role = connection.data.get("role", "unidentified")
            counts[role] = counts.get(role, 0) + 1
        return counts

    def __len__(self) -> int:
        return len(self._connections)
