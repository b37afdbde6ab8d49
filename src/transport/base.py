"""Abstract transport the chat core talks to."""

from abc import ABC, abstractmethod
from typing import Any


class Transport(ABC):
    """Room-based event channel.

    A connection joins named rooms; events are emitted either to a single
    connection or to every member of a room. Delivery is best effort.
    """

    @abstractmethod
    def join_room(self, connection: Any, room: str) -> None:
        """Subscribe a connection to a room."""
        pass

    @abstractmethod
    def leave_all(self, connection: Any) -> None:
        """Remove a connection from every room it joined."""
        pass

    @abstractmethod
    async def emit(self, connection: Any, event: str, payload: Any) -> None:
        """
        Send an event to one connection.

        Args:
            connection: Target connection
            event: Event name
            payload: JSON-ready payload
        """
        pass

    @abstractmethod
    async def emit_to_room(self, room: str, event: str, payload: Any) -> None:
        """
        Send an event to every connection in a room.

        Args:
            room: Room name
            event: Event name
            payload: JSON-ready payload
        """
        pass
