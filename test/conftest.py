"""Shared fixtures: a controllable clock, a recording transport, fake connections."""

from typing import Any, Dict, List, Tuple

import pytest

from support_relay.chat import ExpirySweeper, MessageRouter, SessionStore
from support_relay.transport import Transport


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, *, minutes: float = 0, seconds: float = 0, ms: int = 0) -> None:
        self.now += int(minutes * 60_000 + seconds * 1000 + ms)


class MockConnection:
    """模拟连接，只保存识别后写入的数据"""

    def __init__(self, name: str):
        self.id = name
        self.data: Dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"MockConnection({self.id})"


class RecordingTransport(Transport):
    """Transport that records every call instead of sending anything."""

    def __init__(self):
        self.rooms: Dict[str, List[Any]] = {}
        # (target, event, payload); target is a connection or "room:<name>"
        self.sent: List[Tuple[Any, str, Any]] = []

    def join_room(self, connection, room):
        members = self.rooms.setdefault(room, [])
        if connection not in members:
            members.append(connection)

    def leave_all(self, connection):
        for members in self.rooms.values():
            if connection in members:
                members.remove(connection)

    async def emit(self, connection, event, payload):
        self.sent.append((connection, event, payload))

    async def emit_to_room(self, room, event, payload):
        self.sent.append((f"room:{room}", event, payload))

    def to(self, target) -> List[Tuple[str, Any]]:
        """(event, payload) pairs sent to a connection or ``"room:<name>"``."""
        return [(event, payload) for t, event, payload in self.sent if t == target]

    def events(self, target) -> List[str]:
        return [event for event, _ in self.to(target)]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return SessionStore(clock=clock)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def router(store, transport):
    return MessageRouter(store, transport)


@pytest.fixture
def sweeper(store, transport):
    return ExpirySweeper(store, transport, idle_timeout_minutes=10, interval_seconds=60)


@pytest.fixture
def client_conn():
    return MockConnection("client-1")


@pytest.fixture
def admin_conn():
    return MockConnection("admin-1")
