"""Transport layer: room-based event delivery."""

from .base import Transport
from .hub import Connection, ConnectionHub

__all__ = ["Transport", "Connection", "ConnectionHub"]
