"""Room naming and notifications shared by the router and the sweeper."""

from ..transport.base import Transport

ADMIN_ROOM = "admins"


def client_room(chat_id: str) -> str:
    return f"client_{chat_id}"


async def announce_deleted(transport: Transport, chat_id: str) -> None:
    """Tell admins and the chat's own client room that a chat is gone."""
    payload = {"chatId": chat_id}
    await transport.emit_to_room(ADMIN_ROOM, "chat_deleted", payload)
    await transport.emit_to_room(client_room(chat_id), "chat_deleted", payload)
