"""Errors raised by the chat core."""


class ChatError(Exception):
    """Base class for chat relay errors."""


class ChatNotFoundError(ChatError):
    """Referenced chat session does not exist."""

    def __init__(self, chat_id: str):
        self.chat_id = chat_id
        super().__init__(f"no chat: {chat_id}")


class InvalidPayloadError(ChatError):
    """Inbound event payload is malformed or missing required fields."""

    def __init__(self, event: str, detail: str):
        self.event = event
        self.detail = detail
        super().__init__(f"invalid payload for '{event}': {detail}")
