"""
Chat log for EduCanvas Live.

Ordered, append-only message store. Only the admin may delete.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from .protocol import ChatMessageInfo, Role
from .registry import ConnectionRegistry


@dataclass(frozen=True)
class ChatMessage:
    """A chat message as sent, with the sender's role captured at send time."""

    id: str
    sender_connection_id: str
    sender_name: str
    role: Role
    body: str
    sent_at: datetime

    def to_info(self) -> ChatMessageInfo:
        """Convert to the wire representation."""
        return ChatMessageInfo(
            id=self.id,
            sender_connection_id=self.sender_connection_id,
            sender_name=self.sender_name,
            role=self.role,
            body=self.body,
            sent_at=self.sent_at.isoformat(),
        )


class ChatLog:
    """
    Stores chat messages in append order.

    Message ids are the send time in milliseconds, bumped when needed so
    they stay strictly increasing (and therefore unique) for the lifetime
    of the process.
    """

    def __init__(self, registry: ConnectionRegistry, clock: Callable[[], float] = time.time):
        self._registry = registry
        self._clock = clock
        self._messages: list[ChatMessage] = []
        self._last_id = 0

    def _next_id(self, now: float) -> str:
        candidate = int(now * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return str(candidate)

    def append(self, sender_connection_id: str, body: str) -> ChatMessage | None:
        """
        Append a message from a participant.

        Returns:
            The stored message, or None if the sender is not registered.
        """
        sender = self._registry.lookup(sender_connection_id)
        if sender is None:
            return None

        now = self._clock()
        message = ChatMessage(
            id=self._next_id(now),
            sender_connection_id=sender.connection_id,
            sender_name=sender.name,
            role=sender.role,
            body=body,
            sent_at=datetime.fromtimestamp(now, tz=timezone.utc),
        )
        self._messages.append(message)
        return message

    def delete(self, message_id: str, requestor_connection_id: str) -> bool:
        """
        Delete a message by id on behalf of the admin.

        Returns:
            True if the requestor is admin and the message was removed.
        """
        requestor = self._registry.lookup(requestor_connection_id)
        if requestor is None or not requestor.is_admin:
            return False

        for index, message in enumerate(self._messages):
            if message.id == message_id:
                del self._messages[index]
                return True
        return False

    def messages(self) -> list[ChatMessage]:
        """Get all messages in append order."""
        return list(self._messages)

    @property
    def count(self) -> int:
        return len(self._messages)

    def clear(self) -> None:
        """Drop every message. Ids keep increasing across a clear."""
        self._messages.clear()


__all__ = ["ChatMessage", "ChatLog"]
