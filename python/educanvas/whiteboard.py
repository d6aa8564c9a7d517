"""
Whiteboard gate for EduCanvas Live.

Holds the drawing permission flag and relays strokes. The server keeps
no canvas buffer: strokes are forwarded as they arrive and forgotten.
"""

from __future__ import annotations

import logging

from .delivery import Delivery
from .protocol import StrokeBroadcast, StrokeMessage
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class WhiteboardGate:
    """Drawing permission and best-effort stroke relay."""

    def __init__(self, registry: ConnectionRegistry, drawing_enabled: bool = True):
        self._registry = registry
        self._drawing_enabled = drawing_enabled

    @property
    def drawing_enabled(self) -> bool:
        return self._drawing_enabled

    def _requestor_is_admin(self, connection_id: str) -> bool:
        participant = self._registry.lookup(connection_id)
        return participant is not None and participant.is_admin

    def authorize(self, connection_id: str) -> bool:
        """Check if a connection may draw right now."""
        participant = self._registry.lookup(connection_id)
        if participant is None:
            return False
        return self._drawing_enabled or participant.is_admin

    def set_enabled(self, requestor_connection_id: str, enabled: bool) -> bool:
        """
        Set the drawing flag on behalf of the admin.

        Returns:
            True if the requestor is admin and the flag was set.
        """
        if not self._requestor_is_admin(requestor_connection_id):
            return False
        self._drawing_enabled = enabled
        return True

    def relay_stroke(self, sender_connection_id: str, stroke: StrokeMessage) -> Delivery | None:
        """
        Build the relay of a stroke to every other participant.

        Returns:
            The delivery, or None if the sender may not draw.
        """
        if not self.authorize(sender_connection_id):
            logger.debug(f"Dropped stroke from {sender_connection_id}: drawing disabled")
            return None

        # The sender id always wins over a client-supplied connection_id
        fields = {**stroke.relay_fields(), "connection_id": sender_connection_id}
        broadcast = StrokeBroadcast(**fields)
        return Delivery.to(self._registry.others(sender_connection_id), broadcast)

    def clear(self, requestor_connection_id: str) -> bool:
        """Check if the requestor may clear the canvas for everyone."""
        return self._requestor_is_admin(requestor_connection_id)

    def reset(self) -> None:
        self._drawing_enabled = True


__all__ = ["WhiteboardGate"]
