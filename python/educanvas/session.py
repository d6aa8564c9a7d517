"""
Session coordination for EduCanvas Live.

Provides the Session aggregate holding the classroom's authoritative
state, and SessionCoordinator which applies inbound events to it and
returns the deliveries each event produces.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from .admin import AdminAuthority, ClaimResult
from .chat import ChatLog
from .delivery import Delivery
from .protocol import (
    AdminAssignedMessage,
    AdminClaimResultMessage,
    CanvasClearedMessage,
    ChatBroadcast,
    DrawingToggledMessage,
    JoinAcceptedMessage,
    MessageDeletedMessage,
    ParticipantJoinedMessage,
    ParticipantLeftMessage,
    Role,
    SessionEndedMessage,
    StreamStatusChangedMessage,
    StrokeMessage,
)
from .registry import ConnectionRegistry, Participant
from .signaling import SignalingRelay
from .whiteboard import WhiteboardGate

logger = logging.getLogger(__name__)

ADMIN_LEFT_REASON = "Admin left the session"


@dataclass(frozen=True)
class SessionStats:
    """Read-only summary of the session."""

    participant_count: int
    admin_present: bool
    chat_message_count: int
    drawing_enabled: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "participant_count": self.participant_count,
            "admin_present": self.admin_present,
            "chat_message_count": self.chat_message_count,
            "drawing_enabled": self.drawing_enabled,
        }


class Session:
    """
    The single classroom's state.

    Owns the roster, admin slot, chat log and whiteboard flag. Nothing
    outside the coordinator mutates it.
    """

    def __init__(self, admin_secret: str, clock: Callable[[], float] = time.time):
        self.registry = ConnectionRegistry()
        self.admin = AdminAuthority(self.registry, admin_secret)
        self.chat = ChatLog(self.registry, clock=clock)
        self.whiteboard = WhiteboardGate(self.registry)
        self.signaling = SignalingRelay(self.registry)

    @property
    def admin_connection_id(self) -> str | None:
        return self.admin.admin_connection_id

    @property
    def participants(self) -> dict[str, Participant]:
        return self.registry.participants

    @property
    def drawing_enabled(self) -> bool:
        return self.whiteboard.drawing_enabled

    def reset(self) -> None:
        """Return to the initial empty state."""
        self.admin.release()
        self.registry.clear()
        self.chat.clear()
        self.whiteboard.reset()

    def stats(self) -> SessionStats:
        return SessionStats(
            participant_count=self.registry.count,
            admin_present=self.admin.admin_present,
            chat_message_count=self.chat.count,
            drawing_enabled=self.whiteboard.drawing_enabled,
        )


class SessionCoordinator:
    """
    Applies connection events to the session.

    Every operation is synchronous and returns the list of deliveries it
    produced, resolved to concrete connection ids from the state the
    operation left behind. Callers must serialize calls; the coordinator
    holds no lock of its own.

    Events other than ``join`` from connections that have not joined are
    ignored, as are authorization failures other than explicit claims.
    """

    def __init__(self, admin_secret: str, clock: Callable[[], float] = time.time):
        self._session = Session(admin_secret, clock=clock)

    @property
    def session(self) -> Session:
        return self._session

    def _joined(self, connection_id: str, event: str) -> Participant | None:
        participant = self._session.registry.lookup(connection_id)
        if participant is None:
            logger.debug(f"Ignored {event} from unjoined connection {connection_id}")
        return participant

    def _everyone(self) -> list[str]:
        return self._session.registry.connection_ids

    def _others(self, connection_id: str) -> list[str]:
        return self._session.registry.others(connection_id)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def connect(self, connection_id: str) -> list[Delivery]:
        """Note a new connection. It holds no session state until it joins."""
        logger.info(f"Connection opened: {connection_id}")
        return []

    def join(self, connection_id: str, name: str, secret: str | None = None) -> list[Delivery]:
        """
        Join the classroom as a student, claiming admin if a secret is given.

        Returns the private snapshot for the joiner and the announcement
        for everyone else.
        """
        session = self._session
        if connection_id in session.registry:
            logger.debug(f"Ignored repeated join from {connection_id}")
            return []

        participant = session.registry.register(connection_id, name, Role.STUDENT)
        if secret is not None:
            result = session.admin.claim(connection_id, secret)
            if not result.granted:
                logger.info(f"Admin claim on join by {connection_id} denied: {result.reason.value}")

        logger.info(f"{name} joined as {participant.role.value}")

        snapshot = JoinAcceptedMessage(
            connection_id=connection_id,
            role=participant.role,
            is_admin=participant.is_admin,
            participants={cid: p.to_info() for cid, p in session.participants.items()},
            chat=[message.to_info() for message in session.chat.messages()],
            drawing_enabled=session.drawing_enabled,
        )
        announcement = ParticipantJoinedMessage(participant=participant.to_info())
        return [
            Delivery.to([connection_id], snapshot),
            Delivery.to(self._others(connection_id), announcement),
        ]

    def disconnect(self, connection_id: str) -> list[Delivery]:
        """
        Handle a closed connection.

        An admin leaving ends the session for everyone and resets it; a
        student leaving is removed from the roster. Unknown connections
        are a no-op.
        """
        session = self._session
        participant = session.registry.lookup(connection_id)
        if participant is None:
            return []

        if participant.is_admin:
            remaining = self._others(connection_id)
            session.reset()
            logger.info(f"Admin {participant.name} left; session reset for {len(remaining)} participant(s)")
            return [Delivery.to(remaining, SessionEndedMessage(reason=ADMIN_LEFT_REASON))]

        session.registry.remove(connection_id)
        logger.info(f"{participant.name} left")
        return [Delivery.to(self._everyone(), ParticipantLeftMessage(connection_id=connection_id))]

    # =========================================================================
    # Admin
    # =========================================================================

    def claim_admin(self, connection_id: str, secret: str) -> list[Delivery]:
        """Attempt an explicit admin claim and report the outcome to the claimant."""
        participant = self._joined(connection_id, "claim_admin")
        if participant is None:
            return []

        result: ClaimResult = self._session.admin.claim(connection_id, secret)
        deliveries = [
            Delivery.to(
                [connection_id],
                AdminClaimResultMessage(granted=result.granted, reason=result.reason),
            )
        ]
        if result.granted:
            deliveries.append(
                Delivery.to(
                    self._others(connection_id),
                    AdminAssignedMessage(participant=participant.to_info()),
                )
            )
        return deliveries

    # =========================================================================
    # Chat
    # =========================================================================

    def send_chat(self, connection_id: str, body: str) -> list[Delivery]:
        """Append a chat message and broadcast it to everyone."""
        if self._joined(connection_id, "chat_send") is None:
            return []
        message = self._session.chat.append(connection_id, body)
        if message is None:
            return []
        return [Delivery.to(self._everyone(), ChatBroadcast(message=message.to_info()))]

    def delete_chat(self, connection_id: str, message_id: str) -> list[Delivery]:
        """Delete a chat message on behalf of the admin."""
        if self._joined(connection_id, "chat_delete") is None:
            return []
        if not self._session.chat.delete(message_id, connection_id):
            logger.debug(f"chat_delete of {message_id} by {connection_id} refused")
            return []
        return [Delivery.to(self._everyone(), MessageDeletedMessage(message_id=message_id))]

    # =========================================================================
    # Whiteboard
    # =========================================================================

    def stroke(self, connection_id: str, stroke: StrokeMessage) -> list[Delivery]:
        """Relay a stroke to every other participant if drawing is allowed."""
        if self._joined(connection_id, "stroke") is None:
            return []
        delivery = self._session.whiteboard.relay_stroke(connection_id, stroke)
        return [delivery] if delivery else []

    def clear_canvas(self, connection_id: str) -> list[Delivery]:
        """Tell everyone to clear their canvas (admin only)."""
        if self._joined(connection_id, "clear_canvas") is None:
            return []
        if not self._session.whiteboard.clear(connection_id):
            logger.debug(f"clear_canvas by non-admin {connection_id} refused")
            return []
        return [Delivery.to(self._everyone(), CanvasClearedMessage())]

    def toggle_drawing(self, connection_id: str, enabled: bool) -> list[Delivery]:
        """Set the drawing permission (admin only) and broadcast it."""
        if self._joined(connection_id, "toggle_drawing") is None:
            return []
        if not self._session.whiteboard.set_enabled(connection_id, enabled):
            logger.debug(f"toggle_drawing by non-admin {connection_id} refused")
            return []
        return [Delivery.to(self._everyone(), DrawingToggledMessage(enabled=enabled))]

    # =========================================================================
    # Media
    # =========================================================================

    def stream_status(self, connection_id: str, active: bool) -> list[Delivery]:
        """Record a participant's stream status and tell the others."""
        participant = self._joined(connection_id, "stream_status")
        if participant is None:
            return []
        participant.stream_active = active
        message = StreamStatusChangedMessage(connection_id=connection_id, active=active)
        return [Delivery.to(self._others(connection_id), message)]

    def signal(self, connection_id: str, to: str, kind: str, payload: Any) -> list[Delivery]:
        """Forward a negotiation payload to one registered participant."""
        if self._joined(connection_id, "signal") is None:
            return []
        delivery = self._session.signaling.relay(connection_id, to, kind, payload)
        return [delivery] if delivery else []

    # =========================================================================
    # Queries
    # =========================================================================

    def stats(self) -> SessionStats:
        """Get a read-only summary of the session."""
        return self._session.stats()


__all__ = [
    "ADMIN_LEFT_REASON",
    "SessionStats",
    "Session",
    "SessionCoordinator",
]
