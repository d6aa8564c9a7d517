"""
Connection registry for EduCanvas Live.

Maps opaque connection identifiers to the participants that joined
through them.
"""

from __future__ import annotations

from dataclasses import dataclass

from .protocol import ParticipantInfo, Role


@dataclass
class Participant:
    """A joined connection's identity within the session."""

    connection_id: str
    name: str
    role: Role = Role.STUDENT
    stream_active: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def to_info(self) -> ParticipantInfo:
        """Convert to the wire representation."""
        return ParticipantInfo(
            connection_id=self.connection_id,
            name=self.name,
            role=self.role,
            stream_active=self.stream_active,
        )


class ConnectionRegistry:
    """Tracks joined participants by connection id."""

    def __init__(self) -> None:
        self._participants: dict[str, Participant] = {}

    def register(self, connection_id: str, name: str, role: Role = Role.STUDENT) -> Participant:
        """
        Register a participant for a connection.

        Raises:
            ValueError: If the connection id is already registered.
        """
        if connection_id in self._participants:
            raise ValueError(f"Connection '{connection_id}' is already registered")
        participant = Participant(connection_id=connection_id, name=name, role=role)
        self._participants[connection_id] = participant
        return participant

    def lookup(self, connection_id: str) -> Participant | None:
        """Get the participant for a connection, if any."""
        return self._participants.get(connection_id)

    def remove(self, connection_id: str) -> Participant | None:
        """Remove a participant. Removing an absent id is a no-op."""
        return self._participants.pop(connection_id, None)

    def clear(self) -> None:
        """Drop every participant."""
        self._participants.clear()

    def others(self, connection_id: str) -> list[str]:
        """Connection ids of every participant except the given one."""
        return [cid for cid in self._participants if cid != connection_id]

    @property
    def participants(self) -> dict[str, Participant]:
        """Get a copy of the participant mapping."""
        return self._participants.copy()

    @property
    def connection_ids(self) -> list[str]:
        return list(self._participants)

    @property
    def count(self) -> int:
        return len(self._participants)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._participants

    def __len__(self) -> int:
        return len(self._participants)


__all__ = ["Participant", "ConnectionRegistry"]
