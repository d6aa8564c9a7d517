"""
Outbound delivery records.

Every session operation returns the messages it produced together with
the concrete connections each one must reach, so the transport layer
only has to write them out.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from pydantic import BaseModel


@dataclass(frozen=True)
class Delivery:
    """A server message and the connection ids it is addressed to."""

    recipients: tuple[str, ...]
    message: BaseModel

    @classmethod
    def to(cls, recipients: Iterable[str], message: BaseModel) -> "Delivery":
        return cls(tuple(recipients), message)

    @property
    def type(self) -> str:
        return getattr(self.message, "type", "")

    def payload(self) -> dict[str, Any]:
        """Serialize the message for the wire."""
        return self.message.model_dump(mode="json")


__all__ = ["Delivery"]
