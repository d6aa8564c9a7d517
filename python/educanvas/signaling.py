"""
Signaling relay for EduCanvas Live.

Forwards peer-media negotiation payloads (offer, answer, ICE candidate)
to a single connection. Payloads are opaque and never inspected.
"""

from __future__ import annotations

import logging
from typing import Any

from .delivery import Delivery
from .protocol import SignalBroadcast
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)

SIGNAL_KINDS = frozenset({"offer", "answer", "candidate"})


class SignalingRelay:
    """Stateless point-to-point relay addressed by connection id."""

    def __init__(self, registry: ConnectionRegistry):
        self._registry = registry

    def relay(
        self,
        from_connection_id: str,
        to_connection_id: str,
        kind: str,
        payload: Any,
    ) -> Delivery | None:
        """
        Build the delivery of a negotiation payload to its destination.

        Args:
            from_connection_id: The true sender, stamped on the message.
            to_connection_id: The destination connection.
            kind: One of offer, answer or candidate.
            payload: Opaque negotiation data.

        Returns:
            The delivery, or None if the destination is not registered.
        """
        if kind not in SIGNAL_KINDS:
            logger.debug(f"Dropped signal of unknown kind {kind!r}")
            return None

        if to_connection_id not in self._registry:
            logger.debug(f"Dropped {kind} from {from_connection_id}: {to_connection_id} is gone")
            return None

        message = SignalBroadcast(
            from_connection_id=from_connection_id,
            kind=kind,
            payload=payload,
        )
        return Delivery.to([to_connection_id], message)


__all__ = ["SIGNAL_KINDS", "SignalingRelay"]
