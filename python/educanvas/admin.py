"""
Admin authority for EduCanvas Live.

Enforces that at most one participant holds the admin role and
implements the shared-secret claim protocol.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass

from .protocol import ClaimDenial, Role
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimResult:
    """Outcome of an admin claim."""

    granted: bool
    reason: ClaimDenial | None = None

    @classmethod
    def grant(cls) -> "ClaimResult":
        return cls(granted=True)

    @classmethod
    def deny(cls, reason: ClaimDenial) -> "ClaimResult":
        return cls(granted=False, reason=reason)


class AdminAuthority:
    """
    Holds the session's single admin slot.

    The claim is a compare-and-set on the slot with no suspension point,
    so concurrent claims resolve to exactly one grant.
    """

    def __init__(self, registry: ConnectionRegistry, secret: str):
        self._registry = registry
        self._secret = secret
        self._admin_connection_id: str | None = None

    @property
    def admin_connection_id(self) -> str | None:
        return self._admin_connection_id

    @property
    def admin_present(self) -> bool:
        return self._admin_connection_id is not None

    def check_secret(self, supplied: str | None) -> bool:
        if supplied is None:
            return False
        return hmac.compare_digest(supplied.encode("utf-8"), self._secret.encode("utf-8"))

    def claim(self, connection_id: str, supplied_secret: str | None) -> ClaimResult:
        """
        Attempt to make a connection the admin.

        Args:
            connection_id: The claiming connection; must be registered.
            supplied_secret: The secret the client supplied.

        Returns:
            A granted result, or a denial carrying the reason.

        Raises:
            LookupError: If the connection has not joined.
        """
        participant = self._registry.lookup(connection_id)
        if participant is None:
            raise LookupError(f"Connection '{connection_id}' has not joined")

        if not self.check_secret(supplied_secret):
            return ClaimResult.deny(ClaimDenial.WRONG_SECRET)

        if self._admin_connection_id is not None:
            return ClaimResult.deny(ClaimDenial.ADMIN_ALREADY_PRESENT)

        self._admin_connection_id = connection_id
        participant.role = Role.ADMIN
        logger.info(f"Admin granted to {connection_id}")
        return ClaimResult.grant()

    def release(self) -> None:
        """Clear the admin slot unconditionally."""
        self._admin_connection_id = None


__all__ = ["ClaimResult", "AdminAuthority"]
