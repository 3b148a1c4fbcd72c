"""
Authorization Gate — who may read, fulfil, or delete a booking.

Rules:
  - Owners (principal email == booking email) may delete their booking.
  - Admins may delete any booking, attach results, search, list everything
    and manage the test catalog.
  - Everyone else is denied.

Decisions are pure functions of the Principal and the Booking.  Each one is
recorded in a bounded audit log.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from doccure.booking.models import Booking
from doccure.booking.principal import Principal

logger = logging.getLogger("doccure.permissions")

AUDIT_LOG_LIMIT = 500


class AuthorizationGate:
    def __init__(self) -> None:
        self._audit_log: list[dict] = []

    def can_delete(self, principal: Principal, booking: Booking) -> bool:
        if principal.is_admin:
            return self._decide(principal, "delete", True, "admin", booking.id)
        if principal.email == booking.email:
            return self._decide(principal, "delete", True, "owner", booking.id)
        return self._decide(principal, "delete", False, "not_owner", booking.id)

    def can_delete_any(self, principal: Principal) -> bool:
        return self._admin_only(principal, "delete_any")

    def can_fulfill(self, principal: Principal) -> bool:
        return self._admin_only(principal, "fulfill")

    def can_search(self, principal: Principal) -> bool:
        return self._admin_only(principal, "search")

    def can_list_all(self, principal: Principal) -> bool:
        return self._admin_only(principal, "list_all")

    def can_manage_catalog(self, principal: Principal) -> bool:
        return self._admin_only(principal, "manage_catalog")

    @property
    def audit_log(self) -> list[dict]:
        return list(self._audit_log)

    # ── Internal ──

    def _admin_only(self, principal: Principal, action: str) -> bool:
        if principal.is_admin:
            return self._decide(principal, action, True, "admin")
        return self._decide(principal, action, False, "admin_required")

    def _decide(
        self,
        principal: Principal,
        action: str,
        allowed: bool,
        reason: str,
        booking_id: str = "",
    ) -> bool:
        self._audit_log.append({
            "email": principal.email,
            "is_admin": principal.is_admin,
            "action": action,
            "booking_id": booking_id,
            "allowed": allowed,
            "reason": reason,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
        if len(self._audit_log) > AUDIT_LOG_LIMIT:
            self._audit_log = self._audit_log[-(AUDIT_LOG_LIMIT // 2):]

        level = logging.DEBUG if allowed else logging.WARNING
        logger.log(
            level,
            "Permission %s: %s → %s %s [reason=%s]",
            "GRANTED" if allowed else "DENIED",
            principal.email,
            action,
            booking_id or "-",
            reason,
        )
        return allowed
