"""
Principal Resolver — turns a request's session token into a Principal.

Tokens are issued elsewhere; this module only verifies them.  The admin flag
is looked up once per request from the ``users`` collection and carried on
the Principal, so permission checks never go back to storage.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import jwt

from doccure.booking.errors import UnauthorizedError
from doccure.booking.store import DocumentStore

logger = logging.getLogger("doccure.principal")

USERS_COLLECTION = "users"
ADMIN_ROLE = "admin"
TOKEN_ALGORITHMS = ["HS256"]


@dataclass(frozen=True)
class Principal:
    """The authenticated actor making a request."""

    email: str
    is_admin: bool = False


class PrincipalResolver:
    def __init__(self, store: DocumentStore, secret: str) -> None:
        self._store = store
        self._secret = secret

    def verify(self, token: str | None) -> str:
        """Return the email claim of a valid token."""
        if not token:
            raise UnauthorizedError("unauthorized access")
        try:
            claims = jwt.decode(token, self._secret, algorithms=TOKEN_ALGORITHMS)
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired session token")
            raise UnauthorizedError("unauthorized access") from None
        except jwt.InvalidTokenError as exc:
            logger.warning("Rejected invalid session token: %s", exc)
            raise UnauthorizedError("unauthorized access") from None

        email = claims.get("email")
        if not email:
            raise UnauthorizedError("unauthorized access")
        return email

    async def resolve(self, token: str | None) -> Principal:
        email = self.verify(token)
        users = await self._store.find(
            USERS_COLLECTION, lambda d: d.get("email") == email
        )
        is_admin = any(u.get("role") == ADMIN_ROLE for u in users)
        return Principal(email=email, is_admin=is_admin)
