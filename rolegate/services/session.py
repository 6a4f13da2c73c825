"""
Session management.

A session is a cache entry mapping an opaque token to a user id, written
with the configured lifetime. Expiry is the cache's job; nothing here
extends a session on use.
"""

import enum

import structlog
from starlette.requests import Request

from rolegate.core.auth.tokens import TokenGenerator
from rolegate.core.exceptions import (
    InfrastructureError,
    InvalidSession,
    SessionStoreUnavailable,
)
from rolegate.core.interfaces.cache import CacheBackend
from rolegate.models import User
from rolegate.utils.deadline import with_deadline

logger = structlog.get_logger()


class AuthStrategy(str, enum.Enum):
    """Where a request carries its session token."""
    COOKIE = "cookie"
    TOKEN = "token"


def extract_token(
    request: Request,
    strategy: AuthStrategy,
    cookie_name: str,
) -> str | None:
    """
    Pull the session token out of a request.

    COOKIE reads ``cookie_name``; TOKEN expects ``Authorization: Bearer <token>``.
    """
    if strategy == AuthStrategy.COOKIE:
        return request.cookies.get(cookie_name) or None

    header = request.headers.get("Authorization")
    if not header:
        return None
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


class SessionManager:
    """
    Issues, verifies and revokes session tokens.

    Usage:
        sessions = SessionManager(cache, SecureTokenGenerator(), expire_seconds=3600)
        token = await sessions.issue(user)
        user_id = await sessions.verify(token)
        await sessions.revoke(token)
    """

    def __init__(
        self,
        cache: CacheBackend,
        token_generator: TokenGenerator,
        expire_seconds: int,
        timeout: float | None = None,
    ):
        self.cache = cache
        self.token_generator = token_generator
        self.expire_seconds = expire_seconds
        self.timeout = timeout

    async def issue(self, user: User) -> str:
        """Create a session for ``user``. No token is returned unless stored."""
        token = self.token_generator.generate()
        try:
            stored = await with_deadline(
                self.cache.set(token, user.id, ttl=self.expire_seconds),
                self.timeout,
                "session_issue",
            )
        except InfrastructureError as exc:
            logger.error("session_issue_failed", user_id=user.id, error=str(exc))
            raise SessionStoreUnavailable() from exc

        if not stored:
            logger.error("session_issue_failed", user_id=user.id, error="write rejected")
            raise SessionStoreUnavailable()

        logger.info("session_issued", user_id=user.id)
        return token

    async def verify(self, token: str | None) -> int:
        """User id for a live session. Raises InvalidSession otherwise."""
        if not token:
            raise InvalidSession()

        try:
            value = await with_deadline(
                self.cache.get(token),
                self.timeout,
                "session_verify",
            )
        except InfrastructureError as exc:
            logger.warning("session_verify_failed", error=str(exc))
            raise InvalidSession() from exc

        if value is None:
            raise InvalidSession()
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("session_value_malformed")
            raise InvalidSession()

    async def revoke(self, token: str) -> None:
        """Delete the session. Revoking an unknown token is not an error."""
        try:
            await with_deadline(
                self.cache.delete(token),
                self.timeout,
                "session_revoke",
            )
        except InfrastructureError as exc:
            logger.error("session_revoke_failed", error=str(exc))
            raise SessionStoreUnavailable("Could not end session") from exc
