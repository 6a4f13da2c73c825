"""
Credential authentication service.
"""

import enum

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.auth.passwords import PasswordHasher
from rolegate.core.exceptions import InvalidCredentials, DatabaseUnavailable
from rolegate.models import User
from rolegate.repositories import UserRepository
from rolegate.utils.deadline import with_deadline

logger = structlog.get_logger()


class LoginMethod(str, enum.Enum):
    """Which identifier sign-in matches against."""
    EMAIL = "email"
    USERNAME = "username"
    EMAIL_OR_USERNAME = "email_or_username"


class CredentialAuthenticator:
    """
    Verifies an identifier and password pair.

    Every failure raises the same InvalidCredentials; the actual reason is
    only logged.

    Usage:
        authenticator = CredentialAuthenticator(hasher, LoginMethod.EMAIL)
        user = await authenticator.authenticate(db, "a@b.c", "s3cret")
    """

    def __init__(
        self,
        hasher: PasswordHasher,
        login_method: LoginMethod | str = LoginMethod.EMAIL,
        timeout: float | None = None,
    ):
        self.hasher = hasher
        self.login_method = LoginMethod(login_method)
        self.timeout = timeout

    async def authenticate(
        self,
        db: AsyncSession,
        identifier: str,
        password: str,
        method: LoginMethod | str | None = None,
    ) -> User:
        method = LoginMethod(method) if method is not None else self.login_method

        try:
            user = await with_deadline(
                self._lookup(UserRepository(db), identifier, method),
                self.timeout,
                "authenticate",
            )
        except SQLAlchemyError as exc:
            logger.error("authentication_store_error", method=method.value, error=str(exc))
            raise DatabaseUnavailable() from exc

        if user is None:
            logger.info("authentication_failed", reason="user_not_found", method=method.value)
            raise InvalidCredentials()

        if not self.hasher.verify(password, user.password_hash):
            logger.info("authentication_failed", reason="password_mismatch", user_id=user.id)
            raise InvalidCredentials()

        if not user.is_active:
            logger.info("authentication_failed", reason="user_inactive", user_id=user.id)
            raise InvalidCredentials()

        return user

    async def _lookup(
        self,
        users: UserRepository,
        identifier: str,
        method: LoginMethod,
    ) -> User | None:
        if method == LoginMethod.EMAIL:
            return await users.find_user(email=identifier)
        if method == LoginMethod.USERNAME:
            return await users.find_user(username=identifier)
        return await users.find_by_username_or_email(identifier)
