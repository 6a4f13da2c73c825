"""
RoleGate: the assembled access-control stack.

Owns the engine, session factory and cache, and wires the authenticator,
session manager, RBAC resolver and migration runner together.

Usage:
    gate = RoleGate.from_settings()

    @gate.migrations.register("init_admin")
    async def init_admin(scope): ...

    gate.register_rule(OwnerOnly())   # before serving traffic
    await gate.startup()

    user, token = await gate.sign_in("admin@example.com", "changeme")
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from rolegate.core.auth.interfaces import PolicyDecision, RuleExecutor
from rolegate.core.auth.passwords import PasswordHasher, BcryptPasswordHasher
from rolegate.core.auth.registry import RuleRegistry
from rolegate.core.auth.resolver import RBACResolver
from rolegate.core.auth.tokens import TokenGenerator, SecureTokenGenerator
from rolegate.core.config import Settings, get_settings
from rolegate.core.exceptions import DatabaseUnavailable, InvalidSession
from rolegate.core.interfaces.cache import CacheBackend
from rolegate.implementations.cache import RedisCacheBackend
from rolegate.migrations import MigrationRunner, MigrationScope
from rolegate.models import User
from rolegate.models.database import create_engine, create_session_factory
from rolegate.repositories import UserRepository
from rolegate.services.authenticator import CredentialAuthenticator
from rolegate.services.session import SessionManager
from rolegate.utils.deadline import with_deadline

logger = structlog.get_logger()


class RoleGate:
    """Facade over authentication, sessions, RBAC and migrations."""

    def __init__(
        self,
        engine: AsyncEngine,
        cache: CacheBackend,
        *,
        settings: Settings | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        password_hasher: PasswordHasher | None = None,
        token_generator: TokenGenerator | None = None,
        registry: RuleRegistry | None = None,
    ):
        self.settings = settings or get_settings()
        auth = self.settings.auth

        self.engine = engine
        self.cache = cache
        self.session_factory = session_factory or create_session_factory(engine)
        self.password_hasher = password_hasher or BcryptPasswordHasher(auth.password_hash_rounds)
        self.token_generator = token_generator or SecureTokenGenerator(auth.token_bytes)
        self.rules = registry or RuleRegistry()

        self.authenticator = CredentialAuthenticator(
            self.password_hasher,
            auth.login_method,
            timeout=auth.operation_timeout,
        )
        self.sessions = SessionManager(
            cache,
            self.token_generator,
            auth.session_expire_seconds,
            timeout=auth.operation_timeout,
        )
        self.resolver = RBACResolver(
            self.rules,
            auth.unknown_rule_policy,
            timeout=auth.operation_timeout,
        )
        self.migrations = MigrationRunner(
            engine,
            self.session_factory,
            self.password_hasher,
            limits=auth.validation,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides: Any) -> RoleGate:
        """Build the default stack: async SQLAlchemy engine plus Redis sessions."""
        settings = settings or get_settings()
        engine = create_engine(settings.database)
        cache = RedisCacheBackend(
            redis_url=str(settings.redis.url),
            prefix=settings.redis.key_prefix,
            default_ttl=settings.auth.session_expire_seconds,
            max_connections=settings.redis.max_connections,
        )
        return cls(engine, cache, settings=settings, **overrides)

    # ============================================================
    # CONFIGURATION
    # ============================================================

    @property
    def session_name(self) -> str:
        return self.settings.auth.session_name

    @property
    def session_expire_seconds(self) -> int:
        return self.settings.auth.session_expire_seconds

    def register_rule(self, executor: RuleExecutor) -> RuleExecutor:
        """Register a rule executor. Call before serving traffic."""
        return self.rules.register(executor)

    # ============================================================
    # LIFECYCLE
    # ============================================================

    async def startup(self) -> None:
        """Connect the cache, bring the schema up, apply pending migrations."""
        connect = getattr(self.cache, "connect", None)
        if connect is not None:
            await connect()
        await self.migrations.initialize()
        results = await self.migrations.run_registered()
        logger.info(
            "rolegate_started",
            migrations={key: status.value for key, status in results.items()},
            rules=self.rules.names(),
        )

    async def close(self) -> None:
        disconnect = getattr(self.cache, "disconnect", None)
        if disconnect is not None:
            await disconnect()
        await self.engine.dispose()

    # ============================================================
    # USERS AND SESSIONS
    # ============================================================

    async def register_user(
        self,
        email: str,
        username: str,
        password: str,
        is_active: bool = True,
    ) -> User:
        """
        Create a user with a hashed password in its own transaction.

        Raises InvalidInput if email, username or password break the
        configured limits; nothing is written in that case.
        """
        async with self.session_factory() as db:
            async with db.begin():
                scope = MigrationScope(db, self.password_hasher, self.settings.auth.validation)
                user = await scope.register_user(email, username, password, is_active)
        logger.info("user_registered", user_id=user.id)
        return user

    async def sign_in(self, identifier: str, password: str) -> tuple[User, str]:
        """Authenticate credentials and open a session."""
        async with self.session_factory() as db:
            user = await self.authenticator.authenticate(db, identifier, password)
        token = await self.sessions.issue(user)
        return user, token

    async def sign_out(self, token: str) -> None:
        await self.sessions.revoke(token)

    async def get_user_by_token(self, db: AsyncSession, token: str | None) -> User:
        """The active user behind a live session, else InvalidSession."""
        user_id = await self.sessions.verify(token)
        try:
            user = await with_deadline(
                UserRepository(db).get_by_id(user_id),
                self.settings.auth.operation_timeout,
                "load_session_user",
            )
        except SQLAlchemyError as exc:
            raise DatabaseUnavailable() from exc

        if user is None or not user.is_active:
            logger.info("session_user_rejected", user_id=user_id)
            raise InvalidSession()
        return user

    # ============================================================
    # AUTHORIZATION
    # ============================================================

    async def evaluate(
        self,
        db: AsyncSession,
        user: User,
        method: str,
        route: str,
        context: dict[str, Any] | None = None,
    ) -> PolicyDecision:
        return await self.resolver.evaluate(db, user, method, route, context)

    async def authorize(
        self,
        db: AsyncSession,
        user: User,
        method: str,
        route: str,
        context: dict[str, Any] | None = None,
    ) -> PolicyDecision:
        """Raise AuthorizationError unless ``user`` may call ``method`` on ``route``."""
        return await self.resolver.authorize(db, user, method, route, context)
