"""
Migration runner.

Brings the schema up at startup and applies one-time, named data
migrations (seed users, roles, permissions, rules) exactly once.

State machine:
    UNINITIALIZED -> SCHEMA_APPLIED -> INDEXES_VALIDATED -> READY
    any failure -> teardown -> FAILED (do not serve traffic)

Usage:
    runner = MigrationRunner(engine, session_factory, hasher)

    @runner.register("init_admin")
    async def init_admin(scope: MigrationScope) -> None:
        await scope.register_user("admin@example.com", "admin", "changeme")

    await runner.initialize()
    await runner.run_registered()
"""

import enum
from typing import Awaitable, Callable, NoReturn

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from rolegate.core.auth.passwords import PasswordHasher
from rolegate.core.config import ValidationSettings
from rolegate.core.exceptions import (
    DatabaseUnavailable,
    MigrationAlreadyApplied,
    MigrationHistoryError,
    MigrationSchemaError,
)
from rolegate.migrations import schema
from rolegate.migrations.scope import MigrationScope
from rolegate.repositories import MigrationRepository

logger = structlog.get_logger()

MigrationFn = Callable[[MigrationScope], Awaitable[None]]

# Drivers such as asyncpg raise OSError on refused connections, unwrapped.
STORE_ERRORS = (SQLAlchemyError, OSError)


class MigrationState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    SCHEMA_APPLIED = "schema_applied"
    INDEXES_VALIDATED = "indexes_validated"
    READY = "ready"
    FAILED = "failed"


class MigrationStatus(str, enum.Enum):
    """Outcome of a single ``run``."""
    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"


class MigrationRunner:
    """Schema bootstrap plus transactional, idempotent named migrations."""

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession],
        hasher: PasswordHasher,
        limits: ValidationSettings | None = None,
    ):
        self.engine = engine
        self.session_factory = session_factory
        self.hasher = hasher
        self.limits = limits
        self._migrations: dict[str, MigrationFn] = {}
        self._state = MigrationState.UNINITIALIZED

    @property
    def state(self) -> MigrationState:
        return self._state

    # ============================================================
    # SCHEMA
    # ============================================================

    async def initialize(self) -> None:
        """
        Apply the baseline schema, then make sure every required index exists.

        Raises MigrationSchemaError after tearing the schema down if any step
        fails.
        """
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(schema.apply_schema)
        except STORE_ERRORS as exc:
            await self._abort("schema", exc)
        self._state = MigrationState.SCHEMA_APPLIED
        logger.info("migration_schema_applied")

        try:
            async with self.engine.connect() as conn:
                present = await conn.run_sync(schema.existing_indexes)
        except STORE_ERRORS as exc:
            await self._abort("index_catalog", exc)

        missing = schema.REQUIRED_INDEXES - present
        if missing:
            logger.warning("migration_indexes_missing", missing=sorted(missing))
            try:
                async with self.engine.begin() as conn:
                    await conn.run_sync(schema.apply_indexes)
            except STORE_ERRORS as exc:
                await self._abort("indexes", exc)
        self._state = MigrationState.INDEXES_VALIDATED
        logger.info("migration_indexes_validated", created=len(missing))

        self._state = MigrationState.READY

    async def teardown(self) -> None:
        """Drop all owned tables. Errors are logged, not raised."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(schema.drop_schema)
        except STORE_ERRORS as exc:
            logger.error("migration_teardown_failed", error=str(exc))
            return
        logger.warning("migration_teardown_complete")

    async def _abort(self, step: str, exc: Exception) -> NoReturn:
        logger.error("migration_initialize_failed", step=step, error=str(exc))
        await self.teardown()
        self._state = MigrationState.FAILED
        raise MigrationSchemaError(step) from exc

    # ============================================================
    # NAMED MIGRATIONS
    # ============================================================

    def register(self, key: str) -> Callable[[MigrationFn], MigrationFn]:
        """Decorator form of ``add``."""
        def decorator(fn: MigrationFn) -> MigrationFn:
            self.add(key, fn)
            return fn
        return decorator

    def add(self, key: str, fn: MigrationFn) -> None:
        """Queue a migration for ``run_registered``. Keys are unique."""
        if key in self._migrations:
            raise ValueError(f"Migration '{key}' is already registered")
        self._migrations[key] = fn

    @property
    def registered(self) -> list[str]:
        return list(self._migrations)

    async def run_registered(self) -> dict[str, MigrationStatus]:
        """Run queued migrations one after another, in registration order."""
        results: dict[str, MigrationStatus] = {}
        for key, fn in self._migrations.items():
            results[key] = await self.run(key, fn)
        return results

    async def run(self, key: str, fn: MigrationFn) -> MigrationStatus:
        """
        Apply ``fn`` once under ``key``.

        ``fn`` and the history record share one transaction: both commit or
        neither does. Errors raised by ``fn`` propagate after rollback.
        """
        if self._state != MigrationState.READY:
            raise MigrationSchemaError(
                self._state.value,
                f"Cannot run migration '{key}' while runner is {self._state.value}",
            )

        async with self.session_factory() as session:
            try:
                async with session.begin():
                    await self._apply(session, key, fn)
            except MigrationAlreadyApplied:
                logger.info("migration_already_applied", key=key)
                return MigrationStatus.ALREADY_APPLIED

        logger.info("migration_applied", key=key)
        return MigrationStatus.APPLIED

    async def _apply(self, session: AsyncSession, key: str, fn: MigrationFn) -> None:
        history = MigrationRepository(session)
        try:
            applied = await history.is_applied(key)
        except STORE_ERRORS as exc:
            raise DatabaseUnavailable() from exc
        if applied:
            raise MigrationAlreadyApplied(key)

        await fn(MigrationScope(session, self.hasher, self.limits))

        try:
            await history.record(key)
        except SQLAlchemyError as exc:
            logger.error("migration_history_failed", key=key, error=str(exc))
            raise MigrationHistoryError(key) from exc
