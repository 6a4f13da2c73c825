"""
Pytest fixtures for testing.

Provides:
- In-memory SQLite engine (with and without the schema)
- Async database session
- In-memory session cache driven by a fake clock
- RoleGate and HTTP test client wired to both
- Factory fixture for users, roles, permissions and rules
"""

from typing import AsyncGenerator
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi import Depends
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from rolegate.api.dependencies import rbac_protected
from rolegate.core.auth.passwords import BcryptPasswordHasher
from rolegate.core.config import Settings, AuthSettings
from rolegate.core.gate import RoleGate
from rolegate.implementations.cache import MemoryCacheBackend
from rolegate.main import create_app
from rolegate.models import (
    Base,
    User,
    Role,
    Permission,
    Rule,
    RuleParent,
)
from rolegate.repositories import (
    UserRepository,
    RoleRepository,
    PermissionRepository,
    RuleRepository,
)
from rolegate.services.session import AuthStrategy


# Test database URL (SQLite in-memory for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "testpassword123"


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def hasher() -> BcryptPasswordHasher:
    """Cheap bcrypt cost for fast tests."""
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="testing",
        log_format="text",
        auth=AuthSettings(
            session_name="test_session",
            session_expire_seconds=60,
            password_hash_rounds=4,
            login_method="email",
            unknown_rule_policy="allow",
            operation_timeout=5.0,
            cookie_secure=False,
        ),
    )


@pytest_asyncio.fixture(scope="function")
async def bare_engine():
    """Engine over an empty database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_engine(bare_engine):
    """Engine with the full schema created."""
    async with bare_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield bare_engine


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> MemoryCacheBackend:
    return MemoryCacheBackend(clock=clock)


@pytest.fixture
def gate(db_engine, session_factory, cache, settings, hasher) -> RoleGate:
    return RoleGate(
        db_engine,
        cache,
        settings=settings,
        session_factory=session_factory,
        password_hasher=hasher,
    )


@pytest.fixture
def app(gate):
    """App with two RBAC protected routes, one per auth strategy."""
    app = create_app(gate)

    @app.get("/reports")
    async def reports(user: User = Depends(rbac_protected(AuthStrategy.TOKEN))):
        return {"report_for": user.username}

    @app.get("/cookie/reports")
    async def cookie_reports(user: User = Depends(rbac_protected(AuthStrategy.COOKIE))):
        return {"report_for": user.username}

    return app


@pytest_asyncio.fixture(scope="function")
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============ Factory Fixtures ============


class RBACFactory:
    """Creates users and RBAC data in the bound session (flush, no commit)."""

    def __init__(self, db: AsyncSession, hasher: BcryptPasswordHasher):
        self.db = db
        self.hasher = hasher

    async def user(
        self,
        email: str | None = None,
        username: str | None = None,
        password: str = TEST_PASSWORD,
        is_active: bool = True,
    ) -> User:
        suffix = uuid4().hex[:8]
        return await UserRepository(self.db).create(
            email=email or f"user-{suffix}@example.com",
            username=username or f"user_{suffix}",
            password_hash=self.hasher.hash(password),
            is_active=is_active,
        )

    async def role(self, name: str | None = None) -> Role:
        return await RoleRepository(self.db).create(name=name or f"role_{uuid4().hex[:8]}")

    async def permission(
        self,
        method: str = "GET",
        route: str = "/reports",
        name: str | None = None,
    ) -> Permission:
        return await PermissionRepository(self.db).create_permission(
            name=name or f"perm_{uuid4().hex[:8]}",
            method=method,
            route=route,
        )

    async def grant(
        self,
        user: User,
        method: str = "GET",
        route: str = "/reports",
    ) -> tuple[Role, Permission]:
        """New role holding a new permission for (method, route), assigned to user."""
        roles = RoleRepository(self.db)
        role = await self.role()
        permission = await self.permission(method, route)
        await roles.add_permission(role, permission)
        await roles.assign(role, user)
        return role, permission

    async def rule(self, name: str, parent: RuleParent) -> Rule:
        return await RuleRepository(self.db).create_rule(name, parent)


@pytest.fixture
def factory(db, hasher) -> RBACFactory:
    return RBACFactory(db, hasher)
