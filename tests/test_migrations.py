"""
Tests for schema bootstrap and named migrations.
"""

import pytest
import pytest_asyncio
from sqlalchemy import inspect, select, func, text
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rolegate.core.exceptions import MigrationHistoryError, MigrationSchemaError
from rolegate.migrations import (
    REQUIRED_INDEXES,
    MigrationRunner,
    MigrationScope,
    MigrationState,
    MigrationStatus,
    schema,
)
from rolegate.models import Base, MigrationRecord, Role, User
from rolegate.repositories import MigrationRepository


class Fault(BaseException):
    """Stands in for a crash that is not an ordinary error."""


@pytest.fixture
def runner(bare_engine, hasher) -> MigrationRunner:
    factory = async_sessionmaker(bare_engine, class_=AsyncSession, expire_on_commit=False)
    return MigrationRunner(bare_engine, factory, hasher)


@pytest_asyncio.fixture
async def ready_runner(runner) -> MigrationRunner:
    await runner.initialize()
    return runner


async def count(runner: MigrationRunner, model) -> int:
    async with runner.session_factory() as session:
        return await session.scalar(select(func.count()).select_from(model))


async def table_names(runner: MigrationRunner) -> list[str]:
    async with runner.engine.connect() as conn:
        return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())


def store_down(conn):
    raise OperationalError("DDL", {}, Exception("disk I/O error"))


# ============ initialize ============


def test_required_indexes_match_models():
    declared = {
        index.name
        for table in Base.metadata.sorted_tables
        for index in table.indexes
    }
    assert declared == REQUIRED_INDEXES


@pytest.mark.asyncio
async def test_initialize_creates_schema(runner):
    assert runner.state == MigrationState.UNINITIALIZED

    await runner.initialize()

    assert runner.state == MigrationState.READY
    assert {"users", "roles", "permissions", "rules", "migration_history"} <= set(
        await table_names(runner)
    )
    async with runner.engine.connect() as conn:
        present = await conn.run_sync(schema.existing_indexes)
    assert REQUIRED_INDEXES <= present


@pytest.mark.asyncio
async def test_initialize_is_idempotent(ready_runner):
    await ready_runner.initialize()
    assert ready_runner.state == MigrationState.READY


@pytest.mark.asyncio
async def test_initialize_recreates_missing_index(ready_runner):
    async with ready_runner.engine.begin() as conn:
        await conn.execute(text("DROP INDEX uq_roles_name"))
        present = await conn.run_sync(schema.existing_indexes)
    assert "uq_roles_name" not in present

    await ready_runner.initialize()

    async with ready_runner.engine.connect() as conn:
        present = await conn.run_sync(schema.existing_indexes)
    assert "uq_roles_name" in present
    assert ready_runner.state == MigrationState.READY


@pytest.mark.asyncio
async def test_schema_failure_is_fatal(runner, monkeypatch):
    monkeypatch.setattr(schema, "apply_schema", store_down)

    with pytest.raises(MigrationSchemaError) as exc_info:
        await runner.initialize()

    assert exc_info.value.step == "schema"
    assert runner.state == MigrationState.FAILED


@pytest.mark.asyncio
async def test_index_failure_tears_down_schema(runner, monkeypatch):
    monkeypatch.setattr(schema, "existing_indexes", lambda conn: set())
    monkeypatch.setattr(schema, "apply_indexes", store_down)

    with pytest.raises(MigrationSchemaError) as exc_info:
        await runner.initialize()

    assert exc_info.value.step == "indexes"
    assert runner.state == MigrationState.FAILED
    assert await table_names(runner) == []


@pytest.mark.asyncio
async def test_unwrapped_connection_error_is_fatal(runner, monkeypatch):
    def refused(conn):
        raise ConnectionRefusedError(111, "Connect call failed ('10.0.0.5', 5432)")

    monkeypatch.setattr(schema, "apply_schema", refused)

    with pytest.raises(MigrationSchemaError) as exc_info:
        await runner.initialize()

    assert exc_info.value.step == "schema"
    assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)
    assert runner.state == MigrationState.FAILED


@pytest.mark.asyncio
async def test_run_refused_before_initialize(runner):
    async def fn(scope):
        raise AssertionError("must not run")

    with pytest.raises(MigrationSchemaError):
        await runner.run("k", fn)


# ============ run ============


@pytest.mark.asyncio
async def test_run_applies_once(ready_runner):
    calls = {"fn": 0, "fn2": 0}

    async def fn(scope: MigrationScope):
        calls["fn"] += 1
        await scope.roles.create(name="admin")

    async def fn2(scope: MigrationScope):
        calls["fn2"] += 1

    assert await ready_runner.run("k", fn) == MigrationStatus.APPLIED
    assert await ready_runner.run("k", fn2) == MigrationStatus.ALREADY_APPLIED

    assert calls == {"fn": 1, "fn2": 0}
    assert await count(ready_runner, Role) == 1
    assert await count(ready_runner, MigrationRecord) == 1


@pytest.mark.asyncio
async def test_failed_run_leaves_nothing_behind(ready_runner):
    async def failing(scope: MigrationScope):
        await scope.roles.create(name="half_done")
        raise RuntimeError("boom")

    async def succeeding(scope: MigrationScope):
        await scope.roles.create(name="completed")

    with pytest.raises(RuntimeError, match="boom"):
        await ready_runner.run("k", failing)

    assert await count(ready_runner, Role) == 0
    assert await count(ready_runner, MigrationRecord) == 0

    assert await ready_runner.run("k", succeeding) == MigrationStatus.APPLIED
    assert await count(ready_runner, Role) == 1
    async with ready_runner.session_factory() as session:
        assert await MigrationRepository(session).is_applied("k")


@pytest.mark.asyncio
async def test_fault_rolls_back_before_propagating(ready_runner):
    async def crashing(scope: MigrationScope):
        await scope.roles.create(name="half_done")
        raise Fault()

    with pytest.raises(Fault):
        await ready_runner.run("k", crashing)

    assert await count(ready_runner, Role) == 0
    assert await count(ready_runner, MigrationRecord) == 0


@pytest.mark.asyncio
async def test_history_write_failure_rolls_back(ready_runner, monkeypatch):
    async def broken_record(self, key):
        raise IntegrityError("INSERT", {}, Exception("duplicate key"))

    monkeypatch.setattr(MigrationRepository, "record", broken_record)

    async def fn(scope: MigrationScope):
        await scope.roles.create(name="admin")

    with pytest.raises(MigrationHistoryError) as exc_info:
        await ready_runner.run("k", fn)

    assert exc_info.value.key == "k"
    assert await count(ready_runner, Role) == 0


@pytest.mark.asyncio
async def test_concurrent_duplicate_key_rolls_back(ready_runner, monkeypatch):
    async def winner(scope: MigrationScope):
        await scope.roles.create(name="winner")

    async def loser(scope: MigrationScope):
        await scope.roles.create(name="loser")

    assert await ready_runner.run("k", winner) == MigrationStatus.APPLIED

    # The loser checked history before the winner committed.
    async def not_yet_applied(self, key):
        return False

    monkeypatch.setattr(MigrationRepository, "is_applied", not_yet_applied)

    with pytest.raises(MigrationHistoryError) as exc_info:
        await ready_runner.run("k", loser)

    assert exc_info.value.key == "k"
    assert isinstance(exc_info.value.__cause__, IntegrityError)
    async with ready_runner.session_factory() as session:
        names = (await session.scalars(select(Role.name))).all()
    assert names == ["winner"]
    assert await count(ready_runner, MigrationRecord) == 1


@pytest.mark.asyncio
async def test_register_user_hashes_password(ready_runner, hasher):
    async def seed(scope: MigrationScope):
        await scope.register_user("admin@example.com", "admin", "himitsu")

    await ready_runner.run("seed", seed)

    async with ready_runner.session_factory() as session:
        admin = await session.scalar(select(User).where(User.username == "admin"))
    assert admin.password_hash != "himitsu"
    assert hasher.verify("himitsu", admin.password_hash)


# ============ registered migrations ============


@pytest.mark.asyncio
async def test_run_registered_in_order(ready_runner):
    order: list[str] = []

    @ready_runner.register("first")
    async def first(scope):
        order.append("first")

    async def second(scope):
        order.append("second")

    ready_runner.add("second", second)

    assert await ready_runner.run_registered() == {
        "first": MigrationStatus.APPLIED,
        "second": MigrationStatus.APPLIED,
    }
    assert await ready_runner.run_registered() == {
        "first": MigrationStatus.ALREADY_APPLIED,
        "second": MigrationStatus.ALREADY_APPLIED,
    }
    assert order == ["first", "second"]


def test_duplicate_registration_rejected(runner):
    async def fn(scope):
        pass

    runner.add("k", fn)
    with pytest.raises(ValueError):
        runner.add("k", fn)
