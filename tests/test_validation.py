"""
Tests for user and RBAC input validation.
"""

import pytest
from sqlalchemy import func, select

from rolegate.core.config import ValidationSettings
from rolegate.core.exceptions import InvalidInput
from rolegate.core.gate import RoleGate
from rolegate.models import Role, RoleRule, User
from rolegate.repositories import PermissionRepository, RoleRepository, RuleRepository
from rolegate.schemas import UserCreate, validate_input


async def user_count(gate: RoleGate) -> int:
    async with gate.session_factory() as session:
        return await session.scalar(select(func.count()).select_from(User))


# ============ Users ============


@pytest.mark.asyncio
async def test_register_user_accepts_valid_fields(gate: RoleGate):
    user = await gate.register_user("valid@example.com", "valid_user", "secret123")

    assert user.id is not None
    assert user.username == "valid_user"
    assert await user_count(gate) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email,username,password,field",
    [
        ("not-an-email", "valid_user", "secret123", "email"),
        ("valid@example.com", "a b!", "secret123", "username"),
        ("valid@example.com", "abc", "secret123", "username"),
        ("valid@example.com", "u" * 21, "secret123", "username"),
        ("valid@example.com", "valid_user", "x", "password"),
        ("valid@example.com", "valid_user", "pass word!", "password"),
    ],
)
async def test_register_user_rejects_invalid_fields(gate: RoleGate, email, username, password, field):
    with pytest.raises(InvalidInput) as exc_info:
        await gate.register_user(email, username, password)

    assert exc_info.value.status_code == 422
    assert [e["field"] for e in exc_info.value.details["errors"]] == [field]
    assert await user_count(gate) == 0


@pytest.mark.asyncio
async def test_rejected_password_is_not_echoed(gate: RoleGate):
    with pytest.raises(InvalidInput) as exc_info:
        await gate.register_user("valid@example.com", "valid_user", "bad pass!")

    assert "bad pass!" not in str(exc_info.value)
    assert "bad pass!" not in repr(exc_info.value.details)


def test_limits_are_configurable():
    relaxed = ValidationSettings(username_min_length=2, password_pattern=r"^.*$")

    data = validate_input(
        UserCreate,
        relaxed,
        email="ab@example.com",
        username="ab",
        password="pass word!",
    )

    assert data.username == "ab"
    with pytest.raises(InvalidInput):
        validate_input(UserCreate, email="ab@example.com", username="ab", password="secret123")


# ============ Roles, permissions, rules ============


@pytest.mark.asyncio
async def test_role_name_length_is_checked(db):
    roles = RoleRepository(db)

    with pytest.raises(InvalidInput) as exc_info:
        await roles.create(name="adm")

    assert "role name" in exc_info.value.message
    assert await db.scalar(select(func.count()).select_from(Role)) == 0


@pytest.mark.asyncio
async def test_permission_name_length_is_checked(db):
    with pytest.raises(InvalidInput):
        await PermissionRepository(db).create_permission("p" * 21, "GET", "/reports")


@pytest.mark.asyncio
async def test_rule_name_length_is_checked(db, factory):
    role = await factory.role()

    with pytest.raises(InvalidInput):
        await RuleRepository(db).create_rule("own", RoleRule(role.id))


@pytest.mark.asyncio
async def test_repository_limits_override_defaults(db):
    roles = RoleRepository(db, ValidationSettings(role_name_min_length=2))

    role = await roles.create(name="ops")

    assert role.name == "ops"
