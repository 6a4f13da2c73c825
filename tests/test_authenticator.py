"""
Tests for credential authentication.
"""

import pytest
from sqlalchemy.exc import OperationalError

from rolegate.core.exceptions import InvalidCredentials, InfrastructureError
from rolegate.services.authenticator import CredentialAuthenticator, LoginMethod

TEST_PASSWORD = "testpassword123"


@pytest.fixture
def authenticator(hasher) -> CredentialAuthenticator:
    return CredentialAuthenticator(hasher, LoginMethod.EMAIL)


class UnreachableSession:
    """Session whose every query fails as if the store were down."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    async def scalar(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))


@pytest.mark.asyncio
async def test_authenticate_by_email(db, factory, authenticator):
    user = await factory.user(email="alice@example.com")

    result = await authenticator.authenticate(db, "alice@example.com", TEST_PASSWORD)

    assert result.id == user.id


@pytest.mark.asyncio
async def test_authenticate_by_username(db, factory, authenticator):
    user = await factory.user(username="alice")

    result = await authenticator.authenticate(
        db, "alice", TEST_PASSWORD, method=LoginMethod.USERNAME
    )

    assert result.id == user.id


@pytest.mark.asyncio
async def test_email_mode_ignores_username(db, factory, authenticator):
    await factory.user(username="alice")

    with pytest.raises(InvalidCredentials):
        await authenticator.authenticate(db, "alice", TEST_PASSWORD)


@pytest.mark.asyncio
@pytest.mark.parametrize("identifier", ["bob@example.com", "bob"])
async def test_authenticate_by_email_or_username(db, factory, hasher, identifier):
    user = await factory.user(email="bob@example.com", username="bob")
    authenticator = CredentialAuthenticator(hasher, "email_or_username")

    result = await authenticator.authenticate(db, identifier, TEST_PASSWORD)

    assert result.id == user.id


@pytest.mark.asyncio
async def test_failure_kinds_are_indistinguishable(db, factory, authenticator):
    await factory.user(email="carol@example.com")
    await factory.user(email="inactive@example.com", is_active=False)

    failures = []
    for identifier, password in [
        ("carol@example.com", "wrong-password"),
        ("nobody@example.com", TEST_PASSWORD),
        ("inactive@example.com", TEST_PASSWORD),
    ]:
        with pytest.raises(InvalidCredentials) as exc_info:
            await authenticator.authenticate(db, identifier, password)
        failures.append((type(exc_info.value), exc_info.value.message, exc_info.value.status_code))

    assert len(set(failures)) == 1


@pytest.mark.asyncio
async def test_store_failure_is_not_a_credential_error(authenticator):
    with pytest.raises(InfrastructureError) as exc_info:
        await authenticator.authenticate(UnreachableSession(), "a@example.com", "x")

    assert not isinstance(exc_info.value, InvalidCredentials)
