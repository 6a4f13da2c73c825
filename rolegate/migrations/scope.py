"""
Transaction scope handed to migration functions.
"""

from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.auth.passwords import PasswordHasher
from rolegate.core.config import ValidationSettings
from rolegate.models import User
from rolegate.repositories import (
    UserRepository,
    RoleRepository,
    PermissionRepository,
    RuleRepository,
)
from rolegate.schemas.user import UserCreate
from rolegate.schemas.validation import validate_input


@dataclass
class MigrationScope:
    """
    Everything a migration may touch, bound to the migration's transaction.

    Writes made through ``session`` or the repositories commit together with
    the history record, or not at all. Do not commit or roll back here.

    Usage:
        @runner.register("init_admin")
        async def init_admin(scope: MigrationScope) -> None:
            admin = await scope.register_user("admin@example.com", "admin", "changeme")
            role = await scope.roles.create(name="admin")
            await scope.roles.assign(role, admin)
    """

    session: AsyncSession
    hasher: PasswordHasher
    limits: ValidationSettings | None = None
    users: UserRepository = field(init=False)
    roles: RoleRepository = field(init=False)
    permissions: PermissionRepository = field(init=False)
    rules: RuleRepository = field(init=False)

    def __post_init__(self) -> None:
        self.users = UserRepository(self.session, self.limits)
        self.roles = RoleRepository(self.session, self.limits)
        self.permissions = PermissionRepository(self.session, self.limits)
        self.rules = RuleRepository(self.session, self.limits)

    async def register_user(
        self,
        email: str,
        username: str,
        password: str,
        is_active: bool = True,
    ) -> User:
        """Validate, then create a user with a hashed password."""
        data = validate_input(
            UserCreate,
            self.limits,
            email=email,
            username=username,
            password=password,
        )
        return await self.users.create(
            email=data.email,
            username=data.username,
            password_hash=self.hasher.hash(data.password),
            is_active=is_active,
        )
