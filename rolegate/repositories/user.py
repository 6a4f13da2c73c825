"""
User repository: lookups plus role and permission queries for a user.
"""

from sqlalchemy import select, or_

from rolegate.models import User, Role, Permission, UserRole, RolePermission
from rolegate.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def find_user(self, **criteria) -> User | None:
        """Find by exact match, e.g. ``find_user(email=...)``."""
        return await self.get_one(**criteria)

    async def find_by_username_or_email(self, identifier: str) -> User | None:
        stmt = (
            select(User)
            .where(or_(User.email == identifier, User.username == identifier))
            .order_by(User.id)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def can_access(self, user: User, method: str, route: str) -> bool:
        """
        Whether any role held by ``user`` grants ``method`` on ``route``.

        Direct grant check only; rules are evaluated elsewhere.
        """
        stmt = (
            select(Permission.id)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(UserRole, UserRole.role_id == RolePermission.role_id)
            .where(
                UserRole.user_id == user.id,
                Permission.method == method,
                Permission.route == route,
            )
            .limit(1)
        )
        return (await self.db.scalar(stmt)) is not None

    async def has_role(self, user: User, role_name: str) -> bool:
        stmt = (
            select(Role.id)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user.id, Role.name == role_name)
            .limit(1)
        )
        return (await self.db.scalar(stmt)) is not None

    async def has_permission(self, user: User, permission_name: str) -> bool:
        stmt = (
            select(Permission.id)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(UserRole, UserRole.role_id == RolePermission.role_id)
            .where(UserRole.user_id == user.id, Permission.name == permission_name)
            .limit(1)
        )
        return (await self.db.scalar(stmt)) is not None

    async def get_roles(self, user: User) -> list[Role]:
        stmt = (
            select(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user.id)
            .order_by(Role.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_permissions(self, user: User) -> list[Permission]:
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(UserRole, UserRole.role_id == RolePermission.role_id)
            .where(UserRole.user_id == user.id)
            .distinct()
            .order_by(Permission.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
