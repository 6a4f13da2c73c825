"""
Role repository: role CRUD, assignment to users and permission grants.
"""

from sqlalchemy import select, delete

from rolegate.models import User, Role, Permission, UserRole, RolePermission
from rolegate.repositories.base import BaseRepository
from rolegate.schemas.rbac import RoleCreate
from rolegate.schemas.validation import validate_input


class RoleRepository(BaseRepository[Role]):
    model = Role

    async def create(self, **data) -> Role:
        """Create a role. Raises InvalidInput if the name is out of bounds."""
        validate_input(RoleCreate, self.limits, name=data.get("name"))
        return await super().create(**data)

    async def get_by_name(self, name: str) -> Role | None:
        return await self.get_one(name=name)

    async def assign(self, role: Role, user: User) -> None:
        """Give ``role`` to ``user``."""
        self.db.add(UserRole(user_id=user.id, role_id=role.id))
        await self.db.flush()

    async def revoke(self, role: Role, user: User) -> bool:
        """Take ``role`` away from ``user``. Returns False if not assigned."""
        result = await self.db.execute(
            delete(UserRole).where(
                UserRole.user_id == user.id,
                UserRole.role_id == role.id,
            )
        )
        return result.rowcount > 0

    async def add_permission(self, role: Role, permission: Permission) -> None:
        self.db.add(RolePermission(role_id=role.id, permission_id=permission.id))
        await self.db.flush()

    async def remove_permission(self, role: Role, permission: Permission) -> bool:
        result = await self.db.execute(
            delete(RolePermission).where(
                RolePermission.role_id == role.id,
                RolePermission.permission_id == permission.id,
            )
        )
        return result.rowcount > 0

    async def get_roles_for_resource(
        self,
        user: User,
        method: str,
        route: str,
    ) -> list[Role]:
        """Roles of ``user`` that grant ``method`` on ``route``, oldest first."""
        stmt = (
            select(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .join(RolePermission, RolePermission.role_id == Role.id)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .where(
                UserRole.user_id == user.id,
                Permission.method == method,
                Permission.route == route,
            )
            .order_by(Role.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
