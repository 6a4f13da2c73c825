"""
Permission repository.
"""

from rolegate.models import Permission
from rolegate.repositories.base import BaseRepository
from rolegate.schemas.rbac import PermissionCreate
from rolegate.schemas.validation import validate_input


class PermissionRepository(BaseRepository[Permission]):
    model = Permission

    async def create_permission(
        self,
        name: str,
        method: str,
        route: str,
        description: str | None = None,
    ) -> Permission:
        """Create a permission; the method is stored upper-cased."""
        validate_input(PermissionCreate, self.limits, name=name)
        return await self.create(
            name=name,
            method=method.upper(),
            route=route,
            description=description,
        )

    async def get_by_name(self, name: str) -> Permission | None:
        return await self.get_one(name=name)

    async def get_by_resource(self, method: str, route: str) -> Permission | None:
        return await self.get_one(method=method.upper(), route=route)
