"""
Migration history repository.
"""

from rolegate.models import MigrationRecord
from rolegate.repositories.base import BaseRepository


class MigrationRepository(BaseRepository[MigrationRecord]):
    model = MigrationRecord

    async def is_applied(self, key: str) -> bool:
        return await self.exists(migration_key=key)

    async def record(self, key: str) -> MigrationRecord:
        """Insert the history row for ``key``. Fails on a duplicate key."""
        return await self.create(migration_key=key)
