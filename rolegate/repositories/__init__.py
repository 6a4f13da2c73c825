"""
Repository pattern for data access.
"""

from rolegate.repositories.base import BaseRepository
from rolegate.repositories.user import UserRepository
from rolegate.repositories.role import RoleRepository
from rolegate.repositories.permission import PermissionRepository
from rolegate.repositories.rule import RuleRepository
from rolegate.repositories.migration import MigrationRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "RoleRepository",
    "PermissionRepository",
    "RuleRepository",
    "MigrationRepository",
]
