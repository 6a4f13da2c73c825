"""
Database models.
"""

from .base import Base, TimestampMixin, IntegerIDMixin
from .user import User
from .rbac import (
    Role,
    Permission,
    UserRole,
    RolePermission,
    Rule,
    RuleType,
    RoleRule,
    PermissionRule,
    RuleParent,
)
from .migration import MigrationRecord

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "IntegerIDMixin",
    # Models
    "User",
    "Role",
    "Permission",
    "UserRole",
    "RolePermission",
    "Rule",
    "MigrationRecord",
    # Rule parents
    "RuleType",
    "RoleRule",
    "PermissionRule",
    "RuleParent",
]
