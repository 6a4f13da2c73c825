"""
RBAC models.

Schema:
    roles ─┬─< user_roles >── users
           └─< role_permissions >── permissions

    rules: (name, rule_type, parent_id) where parent_id points at a role or
    a permission depending on rule_type.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from sqlalchemy import String, Text, Integer, ForeignKey, Index, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, IntegerIDMixin, TimestampMixin


class RuleType(str, enum.Enum):
    """What kind of entity a rule is attached to."""
    ROLE = "role"
    PERMISSION = "permission"


@dataclass(frozen=True)
class RoleRule:
    """Rule parent: applies when the caller holds this role for the resource."""
    role_id: int


@dataclass(frozen=True)
class PermissionRule:
    """Rule parent: applies whenever this permission is being exercised."""
    permission_id: int


RuleParent = Union[RoleRule, PermissionRule]


class Role(Base, IntegerIDMixin, TimestampMixin):
    """Named collection of permissions."""

    __tablename__ = "roles"
    __table_args__ = (
        Index("uq_roles_name", "name", unique=True),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Role {self.name}>"


class Permission(Base, IntegerIDMixin, TimestampMixin):
    """
    Grant for one resource: an HTTP method plus an exact route string.

    Routes are matched verbatim, no templating.
    """

    __tablename__ = "permissions"
    __table_args__ = (
        Index("uq_permissions_name", "name", unique=True),
        Index("uq_permissions_route_method", "route", "method", unique=True),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    method: Mapped[str] = mapped_column(String(16), nullable=False)
    route: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Permission {self.name} {self.method} {self.route}>"


class UserRole(Base, TimestampMixin):
    """User to role assignment."""

    __tablename__ = "user_roles"
    __table_args__ = (
        Index("uq_user_roles_role_user", "role_id", "user_id", unique=True),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    role_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    )


class RolePermission(Base, TimestampMixin):
    """Role to permission grant."""

    __tablename__ = "role_permissions"
    __table_args__ = (
        Index("uq_role_permissions_role_permission", "role_id", "permission_id", unique=True),
    )

    role_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    permission_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    )


class Rule(Base, IntegerIDMixin, TimestampMixin):
    """
    Named custom check attached to a role or a permission.

    ``name`` is the key of the executor that evaluates it. ``parent_id`` has
    no foreign key because it targets different tables per ``rule_type``;
    use ``parent`` for the typed view.
    """

    __tablename__ = "rules"
    __table_args__ = (
        Index("uq_rules_name_type_parent", "name", "rule_type", "parent_id", unique=True),
        Index("ix_rules_type_parent", "rule_type", "parent_id"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    rule_type: Mapped[RuleType] = mapped_column(
        SAEnum(RuleType, native_enum=False, length=16),
        nullable=False,
    )
    parent_id: Mapped[int] = mapped_column(Integer, nullable=False)

    @property
    def parent(self) -> RuleParent:
        if self.rule_type == RuleType.ROLE:
            return RoleRule(self.parent_id)
        return PermissionRule(self.parent_id)

    @classmethod
    def for_parent(cls, name: str, parent: RuleParent) -> "Rule":
        """Build a rule from its typed parent."""
        if isinstance(parent, RoleRule):
            return cls(name=name, rule_type=RuleType.ROLE, parent_id=parent.role_id)
        if isinstance(parent, PermissionRule):
            return cls(name=name, rule_type=RuleType.PERMISSION, parent_id=parent.permission_id)
        raise TypeError(f"Unsupported rule parent: {parent!r}")

    def __repr__(self) -> str:
        return f"<Rule {self.name} {self.rule_type.value}:{self.parent_id}>"
