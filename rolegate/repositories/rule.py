"""
Rule repository.
"""

from sqlalchemy import select

from rolegate.models import Rule, RuleType, RuleParent, Role, Permission
from rolegate.repositories.base import BaseRepository
from rolegate.schemas.rbac import RuleCreate
from rolegate.schemas.validation import validate_input


class RuleRepository(BaseRepository[Rule]):
    model = Rule

    async def create_rule(self, name: str, parent: RuleParent) -> Rule:
        """Attach rule ``name`` to a role or a permission."""
        validate_input(RuleCreate, self.limits, name=name)
        rule = Rule.for_parent(name, parent)
        self.db.add(rule)
        await self.db.flush()
        await self.db.refresh(rule)
        return rule

    async def get_role_rules(self, roles: list[Role]) -> list[Rule]:
        """Rules attached to any of ``roles``, in creation order."""
        if not roles:
            return []
        stmt = (
            select(Rule)
            .where(
                Rule.rule_type == RuleType.ROLE,
                Rule.parent_id.in_([role.id for role in roles]),
            )
            .order_by(Rule.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_permission_rules(self, permission: Permission) -> list[Rule]:
        """Rules attached to ``permission``, in creation order."""
        stmt = (
            select(Rule)
            .where(
                Rule.rule_type == RuleType.PERMISSION,
                Rule.parent_id == permission.id,
            )
            .order_by(Rule.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
