"""
RBAC resolver.

Decides whether an authenticated user may call ``method`` on ``route``.

Evaluation order:
1. Direct grant: some role of the user holds a permission for the exact
   (method, route) pair. No grant means deny, and no rule runs.
2. Collect the roles that grant the resource and the permission itself.
3. Run role rules (for those roles) then permission rules, each group in
   creation order. The first rule whose executor returns False denies.
4. Allow.

Usage:
    resolver = RBACResolver(registry)
    decision = await resolver.evaluate(db, user, "GET", "/dashboard")
    if not decision.allowed:
        ...

    # Or raise AuthorizationError on denial
    await resolver.authorize(db, user, "GET", "/dashboard", context)
"""

import enum
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.auth.interfaces import PolicyDecision
from rolegate.core.auth.registry import RuleRegistry
from rolegate.core.exceptions import AuthorizationError, DatabaseUnavailable
from rolegate.models import User, Rule
from rolegate.repositories import (
    UserRepository,
    RoleRepository,
    PermissionRepository,
    RuleRepository,
)
from rolegate.utils.deadline import with_deadline

logger = structlog.get_logger()


class UnknownRulePolicy(str, enum.Enum):
    """What to do with a stored rule that has no registered executor."""
    ALLOW = "allow"
    DENY = "deny"


class RBACResolver:
    """
    Role-based access control with custom rules.

    Store failures and timeouts raise InfrastructureError subclasses; they
    never turn into a decision.
    """

    def __init__(
        self,
        registry: RuleRegistry,
        unknown_rule_policy: UnknownRulePolicy | str = UnknownRulePolicy.ALLOW,
        timeout: float | None = None,
    ):
        self.registry = registry
        self.unknown_rule_policy = UnknownRulePolicy(unknown_rule_policy)
        self.timeout = timeout

    async def evaluate(
        self,
        db: AsyncSession,
        user: User,
        method: str,
        route: str,
        context: dict[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> PolicyDecision:
        """Evaluate access for ``user``. Never raises on denial."""
        method = method.upper()
        context = dict(context or {})
        context.setdefault("method", method)
        context.setdefault("route", route)

        return await with_deadline(
            self._evaluate(db, user, method, route, context),
            timeout if timeout is not None else self.timeout,
            "rbac_evaluate",
        )

    async def authorize(
        self,
        db: AsyncSession,
        user: User,
        method: str,
        route: str,
        context: dict[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> PolicyDecision:
        """Like evaluate, but raise AuthorizationError on denial."""
        decision = await self.evaluate(db, user, method, route, context, timeout=timeout)
        if not decision.allowed:
            raise AuthorizationError(decision.reason, rule_name=decision.rule_name)
        return decision

    # ============================================================
    # PIPELINE
    # ============================================================

    async def _evaluate(
        self,
        db: AsyncSession,
        user: User,
        method: str,
        route: str,
        context: dict[str, Any],
    ) -> PolicyDecision:
        try:
            rules = await self._collect_rules(db, user, method, route)
        except SQLAlchemyError as exc:
            logger.error(
                "rbac_store_error",
                user_id=user.id,
                method=method,
                route=route,
                error=str(exc),
            )
            raise DatabaseUnavailable() from exc

        if rules is None:
            logger.info("rbac_denied", user_id=user.id, method=method, route=route)
            return PolicyDecision.deny(f"No permission for {method} {route}")

        return await self._run_rules(user, rules, context)

    async def _collect_rules(
        self,
        db: AsyncSession,
        user: User,
        method: str,
        route: str,
    ) -> list[Rule] | None:
        """Rules to run, or None when there is no direct grant."""
        if not await UserRepository(db).can_access(user, method, route):
            return None

        roles = await RoleRepository(db).get_roles_for_resource(user, method, route)
        permission = await PermissionRepository(db).get_by_resource(method, route)
        if permission is None:
            # Grant removed between queries
            return None

        rule_repo = RuleRepository(db)
        role_rules = await rule_repo.get_role_rules(roles)
        permission_rules = await rule_repo.get_permission_rules(permission)
        return role_rules + permission_rules

    async def _run_rules(
        self,
        user: User,
        rules: list[Rule],
        context: dict[str, Any],
    ) -> PolicyDecision:
        evaluated: list[str] = []
        skipped: list[str] = []

        for rule in rules:
            executor = self.registry.resolve(rule.name)
            if executor is None:
                logger.warning(
                    "rule_executor_missing",
                    rule=rule.name,
                    policy=self.unknown_rule_policy.value,
                )
                if self.unknown_rule_policy == UnknownRulePolicy.DENY:
                    return PolicyDecision.deny(
                        f"No executor registered for rule {rule.name}",
                        rule_name=rule.name,
                    )
                skipped.append(rule.name)
                continue

            evaluated.append(rule.name)
            if not await executor.execute(user, rule, context):
                logger.info("rbac_denied_by_rule", user_id=user.id, rule=rule.name)
                return PolicyDecision.deny(f"Blocked by rule {rule.name}", rule_name=rule.name)

        return PolicyDecision.allow(
            "Access granted",
            rules_evaluated=evaluated,
            rules_skipped=skipped,
        )
