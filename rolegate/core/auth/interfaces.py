"""
Authorization interfaces.

PolicyDecision is what the resolver hands back; RuleExecutor is the
extension point applications implement for custom checks.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from rolegate.models import User, Rule


# ============================================================
# POLICY DECISION
# ============================================================

@dataclass
class PolicyDecision:
    """
    Result of an RBAC evaluation.

    Attributes:
        allowed: Whether the request is permitted
        reason: Human-readable explanation (for errors/logging)
        rule_name: Rule that blocked the request, if any
        metadata: Additional data (rules evaluated, skipped, ...)
    """
    allowed: bool
    reason: str | None = None
    rule_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def allow(cls, reason: str | None = None, **metadata: Any) -> "PolicyDecision":
        return cls(allowed=True, reason=reason, metadata=metadata)

    @classmethod
    def deny(
        cls,
        reason: str = "Permission denied",
        rule_name: str | None = None,
        **metadata: Any,
    ) -> "PolicyDecision":
        return cls(allowed=False, reason=reason, rule_name=rule_name, metadata=metadata)


# ============================================================
# RULE EXECUTOR
# ============================================================

class RuleExecutor(ABC):
    """
    Custom check evaluated for rules whose name matches ``name``.

    Example:
        class OwnerOnly(RuleExecutor):
            name = "owner_only"

            async def execute(self, user, rule, context):
                return context["query"].get("user_id") == str(user.id)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key; must match ``Rule.name`` in the store."""
        ...

    @abstractmethod
    async def execute(
        self,
        user: User,
        rule: Rule,
        context: dict[str, Any],
    ) -> bool:
        """
        Return True to let the request through.

        Args:
            user: Authenticated user
            rule: The stored rule being evaluated
            context: Request data (method, route, query, path params, ...)
        """
        ...
