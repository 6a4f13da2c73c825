"""
Authentication and authorization primitives.

    from rolegate.core.auth import RuleRegistry, RBACResolver

    registry = RuleRegistry()

    @registry.rule("owner_only")
    async def owner_only(user, rule, context) -> bool:
        return context["query"].get("user_id") == str(user.id)

    resolver = RBACResolver(registry)
    await resolver.authorize(db, user, "GET", "/dashboard", context)
"""

from .interfaces import PolicyDecision, RuleExecutor
from .registry import RuleRegistry, FunctionRuleExecutor
from .resolver import RBACResolver, UnknownRulePolicy
from .passwords import PasswordHasher, BcryptPasswordHasher
from .tokens import TokenGenerator, SecureTokenGenerator

__all__ = [
    "PolicyDecision",
    "RuleExecutor",
    "RuleRegistry",
    "FunctionRuleExecutor",
    "RBACResolver",
    "UnknownRulePolicy",
    "PasswordHasher",
    "BcryptPasswordHasher",
    "TokenGenerator",
    "SecureTokenGenerator",
]
