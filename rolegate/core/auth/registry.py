"""
Rule executor registry.

Maps rule names to the executors that evaluate them. Registration happens
at startup, before traffic is served; lookups afterwards are read-only.

Usage:
    registry = RuleRegistry()
    registry.register(OwnerOnly())

    @registry.rule("business_hours")
    async def business_hours(user, rule, context) -> bool:
        ...

    executor = registry.resolve("owner_only")
"""

from typing import Any, Awaitable, Callable, Iterable

import structlog

from rolegate.core.auth.interfaces import RuleExecutor
from rolegate.models import User, Rule

logger = structlog.get_logger()

RuleFunc = Callable[[User, Rule, dict[str, Any]], Awaitable[bool]]


class FunctionRuleExecutor(RuleExecutor):
    """Adapts a plain async function to RuleExecutor."""

    def __init__(self, name: str, func: RuleFunc):
        self._name = name
        self.func = func

    @property
    def name(self) -> str:
        return self._name

    async def execute(self, user: User, rule: Rule, context: dict[str, Any]) -> bool:
        return await self.func(user, rule, context)


class RuleRegistry:
    """Name to executor map. Last registration for a name wins."""

    def __init__(self, executors: Iterable[RuleExecutor] = ()):
        self._executors: dict[str, RuleExecutor] = {}
        for executor in executors:
            self.register(executor)

    def register(self, executor: RuleExecutor) -> RuleExecutor:
        """Register an executor under its own name."""
        name = executor.name
        if not name:
            raise ValueError("Rule executor must have a non-empty name")
        if name in self._executors and self._executors[name] is not executor:
            logger.info("rule_executor_replaced", rule=name)
        self._executors[name] = executor
        return executor

    def rule(self, name: str) -> Callable[[RuleFunc], RuleFunc]:
        """
        Decorator to register an async function as a rule executor.

        Usage:
            @registry.rule("owner_only")
            async def owner_only(user, rule, context) -> bool:
                ...
        """
        def decorator(func: RuleFunc) -> RuleFunc:
            self.register(FunctionRuleExecutor(name, func))
            return func
        return decorator

    def resolve(self, name: str) -> RuleExecutor | None:
        """Executor for ``name``, or None if nothing is registered."""
        return self._executors.get(name)

    def names(self) -> list[str]:
        return sorted(self._executors)

    def __contains__(self, name: object) -> bool:
        return name in self._executors

    def __len__(self) -> int:
        return len(self._executors)
