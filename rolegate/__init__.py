"""
rolegate - embeddable role-based access control.

    from rolegate import RoleGate, RuleExecutor, MigrationScope

    gate = RoleGate.from_settings()
"""

from rolegate.core.gate import RoleGate
from rolegate.core.auth import PolicyDecision, RuleExecutor, RuleRegistry
from rolegate.migrations import MigrationScope, MigrationStatus
from rolegate.services import AuthStrategy, LoginMethod

__version__ = "0.1.0"

__all__ = [
    "RoleGate",
    "PolicyDecision",
    "RuleExecutor",
    "RuleRegistry",
    "MigrationScope",
    "MigrationStatus",
    "AuthStrategy",
    "LoginMethod",
]
