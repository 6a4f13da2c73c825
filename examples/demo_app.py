"""
Demo application - an administrator bootstrap migration, a custom rule and
protected routes.

This file is a REFERENCE for developers embedding rolegate.

TO RUN:
1. Start PostgreSQL and Redis (see DB_URL / REDIS_URL settings)
2. uvicorn examples.demo_app:app

Then:
    curl -X POST localhost:8000/auth/login/cookie -c jar \\
         -H 'content-type: application/json' \\
         -d '{"identifier": "administrator@example.com", "password": "himitsu"}'
    curl -b jar localhost:8000/secret
    curl -b jar 'localhost:8000/reports?user_id=1'
"""

from typing import Any

from fastapi import Depends

from rolegate import RoleGate, RuleExecutor, MigrationScope, AuthStrategy
from rolegate.api.dependencies import CookieUser, rbac_protected
from rolegate.main import create_app
from rolegate.models import User, Rule, PermissionRule


# ============================================================
# RULES
# ============================================================

class DashboardOwnerRule(RuleExecutor):
    """Only lets a user read reports addressed to themselves (?user_id=<own id>)."""

    name = "rule_dashboard_owner"

    async def execute(self, user: User, rule: Rule, context: dict[str, Any]) -> bool:
        raw = context.get("query", {}).get("user_id")
        try:
            return int(raw) == user.id
        except (TypeError, ValueError):
            return False


# ============================================================
# MIGRATIONS
# ============================================================

async def init_admin(scope: MigrationScope) -> None:
    """Administrator holding the c_level role, which grants the secret routes."""
    admin = await scope.register_user(
        email="administrator@example.com",
        username="administrator",
        password="himitsu",
    )

    secret = await scope.permissions.create_permission(
        name="secret_read",
        method="GET",
        route="/secret",
        description="Super secret information",
    )
    reports = await scope.permissions.create_permission(
        name="reports_read",
        method="GET",
        route="/reports",
        description="Per-user reports",
    )

    c_level = await scope.roles.create(
        name="c_level",
        description="C level in this company",
    )
    await scope.roles.add_permission(c_level, secret)
    await scope.roles.add_permission(c_level, reports)
    await scope.roles.assign(c_level, admin)

    await scope.rules.create_rule("rule_dashboard_owner", PermissionRule(reports.id))


# ============================================================
# APP
# ============================================================

gate = RoleGate.from_settings()
gate.register_rule(DashboardOwnerRule())
gate.migrations.add("init_admin", init_admin)

app = create_app(gate)


@app.get("/secret")
async def secret(user: User = Depends(rbac_protected(AuthStrategy.COOKIE))):
    """RBAC protected: needs a role granting GET /secret."""
    return {"secret_message": "This is super secret information"}


@app.get("/reports")
async def reports(user: User = Depends(rbac_protected(AuthStrategy.COOKIE))):
    """RBAC protected plus the dashboard owner rule."""
    return {"report_for": user.username}


@app.get("/dashboard")
async def dashboard(user: CookieUser):
    """Authenticated only, no RBAC."""
    return {
        "secret_message": "Hello from the private dashboard",
        "header": f"Hi {user.username}",
    }
