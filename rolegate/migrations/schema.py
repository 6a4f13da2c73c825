"""
Baseline schema and required index scripts.

All functions take a synchronous connection and are meant to be passed to
``AsyncConnection.run_sync``.
"""

from sqlalchemy import inspect
from sqlalchemy.engine import Connection

from rolegate.models import Base

# Every named index the schema declares. Startup checks the catalog for each.
REQUIRED_INDEXES: frozenset[str] = frozenset({
    "uq_users_email",
    "uq_users_username",
    "uq_roles_name",
    "uq_permissions_name",
    "uq_permissions_route_method",
    "uq_user_roles_role_user",
    "uq_role_permissions_role_permission",
    "uq_rules_name_type_parent",
    "ix_rules_type_parent",
    "uq_migration_history_key",
})


def apply_schema(conn: Connection) -> None:
    """Create missing tables (and their indexes). Idempotent."""
    Base.metadata.create_all(conn, checkfirst=True)


def existing_indexes(conn: Connection) -> set[str]:
    """Names of the indexes currently present on our tables."""
    inspector = inspect(conn)
    present: set[str] = set()
    for table in Base.metadata.sorted_tables:
        if not inspector.has_table(table.name):
            continue
        for index in inspector.get_indexes(table.name):
            if index.get("name"):
                present.add(index["name"])
    return present


def apply_indexes(conn: Connection) -> None:
    """Create every declared index that is missing."""
    for table in Base.metadata.sorted_tables:
        for index in table.indexes:
            index.create(conn, checkfirst=True)


def drop_schema(conn: Connection) -> None:
    """Drop every table this library owns."""
    Base.metadata.drop_all(conn, checkfirst=True)
