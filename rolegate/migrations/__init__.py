"""
Schema bootstrap and one-time data migrations.
"""

from rolegate.migrations.schema import REQUIRED_INDEXES
from rolegate.migrations.scope import MigrationScope
from rolegate.migrations.runner import (
    MigrationRunner,
    MigrationState,
    MigrationStatus,
    MigrationFn,
)

__all__ = [
    "REQUIRED_INDEXES",
    "MigrationScope",
    "MigrationRunner",
    "MigrationState",
    "MigrationStatus",
    "MigrationFn",
]
