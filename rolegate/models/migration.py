"""
Migration history model.
"""

from datetime import datetime
from sqlalchemy import String, DateTime, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, IntegerIDMixin


class MigrationRecord(Base, IntegerIDMixin):
    """One row per successfully applied migration key."""

    __tablename__ = "migration_history"
    __table_args__ = (
        Index("uq_migration_history_key", "migration_key", unique=True),
    )

    migration_key: Mapped[str] = mapped_column(String(255), nullable=False)
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<MigrationRecord {self.migration_key}>"
