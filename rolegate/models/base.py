"""
Base model classes and mixins.

- TimestampMixin: created_at, updated_at
- IntegerIDMixin: auto-increment integer primary key; ids grow with
  creation order, which RBAC rule evaluation relies on
"""

from datetime import datetime
from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    # Common type annotations - all datetimes are timezone-aware
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


# ============================================================
# TIMESTAMP MIXIN
# ============================================================

class TimestampMixin:
    """
    Mixin for created_at and updated_at timestamps.

    All timestamps are stored in UTC (timezone-aware).

    Usage:
        class MyModel(Base, IntegerIDMixin, TimestampMixin):
            __tablename__ = "my_table"
            ...
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


# ============================================================
# PRIMARY KEY MIXIN
# ============================================================

class IntegerIDMixin:
    """
    Mixin for an auto-increment integer primary key.

    Usage:
        class MyModel(Base, IntegerIDMixin):
            __tablename__ = "my_table"
            # No need to define id column
    """

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
