"""
Declarative base and column mixins for the engine's tables.

Sessions are mutable (title, updated_at); messages and analytics rows are
append-only and only carry a creation time.

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Server-side UTC clock used for every persisted timestamp."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Registry for every engine table; init_db creates from its metadata."""


class UUIDMixin:
    """UUID v4 primary key, generated client side on insert."""

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )


class CreatedAtMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )


class TimestampMixin(CreatedAtMixin):
    """
    Creation plus last-activity time.

    ``updated_at`` moves on every UPDATE issued through the ORM or a Core
    ``update()`` on the table, which is how session activity is tracked.
    """

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
