"""SQLAlchemy declarative base shared by registry models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Generate UTC timestamp for database defaults.

    Uses a named function instead of lambda for SQLAlchemy 2.0 compatibility.
    """
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models.

    Plain ``dict`` annotations map to JSONB so records can carry small
    structured payloads such as stack outputs.
    """

    type_annotation_map: dict[type, Any] = {
        dict[str, str]: JSONB,
    }


class CreatedAtMixin:
    """Mixin providing an insert-time ``created_at`` column.

    ``updated_at`` is owned by the domain aggregates that carry it, since
    conditional writes must persist the exact value the aggregate computed.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=utc_now,
        nullable=False,
    )
