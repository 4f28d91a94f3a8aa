"""
SQLAlchemy 2.0 Models for Haru.

Uses modern declarative syntax with Mapped[] type annotations.
Column types are dialect-neutral (PostgreSQL in production, SQLite in tests);
JSON columns upgrade to JSONB on PostgreSQL.
"""

import datetime as dt
from datetime import date, datetime, timezone
from enum import Enum as PyEnum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    DateTime,
    Index,
    SmallInteger,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================


class ChartType(str, PyEnum):
    """Chart shapes produced by the chart generator."""

    LINE = "line"
    BAR = "bar"
    PIE = "pie"
    RADAR = "radar"
    MESSAGE = "message"


# =============================================================================
# MODELS
# =============================================================================


class ChatMessage(Base):
    """
    One inbound chat message and the answer given to it.

    Inserted with ai_answer NULL before any model call; the answer is
    written afterwards by a background task.
    """

    __tablename__ = "chat_messages"
    __table_args__ = (
        Index("idx_chat_messages_user_id_created_at", "user_id", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    user_chat: Mapped[str] = mapped_column(Text, nullable=False)
    ai_answer: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
    )


class MoodRecord(Base):
    """
    Daily fatigue/emotion journal entry written by the parent.

    fatigue uses a 1-10 scale where higher means more tired.
    """

    __tablename__ = "records"
    __table_args__ = (
        CheckConstraint(
            "fatigue IS NULL OR (fatigue >= 1 AND fatigue <= 10)",
            name="records_fatigue_range",
        ),
        Index("idx_records_user_id_date", "user_id", "date"),
    )

    id: Mapped[UUID] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    fatigue: Mapped[Optional[int]] = mapped_column(SmallInteger, nullable=True)
    emotion: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
    )


class SavedChart(Base):
    """
    Chart generated by the chat pipeline and kept for the user.

    The number of rows per user is capped; see services.chart_store.
    """

    __tablename__ = "saved_charts"
    __table_args__ = (
        Index("idx_saved_charts_user_id_created_at", "user_id", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    chart_name: Mapped[str] = mapped_column(String(255), nullable=False)
    chart_type: Mapped[str] = mapped_column(String(20), nullable=False)
    chart_data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    chart_config: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    period_start: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    period_end: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
    )
