"""Mood record schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.base import BaseSchema, CamelSchema


class RecordBase(BaseSchema):
    """Base record schema."""

    date: date
    title: str | None = Field(None, max_length=255)
    notes: str | None = None
    fatigue: int | None = Field(None, ge=1, le=10)  # 1 = not tired, 10 = exhausted
    emotion: str | None = Field(None, max_length=50)


class RecordCreate(RecordBase):
    """Schema for saving a record."""

    user_id: str = Field(..., min_length=1, max_length=255)


class RecordRead(RecordBase):
    """Schema for reading record data."""

    id: UUID
    user_id: str
    created_at: datetime


class RecordSaveResponse(BaseModel):
    """Save confirmation."""

    success: bool = True
    message: str
    record: RecordRead


class RecordDeleteResponse(CamelSchema):
    """Delete confirmation carrying the removed row."""

    success: bool = True
    deleted_record: RecordRead
