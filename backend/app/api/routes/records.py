"""Mood record routes."""

from uuid import UUID

from fastapi import APIRouter
from sqlalchemy import select

from app.api.deps import DbSession, get_user_resource_or_404, require_user_id
from app.db.models import MoodRecord
from app.schemas.base import ErrorResponse
from app.schemas.records import (
    RecordCreate,
    RecordDeleteResponse,
    RecordRead,
    RecordSaveResponse,
)

router = APIRouter(prefix="/record", tags=["records"])


@router.get("", response_model=list[RecordRead], responses={400: {"model": ErrorResponse}})
async def list_records(
    db: DbSession,
    user_id: str | None = None,
) -> list[RecordRead]:
    """List the user's records, newest first."""
    user_id = require_user_id(user_id)
    query = (
        select(MoodRecord)
        .where(MoodRecord.user_id == user_id)
        .order_by(MoodRecord.date.desc(), MoodRecord.created_at.desc())
    )
    result = await db.execute(query)
    return [RecordRead.model_validate(r) for r in result.scalars()]


@router.post("", response_model=RecordSaveResponse, responses={400: {"model": ErrorResponse}})
async def create_record(
    data: RecordCreate,
    db: DbSession,
) -> RecordSaveResponse:
    """Save a fatigue/emotion record."""
    record = MoodRecord(**data.model_dump())
    db.add(record)
    await db.commit()
    await db.refresh(record)
    return RecordSaveResponse(message="Record saved", record=RecordRead.model_validate(record))


@router.delete(
    "/{record_id}",
    response_model=RecordDeleteResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_record(
    record_id: UUID,
    db: DbSession,
    user_id: str | None = None,
) -> RecordDeleteResponse:
    """Delete one of the user's records and echo it back."""
    user_id = require_user_id(user_id)
    record = await get_user_resource_or_404(db, MoodRecord, record_id, user_id)
    deleted = RecordRead.model_validate(record)
    await db.delete(record)
    await db.commit()
    return RecordDeleteResponse(deleted_record=deleted)
