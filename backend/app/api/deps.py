"""
FastAPI Dependencies.

Key patterns:
1. DbSession: one AsyncSession per request, committed on success
2. ChatServiceDep: the chat pipeline, overridable in tests
3. Every domain query is scoped by user_id at the SQL level

The mobile client identifies the user by a plain user_id (body or query
parameter); authentication is handled by the hosted auth service in front
of this API.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.services.chat_service import ChatService, chat_service


def get_chat_service() -> ChatService:
    """Chat pipeline singleton."""
    return chat_service


# Type aliases for dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]


def require_user_id(user_id: str | None) -> str:
    """Raise 400 unless a non-blank user_id was supplied."""
    if user_id is None or not user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="user_id is required",
        )
    return user_id.strip()


async def get_user_resource_or_404(
    db: AsyncSession,
    model: type,
    resource_id,
    user_id: str,
):
    """
    Generic helper to fetch a user-owned resource by ID.

    Usage:
        record = await get_user_resource_or_404(db, MoodRecord, record_id, user_id)

    This enforces user scoping at the SQL level (WHERE user_id = ...).
    """
    result = await db.execute(
        select(model).where(model.id == resource_id, model.user_id == user_id)
    )
    resource = result.scalar_one_or_none()

    if resource is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Record not found")

    return resource
