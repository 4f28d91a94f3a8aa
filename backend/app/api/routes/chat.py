"""API routes for the chat pipeline."""

import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import ChatServiceDep, DbSession
from app.config import get_settings, sanitize_error
from app.schemas.base import ErrorResponse
from app.schemas.chat import ChatHistoryItem, ChatHistoryResponse, ChatRequest, ChatResponse

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post(
    "",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def send_chat_message(
    request: ChatRequest,
    background_tasks: BackgroundTasks,
    db: DbSession,
    service: ChatServiceDep,
):
    """
    Answer a chat message.

    The message is classified, records are looked up when the question needs
    them, and the reply (plus an optional chart) is returned. The answer and
    chart are stored after the response is sent.
    """
    message = (request.message or "").strip()
    if not message:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is required")
    user_id = (request.user_id or "").strip() or settings.default_user_id

    try:
        message_id = await service.record_inbound(db, user_id, message)
    except SQLAlchemyError as e:
        logger.exception("User message insert failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "메시지 저장 실패", "details": sanitize_error(e)},
        )

    outcome = await service.respond(db, user_id, message)
    background_tasks.add_task(service.persist_outcome, message_id, user_id, outcome)

    return outcome.response


@router.get("/history", response_model=ChatHistoryResponse)
async def get_chat_history(
    db: DbSession,
    service: ChatServiceDep,
    user_id: str | None = None,
):
    """Past messages and answers for a user, oldest first."""
    user_id = (user_id or "").strip() or settings.default_user_id
    messages = await service.get_history(db, user_id)
    items = [ChatHistoryItem.model_validate(m) for m in messages]
    return ChatHistoryResponse(chat_history=items, count=len(items))
