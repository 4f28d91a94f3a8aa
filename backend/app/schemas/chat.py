"""Pydantic schemas for chat operations."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.schemas.base import BaseSchema, CamelSchema
from app.schemas.charts import ChartDescriptor


# Request schemas
class ChatRequest(BaseModel):
    """Request to send a chat message.

    ``message`` is checked for blankness in the route so the caller gets the
    uniform 400 body rather than a validation error listing.
    """

    message: str | None = Field(None, max_length=10000)
    user_id: str | None = Field(None, max_length=255)
    recent_messages: list[dict[str, Any]] | None = None


# Response schemas
class ChatResponse(CamelSchema):
    """Answer to one chat message."""

    ai_response: str
    analysis_type: str | None = None
    date_range: str | None = None
    is_analysis: bool = False
    chat_history: list[dict[str, Any]] = Field(default_factory=list)
    chart_data: ChartDescriptor | None = None


class ChatHistoryItem(BaseSchema):
    """One past exchange."""

    user_chat: str
    ai_answer: str | None = None
    created_at: datetime


class ChatHistoryResponse(CamelSchema):
    """Past exchanges for a user, oldest first."""

    chat_history: list[ChatHistoryItem]
    count: int
