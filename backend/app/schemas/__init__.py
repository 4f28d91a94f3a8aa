"""Pydantic schemas for API request/response validation."""

from app.schemas.base import ErrorResponse
from app.schemas.charts import ChartDescriptor
from app.schemas.chat import (
    ChatHistoryItem,
    ChatHistoryResponse,
    ChatRequest,
    ChatResponse,
)
from app.schemas.intent import Intent
from app.schemas.records import (
    RecordCreate,
    RecordDeleteResponse,
    RecordRead,
    RecordSaveResponse,
)

__all__ = [
    # Errors
    "ErrorResponse",
    # Charts
    "ChartDescriptor",
    # Chat
    "ChatRequest",
    "ChatResponse",
    "ChatHistoryItem",
    "ChatHistoryResponse",
    # Intent
    "Intent",
    # Records
    "RecordCreate",
    "RecordRead",
    "RecordSaveResponse",
    "RecordDeleteResponse",
]
