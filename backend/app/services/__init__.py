"""Services behind the HTTP routes."""

from app.services.chat_service import chat_service
from app.services.clock import clock
from app.services.llm import llm_client

__all__ = ["chat_service", "clock", "llm_client"]
