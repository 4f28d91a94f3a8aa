"""API routes package."""

from app.api.routes import chat, records, system

__all__ = [
    "chat",
    "records",
    "system",
]
