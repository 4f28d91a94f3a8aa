"""Chat pipeline: intent → needs-data → records → reply → chart → persistence."""

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import get_settings
from app.db.models import ChatMessage, MoodRecord
from app.db.session import AsyncSessionLocal
from app.schemas.charts import ChartDescriptor
from app.schemas.chat import ChatResponse
from app.services.chart_generator import NO_CHART_DATA_MESSAGE, generate_emotion_chart
from app.services.chart_store import cleanup_old_charts, save_chart
from app.services.clock import Clock, clock as default_clock
from app.services.date_range import DateRange
from app.services.intent_classifier import (
    DataNeedClassifier,
    IntentClassifier,
    data_need_classifier,
    intent_classifier,
)
from app.services.metrics import background_write_failures_total
from app.services.record_fetcher import fetch_records, resolve_query_window
from app.services.response_composer import NO_RECORDS_REPLY, ResponseComposer, response_composer

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class ChatOutcome:
    """Everything the background persistence step needs after responding."""

    response: ChatResponse
    window: DateRange | None = None

    @property
    def chart(self) -> ChartDescriptor | None:
        return self.response.chart_data

    @property
    def should_save_chart(self) -> bool:
        return self.chart is not None and not self.chart.no_data and self.window is not None


def record_to_row(record: MoodRecord) -> dict[str, Any]:
    """Plain row consumed by the composer and chart generator."""
    return {
        "date": record.date.isoformat() if record.date else None,
        "title": record.title,
        "notes": record.notes,
        "fatigue": record.fatigue,
        "emotion": record.emotion,
    }


class ChatService:
    """Runs one chat request end to end."""

    def __init__(
        self,
        intents: IntentClassifier | None = None,
        data_need: DataNeedClassifier | None = None,
        composer: ResponseComposer | None = None,
        clock: Clock | None = None,
        session_factory: async_sessionmaker | None = None,
    ):
        self.intents = intents or intent_classifier
        self.data_need = data_need or data_need_classifier
        self.composer = composer or response_composer
        self.clock = clock or default_clock
        self.session_factory = session_factory or AsyncSessionLocal

    async def record_inbound(self, db: AsyncSession, user_id: str, message: str) -> UUID:
        """
        Store the inbound message with no answer yet.

        Committed immediately so the post-response update, which runs on its
        own session, can find the row.
        """
        chat_message = ChatMessage(user_id=user_id, user_chat=message, ai_answer=None)
        db.add(chat_message)
        await db.commit()
        return chat_message.id

    async def respond(self, db: AsyncSession, user_id: str, message: str) -> ChatOutcome:
        """
        Build the answer to one message.

        Args:
            db: Database session for the records lookup
            user_id: Owner of the records
            message: Trimmed, non-empty user message

        Returns:
            ChatOutcome with the response body and the queried window
        """
        now = self.clock.now()
        intent = await self.intents.classify(message, now)

        if not await self.data_need.needs_data(message, intent):
            reply = await self.composer.reply_directly(message, now)
            return ChatOutcome(
                response=ChatResponse(
                    ai_response=reply,
                    analysis_type="conversation",
                    date_range=None,
                    is_analysis=False,
                    chart_data=None,
                )
            )

        window = resolve_query_window(intent, now)
        rows = [record_to_row(r) for r in await fetch_records(db, user_id, window)]
        analysis_type = intent.analysis_type or "period"

        if not rows:
            return ChatOutcome(
                response=ChatResponse(
                    ai_response=NO_RECORDS_REPLY,
                    analysis_type=analysis_type,
                    date_range=window.display(),
                    is_analysis=intent.is_analysis_request,
                    chart_data=ChartDescriptor.empty(NO_CHART_DATA_MESSAGE),
                ),
                window=window,
            )

        analysis = await self.composer.analyze_records(rows)
        chart = generate_emotion_chart(rows, message) if intent.needs_chart else None

        return ChatOutcome(
            response=ChatResponse(
                ai_response=analysis,
                analysis_type=analysis_type,
                date_range=window.display(),
                is_analysis=intent.is_analysis_request,
                chart_data=chart,
            ),
            window=window,
        )

    async def persist_outcome(self, message_id: UUID, user_id: str, outcome: ChatOutcome) -> None:
        """
        Write the answer (and chart) after the response has been sent.

        Runs on a fresh session. Failures are logged and dropped; nothing is
        retried.
        """
        async with self.session_factory() as db:
            try:
                await db.execute(
                    update(ChatMessage)
                    .where(ChatMessage.id == message_id)
                    .values(ai_answer=outcome.response.ai_response)
                )
                await db.commit()
            except Exception:
                await db.rollback()
                background_write_failures_total.labels("answer").inc()
                logger.exception("AI answer update failed for message %s", message_id)

            if not outcome.should_save_chart:
                return

            try:
                await save_chart(db, user_id, outcome.chart, outcome.window)
                await cleanup_old_charts(db, user_id)
                await db.commit()
            except Exception:
                await db.rollback()
                background_write_failures_total.labels("chart").inc()
                logger.exception("Chart save failed for user %s", user_id)

    async def get_history(self, db: AsyncSession, user_id: str, limit: int | None = None) -> list[ChatMessage]:
        """Most recent exchanges for the user, returned oldest first."""
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.user_id == user_id)
            .order_by(ChatMessage.created_at.desc())
            .limit(limit or settings.chat_history_limit)
        )
        result = await db.execute(stmt)
        return list(reversed(result.scalars().all()))


# Singleton instance
chat_service = ChatService()
