"""Query window resolution and mood record lookup."""

import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import MoodRecord
from app.schemas.intent import Intent
from app.services.date_range import DateRange, calculate_date_range

logger = logging.getLogger(__name__)

DEFAULT_PERIOD_TYPE = "month"
DEFAULT_PERIOD_VALUE = 1


def _default_range(intent: Intent, now: datetime) -> DateRange:
    return calculate_date_range(
        intent.period_type or DEFAULT_PERIOD_TYPE,
        intent.period_value or DEFAULT_PERIOD_VALUE,
        now,
    ) or calculate_date_range(DEFAULT_PERIOD_TYPE, DEFAULT_PERIOD_VALUE, now)


def resolve_query_window(intent: Intent, now: datetime) -> DateRange:
    """
    Pick the date window to read records for.

    Resolution order:
    1. today/yesterday: that single day, ignoring any dates on the intent
    2. custom analysis with both dates: those dates verbatim
    3. otherwise: supplied dates where present, the rest derived from
       period_type/period_value (one month by default)
    """
    if intent.is_single_day:
        day = now.date()
        if intent.time_range == "yesterday":
            day -= timedelta(days=1)
        return DateRange(day, day)

    if intent.analysis_type == "custom" and intent.from_date and intent.to_date:
        return DateRange(intent.from_date, intent.to_date)

    derived = _default_range(intent, now)
    return DateRange(
        from_date=intent.from_date or derived.from_date,
        to_date=intent.to_date or derived.to_date,
    )


async def fetch_records(
    db: AsyncSession,
    user_id: str,
    window: DateRange,
) -> list[MoodRecord]:
    """All of the user's records inside the window, oldest first."""
    logger.info("Fetching records for %s: %s", user_id, window.display())
    stmt = (
        select(MoodRecord)
        .where(
            MoodRecord.user_id == user_id,
            MoodRecord.date >= window.from_date,
            MoodRecord.date <= window.to_date,
        )
        .order_by(MoodRecord.date.asc(), MoodRecord.created_at.asc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())
