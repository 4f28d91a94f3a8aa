"""Saved chart persistence with a per-user cap."""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.db.models import SavedChart
from app.schemas.charts import ChartDescriptor
from app.services.date_range import DateRange

logger = logging.getLogger(__name__)
settings = get_settings()


def chart_name_for(chart: ChartDescriptor, window: DateRange) -> str:
    """Name shown in the saved chart list, e.g. ``2025-10-01 감정 차트``."""
    return f"{window.from_date.isoformat()} {chart.type} 감정 차트"


async def save_chart(
    db: AsyncSession,
    user_id: str,
    chart: ChartDescriptor,
    window: DateRange,
) -> SavedChart:
    """Insert a generated chart. The caller commits."""
    saved = SavedChart(
        user_id=user_id,
        chart_name=chart_name_for(chart, window),
        chart_type=chart.type,
        chart_data=chart.data or {},
        chart_config=chart.options,
        period_start=window.from_date,
        period_end=window.to_date,
    )
    db.add(saved)
    await db.flush()
    return saved


async def cleanup_old_charts(
    db: AsyncSession,
    user_id: str,
    limit: int | None = None,
) -> int:
    """
    Delete the user's oldest charts beyond the cap.

    Returns:
        Number of charts deleted
    """
    limit = settings.saved_chart_limit if limit is None else limit

    count_stmt = select(func.count()).select_from(SavedChart).where(SavedChart.user_id == user_id)
    total = (await db.execute(count_stmt)).scalar() or 0
    excess = total - limit
    if excess <= 0:
        return 0

    stmt = (
        select(SavedChart)
        .where(SavedChart.user_id == user_id)
        .order_by(SavedChart.created_at.asc(), SavedChart.id.asc())
        .limit(excess)
    )
    oldest = (await db.execute(stmt)).scalars().all()
    for chart in oldest:
        await db.delete(chart)
    await db.flush()

    logger.info("Pruned %d saved charts for %s", len(oldest), user_id)
    return len(oldest)


async def delete_chart(db: AsyncSession, chart_id: UUID, user_id: str) -> bool:
    """Delete one chart owned by the user. Returns False if there was none."""
    result = await db.execute(
        select(SavedChart).where(SavedChart.id == chart_id, SavedChart.user_id == user_id)
    )
    chart = result.scalar_one_or_none()
    if chart is None:
        return False
    await db.delete(chart)
    await db.flush()
    return True
