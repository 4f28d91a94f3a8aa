"""Intent record produced by the intent classifiers.

The language model answers in camelCase JSON; anything it returns is
validated here. Unknown enum values and unparseable numbers or dates are
dropped to ``None`` instead of failing the whole record.
"""

from datetime import date
from typing import Any, Literal, get_args

from pydantic import field_validator

from app.schemas.base import CamelSchema

TimeRange = Literal["today", "yesterday", "last_week", "last_month", "recent", "custom"]
AnalysisType = Literal["period", "custom", "specific"]
PeriodType = Literal["day", "week", "month", "year"]


def _choice_or_none(value: Any, allowed: tuple[str, ...]) -> str | None:
    if isinstance(value, str) and value in allowed:
        return value
    return None


class Intent(CamelSchema):
    """What the user is asking for, as far as the pipeline cares."""

    is_analysis_request: bool = False
    needs_records: bool = False
    needs_chat_history: bool = False
    needs_chart: bool = False
    is_simple_greeting: bool = False
    time_range: TimeRange | None = None
    topic: str | None = None
    analysis_type: AnalysisType | None = None
    period_type: PeriodType | None = None
    period_value: int | None = None
    from_date: date | None = None
    to_date: date | None = None

    @field_validator("time_range", mode="before")
    @classmethod
    def _coerce_time_range(cls, value: Any) -> str | None:
        return _choice_or_none(value, get_args(TimeRange))

    @field_validator("analysis_type", mode="before")
    @classmethod
    def _coerce_analysis_type(cls, value: Any) -> str | None:
        return _choice_or_none(value, get_args(AnalysisType))

    @field_validator("period_type", mode="before")
    @classmethod
    def _coerce_period_type(cls, value: Any) -> str | None:
        return _choice_or_none(value, get_args(PeriodType))

    @field_validator("topic", mode="before")
    @classmethod
    def _coerce_topic(cls, value: Any) -> str | None:
        if not isinstance(value, str) or value.strip().lower() in ("", "null", "none"):
            return None
        return value.strip()

    @field_validator("period_value", mode="before")
    @classmethod
    def _coerce_period_value(cls, value: Any) -> int | None:
        if isinstance(value, bool):
            return None
        try:
            number = int(value)
        except (TypeError, ValueError, OverflowError):
            return None
        return number if number > 0 else None

    @field_validator("from_date", "to_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> date | None:
        if isinstance(value, date):
            return value
        if not isinstance(value, str):
            return None
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None

    @property
    def is_single_day(self) -> bool:
        """today/yesterday windows are always recomputed locally."""
        return self.time_range in ("today", "yesterday")


class DataNeed(CamelSchema):
    """Reply of the needs-data check."""

    needs_data: bool
