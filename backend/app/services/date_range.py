"""Period descriptor → concrete calendar date window."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar window."""

    from_date: date
    to_date: date

    def display(self) -> str:
        if self.from_date == self.to_date:
            return self.from_date.isoformat()
        return f"{self.from_date.isoformat()} ~ {self.to_date.isoformat()}"


def _period_delta(period_type: str | None, period_value: int) -> timedelta | relativedelta | None:
    if period_type == "day":
        return timedelta(days=period_value)
    if period_type == "week":
        return timedelta(weeks=period_value)
    if period_type == "month":
        return relativedelta(months=period_value)
    if period_type == "year":
        return relativedelta(years=period_value)
    return None


def calculate_date_range(
    period_type: str | None,
    period_value: int,
    now: datetime | date,
) -> DateRange | None:
    """
    Window ending at ``now`` and reaching back ``period_value`` periods.

    Month and year steps are calendar steps (Mar 31 minus one month is
    Feb 28/29). Returns None for an unrecognised ``period_type``; callers
    choose their own fallback period.

    Args:
        period_type: One of day, week, month, year
        period_value: Number of periods to go back
        now: Anchor instant, already in the reference time zone

    Returns:
        DateRange or None, also when the step leaves the calendar range
    """
    today = now.date() if isinstance(now, datetime) else now
    try:
        delta = _period_delta(period_type, period_value)
        if delta is None:
            return None
        return DateRange(from_date=today - delta, to_date=today)
    except (OverflowError, ValueError):
        return None
