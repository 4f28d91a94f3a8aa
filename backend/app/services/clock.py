"""Time source for all date math.

Every "now" in the chat pipeline comes from a Clock so that date windows
are computed in one reference zone and tests can pin the current time.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from app.config import get_settings

settings = get_settings()

KOREAN_WEEKDAYS = ("월요일", "화요일", "수요일", "목요일", "금요일", "토요일", "일요일")


class Clock:
    """Current time in the reference time zone."""

    def __init__(self, tz_name: str | None = None):
        self.tz = ZoneInfo(tz_name or settings.reference_timezone)

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone(self.tz)


class FixedClock(Clock):
    """Clock frozen at a given instant (naive values are taken as local)."""

    def __init__(self, at: datetime, tz_name: str | None = None):
        super().__init__(tz_name)
        self._at = at.replace(tzinfo=self.tz) if at.tzinfo is None else at.astimezone(self.tz)

    def now(self) -> datetime:
        return self._at


def korean_weekday(moment: datetime) -> str:
    """Weekday name in Korean, e.g. 월요일."""
    return KOREAN_WEEKDAYS[moment.weekday()]


# Singleton instance
clock = Clock()
