# spinbot/utils/dt.py
from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class CheckInClock:
    """
    Decides which calendar day a check-in belongs to. The day rolls over at
    midnight in the configured timezone, not at UTC midnight.
    """

    def __init__(self, timezone: str = "UTC") -> None:
        try:
            self._tz = ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise RuntimeError(f"Unknown TIMEZONE: {timezone!r}") from e
        self.timezone = timezone

    def now(self) -> datetime:
        return datetime.now(tz=self._tz)

    def today(self) -> date:
        return self.now().date()
