"""Season day clock for the monthly Game Pass track."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

SEASON_LENGTH_DAYS = 30
_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True, slots=True)
class Season:
    """A single monthly track; starts at midnight on the 1st, server time."""

    epoch_start: datetime
    length_days: int = SEASON_LENGTH_DAYS

    @property
    def key(self) -> date:
        """Date of the epoch, used to scope claims to this season."""

        return self.epoch_start.date()

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.epoch_start.year, self.epoch_start.month)[1]

    @property
    def cycle_length(self) -> int:
        """Days that are reachable on schedule this month (28..30)."""

        return min(self.days_in_month, self.length_days)

    @property
    def ends_at(self) -> datetime:
        """Start of the next season."""

        year = self.epoch_start.year + (1 if self.epoch_start.month == 12 else 0)
        month = 1 if self.epoch_start.month == 12 else self.epoch_start.month + 1
        return self.epoch_start.replace(year=year, month=month, day=1)


def _require_aware(now: datetime) -> None:
    if now.tzinfo is None or now.tzinfo.utcoffset(now) is None:
        raise ValueError("Season computations require a timezone-aware datetime")


def current_season(
    now: datetime,
    tz: ZoneInfo | timezone | str = timezone.utc,
    *,
    length_days: int = SEASON_LENGTH_DAYS,
) -> Season:
    """Return the season containing ``now`` for the given server timezone."""

    _require_aware(now)
    zone = ZoneInfo(tz) if isinstance(tz, str) else tz
    local_now = now.astimezone(zone)
    epoch = local_now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return Season(epoch_start=epoch, length_days=length_days)


def current_day(now: datetime, season: Season) -> int:
    """Season day in ``[1, season.length_days]``; pure and global."""

    _require_aware(now)
    # Whole calendar days in the season's zone, so DST shifts never move the boundary.
    local_now = now.astimezone(season.epoch_start.tzinfo)
    day = (local_now.date() - season.key) // _ONE_DAY + 1
    return max(1, min(day, season.length_days))


def days_remaining(now: datetime, season: Season) -> int:
    return max(0, season.cycle_length - current_day(now, season))


__all__ = [
    "SEASON_LENGTH_DAYS",
    "Season",
    "current_day",
    "current_season",
    "days_remaining",
]
