"""Recurring schedule calculation for reports and automations.

Weekdays are numbered 0 = Sunday .. 6 = Saturday throughout the data model.
Time-of-day is a wall-clock value interpreted in the zone of the reference
instant (or the zone passed explicitly); results are always aware UTC.
"""

import calendar
import enum
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional

from paralello.core.errors import ValidationError

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")


class CadenceKind(str, enum.Enum):
    """Recurrence rule."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def parse_time_of_day(value) -> time:
    """Parse an ``HH:mm`` string into a ``time``."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    match = _TIME_RE.match((value or "").strip()) if isinstance(value, str) else None
    if not match:
        raise ValidationError(f"Invalid time of day {value!r}, expected HH:mm")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValidationError(f"Time of day out of range: {value!r}")
    return time(hour=hour, minute=minute)


def sunday_weekday(day: date) -> int:
    """Weekday of ``day`` with 0 = Sunday."""
    return (day.weekday() + 1) % 7


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_weekday(value) -> int:
    if not _is_int(value) or not 0 <= value <= 6:
        raise ValidationError(f"Weekday must be an integer 0-6, got {value!r}")
    return value


def validate_day_of_month(value) -> int:
    if not _is_int(value) or not 1 <= value <= 31:
        raise ValidationError(f"Day of month must be an integer 1-31, got {value!r}")
    return value


def validate_weekdays(values: Iterable[int]) -> List[int]:
    """Normalize an automation weekday set to a sorted list of unique days."""
    days = sorted({validate_weekday(v) for v in values or []})
    if not days:
        raise ValidationError("At least one weekday is required")
    return days


@dataclass(frozen=True)
class Cadence:
    """Recurrence rule plus time-of-day for a scheduled item."""

    kind: CadenceKind
    time_of_day: time
    weekday: Optional[int] = None
    day_of_month: Optional[int] = None

    def __post_init__(self):
        try:
            kind = CadenceKind(self.kind)
        except ValueError:
            raise ValidationError(f"Unknown cadence {self.kind!r}") from None
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "time_of_day", parse_time_of_day(self.time_of_day))

        if kind == CadenceKind.WEEKLY:
            validate_weekday(self.weekday)
            if self.day_of_month is not None:
                raise ValidationError("Weekly cadence must not set day_of_month")
        elif kind == CadenceKind.MONTHLY:
            validate_day_of_month(self.day_of_month)
            if self.weekday is not None:
                raise ValidationError("Monthly cadence must not set weekday")
        elif self.weekday is not None or self.day_of_month is not None:
            raise ValidationError("Daily cadence takes neither weekday nor day_of_month")

    @classmethod
    def daily(cls, time_of_day) -> "Cadence":
        return cls(CadenceKind.DAILY, time_of_day)

    @classmethod
    def weekly(cls, weekday: int, time_of_day) -> "Cadence":
        return cls(CadenceKind.WEEKLY, time_of_day, weekday=weekday)

    @classmethod
    def monthly(cls, day_of_month: int, time_of_day) -> "Cadence":
        return cls(CadenceKind.MONTHLY, time_of_day, day_of_month=day_of_month)

    @classmethod
    def from_report(cls, report) -> "Cadence":
        """Build the cadence of a ``ScheduledReport`` row."""
        return cls(
            kind=report.frequency,
            time_of_day=report.time_of_day,
            weekday=report.weekday,
            day_of_month=report.day_of_month,
        )


def _clamped_date(year: int, month: int, day_of_month: int) -> date:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day_of_month, last_day))


def compute_next_run(cadence: Cadence, now: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Compute the next execution instant of ``cadence`` after ``now``.

    ``now`` may be naive (treated as UTC) or aware. When ``tz`` is given the
    time-of-day is applied in that zone, otherwise in the zone of ``now``.
    Monthly days past the end of a month are clamped to its last day.

    Returns an aware UTC datetime strictly greater than ``now``.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local_now = now.astimezone(tz) if tz is not None else now
    zone = local_now.tzinfo
    now_utc = now.astimezone(timezone.utc)
    today = local_now.date()

    def at(day: date) -> datetime:
        return datetime.combine(day, cadence.time_of_day, tzinfo=zone).astimezone(timezone.utc)

    if cadence.kind == CadenceKind.DAILY:
        candidate = at(today + timedelta(days=1))
    elif cadence.kind == CadenceKind.WEEKLY:
        days_ahead = (cadence.weekday - sunday_weekday(today)) % 7
        candidate = at(today + timedelta(days=days_ahead))
        if candidate <= now_utc:
            candidate = at(today + timedelta(days=days_ahead + 7))
    else:
        candidate = at(_clamped_date(today.year, today.month, cadence.day_of_month))
        if candidate <= now_utc:
            year, month = (today.year + 1, 1) if today.month == 12 else (today.year, today.month + 1)
            candidate = at(_clamped_date(year, month, cadence.day_of_month))

    return candidate


def utc_naive(value: datetime) -> datetime:
    """Convert an aware datetime to the naive UTC form stored in the database."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def start_of_local_day(now: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Midnight of the local calendar day containing ``now``, as aware UTC."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local_now = now.astimezone(tz) if tz is not None else now
    midnight = datetime.combine(local_now.date(), time.min, tzinfo=local_now.tzinfo)
    return midnight.astimezone(timezone.utc)
