"""
Weekly schedule helpers: which weekdays to train, what to train on each,
and which calendar week a moment falls into for a given user.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo


class Weekday(enum.IntEnum):
    """ISO weekday numbers, Monday first."""

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7

    @property
    def label(self) -> str:
        return self.name.capitalize()


# Sessions spread over Monday-Saturday; Sunday is always a rest day.
TRAINING_DAYS: dict[int, tuple[Weekday, ...]] = {
    3: (Weekday.MONDAY, Weekday.WEDNESDAY, Weekday.FRIDAY),
    4: (Weekday.MONDAY, Weekday.TUESDAY, Weekday.THURSDAY, Weekday.FRIDAY),
    5: (
        Weekday.MONDAY,
        Weekday.TUESDAY,
        Weekday.WEDNESDAY,
        Weekday.FRIDAY,
        Weekday.SATURDAY,
    ),
    6: (
        Weekday.MONDAY,
        Weekday.TUESDAY,
        Weekday.WEDNESDAY,
        Weekday.THURSDAY,
        Weekday.FRIDAY,
        Weekday.SATURDAY,
    ),
}

MUSCLE_FOCUS: dict[Weekday, frozenset[str]] = {
    Weekday.MONDAY: frozenset({"chest", "triceps"}),
    Weekday.WEDNESDAY: frozenset({"back", "biceps"}),
    Weekday.FRIDAY: frozenset({"legs", "shoulders"}),
}
DEFAULT_FOCUS = frozenset({"chest", "back"})


def plan_days(frequency: int) -> list[Weekday]:
    """Return ``frequency`` distinct training weekdays in week order."""
    try:
        return list(TRAINING_DAYS[frequency])
    except KeyError:
        raise ValueError(
            f"frequency must be between {min(TRAINING_DAYS)} and {max(TRAINING_DAYS)}, "
            f"got {frequency}"
        ) from None


def muscle_focus(day: int) -> frozenset[str]:
    """Muscle groups trained on ``day``."""
    try:
        return MUSCLE_FOCUS.get(Weekday(day), DEFAULT_FOCUS)
    except ValueError:
        return DEFAULT_FOCUS


@dataclass(frozen=True, order=True)
class WeekKey:
    """ISO calendar week, e.g. ``WeekKey(2024, 1)`` for 2024-W01."""

    iso_year: int
    week: int

    def __str__(self) -> str:
        return f"{self.iso_year}-W{self.week:02d}"

    def monday(self) -> date:
        return date.fromisocalendar(self.iso_year, self.week, 1)

    def shift(self, weeks: int) -> WeekKey:
        return WeekKey.of_date(self.monday() + timedelta(weeks=weeks))

    @classmethod
    def of_date(cls, day: date) -> WeekKey:
        iso = day.isocalendar()
        return cls(iso.year, iso.week)


def local_date(now: datetime | None, tz: str) -> date:
    """Calendar date of ``now`` in ``tz``; naive datetimes are treated as UTC."""
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(ZoneInfo(tz)).date()


def week_key(now: datetime | None, tz: str) -> WeekKey:
    return WeekKey.of_date(local_date(now, tz))


def weekday_of(now: datetime | None, tz: str) -> Weekday:
    return Weekday(local_date(now, tz).isoweekday())
