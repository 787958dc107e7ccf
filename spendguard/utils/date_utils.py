"""Period boundaries, time-window predicates and the clock abstraction.

All instants are naive local datetimes. Week boundaries follow ISO weeks
(Monday 00:00:00 to Sunday 23:59:59.999999); month ends are computed as the
first instant of the next month minus one microsecond, so consecutive periods
leave no gap between them.
"""

from datetime import datetime, time, timedelta
from typing import Protocol, Tuple, Union

from spendguard.domain.exceptions import InvalidRangeError
from spendguard.domain.models import BudgetPeriod, parse_period

ONE_MICROSECOND = timedelta(microseconds=1)
LATE_NIGHT_HOURS = frozenset({23, 0, 1})

Bounds = Tuple[datetime, datetime]


class Clock(Protocol):
    """Source of the current instant"""

    def now(self) -> datetime: ...


class SystemClock:
    """Local wall-clock time"""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Clock frozen at a given instant, movable by tests"""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def advance(self, delta: timedelta) -> None:
        self.instant = self.instant + delta


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def end_of_day(moment: datetime) -> datetime:
    return start_of_day(moment) + timedelta(days=1) - ONE_MICROSECOND


def start_of_week(moment: datetime) -> datetime:
    """Monday 00:00:00 of the ISO week containing moment"""
    return start_of_day(moment) - timedelta(days=moment.weekday())


def end_of_week(moment: datetime) -> datetime:
    """Sunday 23:59:59.999999 of the ISO week containing moment"""
    return start_of_week(moment) + timedelta(days=7) - ONE_MICROSECOND


def start_of_month(moment: datetime) -> datetime:
    return datetime(moment.year, moment.month, 1)


def end_of_month(moment: datetime) -> datetime:
    if moment.month == 12:
        next_month = datetime(moment.year + 1, 1, 1)
    else:
        next_month = datetime(moment.year, moment.month + 1, 1)
    return next_month - ONE_MICROSECOND


def week_bounds(moment: datetime) -> Bounds:
    return start_of_week(moment), end_of_week(moment)


def month_bounds(moment: datetime) -> Bounds:
    return start_of_month(moment), end_of_month(moment)


def previous_week_bounds(moment: datetime) -> Bounds:
    """Bounds of the ISO week immediately before the one containing moment"""
    return week_bounds(start_of_week(moment) - ONE_MICROSECOND)


def previous_month_bounds(moment: datetime) -> Bounds:
    return month_bounds(start_of_month(moment) - ONE_MICROSECOND)


def period_bounds(moment: datetime, period: Union[BudgetPeriod, str]) -> Bounds:
    """
    Resolve the [start, end] of the budget period containing moment.

    Raises:
        UnsupportedPeriodError: period is not WEEKLY or MONTHLY
    """
    kind = parse_period(period)

    if kind is BudgetPeriod.WEEKLY:
        return week_bounds(moment)
    return month_bounds(moment)


def custom_range(start: datetime, end: datetime) -> Bounds:
    """Widen an arbitrary range to whole days: start-of-day .. end-of-day"""
    if start > end:
        raise InvalidRangeError(f"Range start {start.isoformat()} is after end {end.isoformat()}")
    return start_of_day(start), end_of_day(end)


def trailing_days_start(moment: datetime, days: int) -> datetime:
    """Midnight of the day `days` days before moment"""
    return start_of_day(moment - timedelta(days=days))


def is_late_night(moment: datetime) -> bool:
    """True from 23:00 through 01:59:59"""
    return moment.hour in LATE_NIGHT_HOURS


def is_within_minutes(first: datetime, second: datetime, minutes: int) -> bool:
    return abs(first - second) <= timedelta(minutes=minutes)


def days_between(first: datetime, second: datetime) -> int:
    """Whole days between two instants, truncated"""
    return abs(first - second) // timedelta(days=1)
