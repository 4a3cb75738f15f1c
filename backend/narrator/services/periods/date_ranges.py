from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Iterator

from dateutil.relativedelta import relativedelta

from narrator.schemas.common import PeriodCategory, PeriodType, Timezone
from narrator.utils.timezone import local_date, utc_now

LOGGER = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


class InvalidPeriodType(ValueError):
    def __init__(self, value: object) -> None:
        allowed = ', '.join(p.value for p in PeriodType)
        super().__init__(f'Unknown period type: {value!r} (expected one of: {allowed})')
        self.value = value


class InvalidTimezone(ValueError):
    def __init__(self, value: object) -> None:
        allowed = ', '.join(tz.value for tz in Timezone)
        super().__init__(f'Unknown timezone: {value!r} (expected one of: {allowed})')
        self.value = value


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive range of whole UTC calendar days."""

    min: date
    max: date

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValueError(f'DateRange min {self.min} is after max {self.max}')

    @property
    def days(self) -> int:
        return (self.max - self.min).days + 1

    def contains(self, day: date) -> bool:
        return self.min <= day <= self.max

    def iter_days(self) -> Iterator[date]:
        day = self.min
        while day <= self.max:
            yield day
            day += ONE_DAY


@dataclass(frozen=True, slots=True)
class PeriodFilterMetadata:
    use_relative_date: bool
    period_unit: str | None = None
    range_type: str | None = None
    range_n: int | None = None


PERIOD_CATEGORIES: dict[PeriodType, PeriodCategory] = {
    PeriodType.wtd: PeriodCategory.period_to_date,
    PeriodType.mtd: PeriodCategory.period_to_date,
    PeriodType.qtd: PeriodCategory.period_to_date,
    PeriodType.last_day: PeriodCategory.complete_period,
    PeriodType.last_week: PeriodCategory.complete_period,
    PeriodType.last_month: PeriodCategory.complete_period,
    PeriodType.rolling7: PeriodCategory.rolling_window,
    PeriodType.rolling14: PeriodCategory.rolling_window,
    PeriodType.rolling28: PeriodCategory.rolling_window,
}

ROLLING_WINDOW_DAYS: dict[PeriodType, int] = {
    PeriodType.rolling7: 7,
    PeriodType.rolling14: 14,
    PeriodType.rolling28: 28,
}


def coerce_period_type(value: PeriodType | str) -> PeriodType:
    if isinstance(value, PeriodType):
        return value
    try:
        return PeriodType(value)
    except ValueError as exc:
        raise InvalidPeriodType(value) from exc


def coerce_timezone(value: Timezone | str) -> Timezone:
    if isinstance(value, Timezone):
        return value
    try:
        return Timezone(str(value).upper())
    except ValueError as exc:
        raise InvalidTimezone(value) from exc


def period_category(period_type: PeriodType | str) -> PeriodCategory:
    return PERIOD_CATEGORIES[coerce_period_type(period_type)]


def resolve_yesterday(timezone: Timezone | str = Timezone.utc, now: datetime | None = None) -> date:
    tz = coerce_timezone(timezone)
    if now is None:
        now = utc_now()
    return local_date(now, tz) - ONE_DAY


def week_start(day: date) -> date:
    return day - timedelta(days=day.isoweekday() - 1)


def month_start(day: date) -> date:
    return day.replace(day=1)


def month_end(day: date) -> date:
    return day.replace(day=days_in_month(day))


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def quarter_start(day: date) -> date:
    first_month = ((day.month - 1) // 3) * 3 + 1
    return date(day.year, first_month, 1)


def quarter_end(day: date) -> date:
    start = quarter_start(day)
    last_month = date(start.year, start.month + 2, 1)
    return month_end(last_month)


def days_in_quarter(day: date) -> int:
    return (quarter_end(day) - quarter_start(day)).days + 1


def previous_month_start(day: date) -> date:
    return month_start(day) - relativedelta(months=1)


def previous_quarter_start(day: date) -> date:
    return quarter_start(day) - relativedelta(months=3)


def _wtd_range(yesterday: date) -> DateRange:
    return DateRange(min=week_start(yesterday) - timedelta(days=7), max=yesterday)


def _mtd_range(yesterday: date) -> DateRange:
    return DateRange(min=previous_month_start(yesterday), max=yesterday)


def _qtd_range(yesterday: date) -> DateRange:
    return DateRange(min=previous_quarter_start(yesterday), max=yesterday)


def _last_day_range(yesterday: date) -> DateRange:
    # Seven trailing days despite the name; host filters depend on this width.
    return DateRange(min=yesterday - timedelta(days=6), max=yesterday)


def _last_week_range(yesterday: date) -> DateRange:
    this_week = week_start(yesterday)
    return DateRange(min=this_week - timedelta(days=14), max=this_week - ONE_DAY)


def _last_month_range(yesterday: date) -> DateRange:
    last_month_end = month_start(yesterday) - ONE_DAY
    return DateRange(min=previous_month_start(last_month_end), max=last_month_end)


def _rolling_range(days: int) -> Callable[[date], DateRange]:
    def _build(yesterday: date) -> DateRange:
        return DateRange(min=yesterday - timedelta(days=2 * days - 1), max=yesterday)

    return _build


RANGE_BUILDERS: dict[PeriodType, Callable[[date], DateRange]] = {
    PeriodType.wtd: _wtd_range,
    PeriodType.mtd: _mtd_range,
    PeriodType.qtd: _qtd_range,
    PeriodType.last_day: _last_day_range,
    PeriodType.last_week: _last_week_range,
    PeriodType.last_month: _last_month_range,
    PeriodType.rolling7: _rolling_range(7),
    PeriodType.rolling14: _rolling_range(14),
    PeriodType.rolling28: _rolling_range(28),
}


def date_range_for_yesterday(period_type: PeriodType | str, yesterday: date) -> DateRange:
    period = coerce_period_type(period_type)
    return RANGE_BUILDERS[period](yesterday)


def calculate_date_range(
    period_type: PeriodType | str,
    timezone: Timezone | str = Timezone.utc,
    now: datetime | None = None,
) -> DateRange:
    period = coerce_period_type(period_type)
    yesterday = resolve_yesterday(timezone, now=now)
    date_range = RANGE_BUILDERS[period](yesterday)
    LOGGER.debug('Resolved %s range %s..%s (yesterday=%s)', period.value, date_range.min, date_range.max, yesterday)
    return date_range


def period_filter_metadata(period_type: PeriodType | str) -> PeriodFilterMetadata:
    period = coerce_period_type(period_type)
    window_days = ROLLING_WINDOW_DAYS.get(period)
    if window_days is None:
        return PeriodFilterMetadata(use_relative_date=False)
    return PeriodFilterMetadata(
        use_relative_date=True,
        period_unit='days',
        range_type='last_n',
        range_n=window_days,
    )
