from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable

from narrator.schemas.common import PeriodType, Timezone
from narrator.services.periods.date_ranges import (
    ONE_DAY,
    DateRange,
    coerce_period_type,
    days_in_month,
    days_in_quarter,
    month_start,
    previous_month_start,
    previous_quarter_start,
    quarter_start,
    resolve_yesterday,
    week_start,
)


@dataclass(frozen=True, slots=True)
class ComparisonSplit:
    comparison_range: DateRange
    current_range: DateRange
    total_days: int
    yesterday_index: int
    yesterday_label: str
    period_type: PeriodType


def format_month_day(day: date) -> str:
    return f'{day.month}/{day.day}'


def _period_to_date_split(
    *,
    period: PeriodType,
    yesterday: date,
    cycle_start: date,
    previous_cycle_start: date,
    total_days: int,
) -> ComparisonSplit:
    current = DateRange(min=cycle_start, max=yesterday)
    previous_cycle_end = cycle_start - ONE_DAY
    comparison_end = min(previous_cycle_start + timedelta(days=current.days - 1), previous_cycle_end)
    return ComparisonSplit(
        comparison_range=DateRange(min=previous_cycle_start, max=comparison_end),
        current_range=current,
        total_days=total_days,
        yesterday_index=current.days,
        yesterday_label=format_month_day(yesterday),
        period_type=period,
    )


def _complete_split(*, period: PeriodType, current: DateRange, comparison: DateRange) -> ComparisonSplit:
    return ComparisonSplit(
        comparison_range=comparison,
        current_range=current,
        total_days=current.days,
        yesterday_index=current.days,
        yesterday_label=format_month_day(current.max),
        period_type=period,
    )


def _wtd_split(yesterday: date) -> ComparisonSplit:
    cycle_start = week_start(yesterday)
    return _period_to_date_split(
        period=PeriodType.wtd,
        yesterday=yesterday,
        cycle_start=cycle_start,
        previous_cycle_start=cycle_start - timedelta(days=7),
        total_days=7,
    )


def _mtd_split(yesterday: date) -> ComparisonSplit:
    return _period_to_date_split(
        period=PeriodType.mtd,
        yesterday=yesterday,
        cycle_start=month_start(yesterday),
        previous_cycle_start=previous_month_start(yesterday),
        total_days=days_in_month(yesterday),
    )


def _qtd_split(yesterday: date) -> ComparisonSplit:
    return _period_to_date_split(
        period=PeriodType.qtd,
        yesterday=yesterday,
        cycle_start=quarter_start(yesterday),
        previous_cycle_start=previous_quarter_start(yesterday),
        total_days=days_in_quarter(yesterday),
    )


def _last_day_split(yesterday: date) -> None:
    return None


def _last_week_split(yesterday: date) -> ComparisonSplit:
    this_week = week_start(yesterday)
    current = DateRange(min=this_week - timedelta(days=7), max=this_week - ONE_DAY)
    comparison = DateRange(min=this_week - timedelta(days=14), max=this_week - timedelta(days=8))
    return _complete_split(period=PeriodType.last_week, current=current, comparison=comparison)


def _last_month_split(yesterday: date) -> ComparisonSplit:
    current_end = month_start(yesterday) - ONE_DAY
    current = DateRange(min=month_start(current_end), max=current_end)
    comparison_end = current.min - ONE_DAY
    comparison = DateRange(min=month_start(comparison_end), max=comparison_end)
    return _complete_split(period=PeriodType.last_month, current=current, comparison=comparison)


def _rolling_split(period: PeriodType, days: int) -> Callable[[date], ComparisonSplit]:
    def _build(yesterday: date) -> ComparisonSplit:
        current = DateRange(min=yesterday - timedelta(days=days - 1), max=yesterday)
        comparison = DateRange(min=yesterday - timedelta(days=2 * days - 1), max=yesterday - timedelta(days=days))
        return _complete_split(period=period, current=current, comparison=comparison)

    return _build


SPLIT_BUILDERS: dict[PeriodType, Callable[[date], ComparisonSplit | None]] = {
    PeriodType.wtd: _wtd_split,
    PeriodType.mtd: _mtd_split,
    PeriodType.qtd: _qtd_split,
    PeriodType.last_day: _last_day_split,
    PeriodType.last_week: _last_week_split,
    PeriodType.last_month: _last_month_split,
    PeriodType.rolling7: _rolling_split(PeriodType.rolling7, 7),
    PeriodType.rolling14: _rolling_split(PeriodType.rolling14, 14),
    PeriodType.rolling28: _rolling_split(PeriodType.rolling28, 28),
}


def is_comparable(period_type: PeriodType | str) -> bool:
    return coerce_period_type(period_type) != PeriodType.last_day


def split_for_yesterday(period_type: PeriodType | str, yesterday: date) -> ComparisonSplit | None:
    period = coerce_period_type(period_type)
    return SPLIT_BUILDERS[period](yesterday)


def split_comparison_and_current_ranges(
    period_type: PeriodType | str,
    timezone: Timezone | str = Timezone.utc,
    now: datetime | None = None,
) -> ComparisonSplit | None:
    period = coerce_period_type(period_type)
    yesterday = resolve_yesterday(timezone, now=now)
    return SPLIT_BUILDERS[period](yesterday)
