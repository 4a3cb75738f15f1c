from __future__ import annotations

from datetime import date, datetime, time, timezone

from fastapi import HTTPException

from narrator.core.config import get_settings
from narrator.schemas.common import PeriodType, Timezone
from narrator.services.periods.date_ranges import (
    InvalidPeriodType,
    InvalidTimezone,
    coerce_period_type,
    coerce_timezone,
)

settings = get_settings()


def parse_period_param(period: str | None) -> PeriodType:
    requested = period.strip() if period and period.strip() else settings.default_period
    try:
        return coerce_period_type(requested)
    except InvalidPeriodType as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def parse_timezone_param(tz: str | None) -> Timezone:
    requested = tz.strip() if tz and tz.strip() else settings.default_timezone
    try:
        return coerce_timezone(requested)
    except InvalidTimezone as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def parse_now_param(now_value: str | None) -> datetime | None:
    if not now_value:
        return None
    text = now_value.strip()
    try:
        if len(text) == 10:
            return datetime.combine(date.fromisoformat(text), time.min, tzinfo=timezone.utc)
        return datetime.fromisoformat(text.replace('Z', '+00:00'))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail='now must be YYYY-MM-DD or an ISO-8601 datetime') from exc


def ensure_row_limit(row_count: int) -> None:
    if row_count > settings.max_rows:
        raise HTTPException(status_code=400, detail=f'at most {settings.max_rows} rows are accepted per request')
