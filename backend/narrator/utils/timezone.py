from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from narrator.schemas.common import Timezone

TIMEZONE_OFFSETS: dict[Timezone, timedelta] = {
    Timezone.utc: timedelta(hours=0),
    Timezone.jst: timedelta(hours=9),
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_offset(tz: Timezone) -> timedelta:
    return TIMEZONE_OFFSETS[tz]


def to_utc_day(dt: datetime) -> date:
    return ensure_utc(dt).date()


def local_date(dt: datetime, tz: Timezone) -> date:
    """Calendar date of `dt` on a wall clock running at the zone's fixed offset."""
    return (ensure_utc(dt) + utc_offset(tz)).date()
