from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from narrator.api.deps import get_app_settings
from narrator.api.route_utils import parse_now_param, parse_period_param, parse_timezone_param
from narrator.core.config import Settings
from narrator.schemas.api import PeriodRangeResponse, PeriodSplitResponse, PeriodsResponse
from narrator.services.chart_service import build_period_catalog, date_range_out, split_out
from narrator.services.periods.comparison import split_for_yesterday
from narrator.services.periods.date_ranges import date_range_for_yesterday, resolve_yesterday

router = APIRouter()


@router.get('/periods', response_model=PeriodsResponse)
def list_periods(settings: Settings = Depends(get_app_settings)) -> PeriodsResponse:
    return build_period_catalog(settings)


@router.get('/periods/{period}/range', response_model=PeriodRangeResponse)
def get_period_range(
    period: str,
    timezone: str | None = Query(default=None),
    now: str | None = Query(default=None),
) -> PeriodRangeResponse:
    period_type = parse_period_param(period)
    tz = parse_timezone_param(timezone)
    yesterday = resolve_yesterday(tz, now=parse_now_param(now))

    return PeriodRangeResponse(
        period_type=period_type.value,
        timezone=tz.value,
        yesterday=yesterday,
        date_range=date_range_out(date_range_for_yesterday(period_type, yesterday)),
    )


@router.get('/periods/{period}/split', response_model=PeriodSplitResponse)
def get_period_split(
    period: str,
    timezone: str | None = Query(default=None),
    now: str | None = Query(default=None),
) -> PeriodSplitResponse:
    period_type = parse_period_param(period)
    tz = parse_timezone_param(timezone)
    yesterday = resolve_yesterday(tz, now=parse_now_param(now))

    return PeriodSplitResponse(
        period_type=period_type.value,
        timezone=tz.value,
        yesterday=yesterday,
        split=split_out(split_for_yesterday(period_type, yesterday)),
    )
