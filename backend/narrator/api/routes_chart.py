from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from narrator.api.deps import get_app_settings
from narrator.api.route_utils import ensure_row_limit, parse_period_param, parse_timezone_param
from narrator.core.config import Settings
from narrator.schemas.api import ChartRequest, ChartResponse, HitTestRequest, HitTestResponse
from narrator.services.chart_service import ChartBuild, build_chart, chart_response, hit_test_response

LOGGER = logging.getLogger(__name__)

router = APIRouter()


def _build(payload: ChartRequest, settings: Settings) -> ChartBuild:
    ensure_row_limit(len(payload.rows))
    build = build_chart(
        request=payload,
        period_type=parse_period_param(payload.period_type),
        timezone=parse_timezone_param(payload.timezone),
        now=payload.now,
        settings=settings,
    )
    LOGGER.info(
        'Chart %s/%s rows=%s rendered=%s',
        build.period_type.value,
        build.timezone.value,
        len(payload.rows),
        build.session is not None,
    )
    return build


@router.post('/chart', response_model=ChartResponse)
def post_chart(payload: ChartRequest, settings: Settings = Depends(get_app_settings)) -> ChartResponse:
    return chart_response(_build(payload, settings), include_svg=payload.include_svg)


@router.post('/chart/hit-test', response_model=HitTestResponse)
def post_chart_hit_test(payload: HitTestRequest, settings: Settings = Depends(get_app_settings)) -> HitTestResponse:
    return hit_test_response(_build(payload, settings), x=payload.x, y=payload.y)
