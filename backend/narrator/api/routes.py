from __future__ import annotations

from fastapi import APIRouter

from narrator.api.routes_chart import router as chart_router
from narrator.api.routes_periods import router as periods_router

router = APIRouter(prefix='/api', tags=['api'])
router.include_router(periods_router)
router.include_router(chart_router)
