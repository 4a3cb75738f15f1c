from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from narrator.schemas.common import PeriodCategory, SeriesName


class DateRangeOut(BaseModel):
    min: date
    max: date
    days: int


class PeriodFilterOut(BaseModel):
    use_relative_date: bool
    period_unit: str | None = None
    range_type: str | None = None
    range_n: int | None = None


class PeriodOut(BaseModel):
    period_type: str
    category: PeriodCategory
    comparable: bool
    filter: PeriodFilterOut


class PeriodsResponse(BaseModel):
    default_period: str
    default_timezone: str
    timezones: list[str]
    periods: list[PeriodOut]


class PeriodRangeResponse(BaseModel):
    period_type: str
    timezone: str
    yesterday: date
    date_range: DateRangeOut


class ComparisonSplitOut(BaseModel):
    period_type: str
    comparison_range: DateRangeOut
    current_range: DateRangeOut
    total_days: int
    yesterday_index: int
    yesterday_label: str


class PeriodSplitResponse(BaseModel):
    period_type: str
    timezone: str
    yesterday: date
    split: ComparisonSplitOut | None


class SeriesPointOut(BaseModel):
    day_index: int
    value: float
    label: str
    raw_date: date


class ChartMetadataOut(BaseModel):
    total_days: int
    yesterday_index: int
    yesterday_label: str
    period_type: str


class ChartDatasetOut(BaseModel):
    comparison: list[SeriesPointOut]
    current: list[SeriesPointOut]
    metadata: ChartMetadataOut


class ChartRequest(BaseModel):
    rows: list[dict[str, Any]]
    columns: list[str] | None = None
    date_column: str
    measure_column: str
    period_type: str
    timezone: str | None = None
    now: datetime | None = None
    cumulative: bool = False
    measure_name: str | None = None
    width: int | None = Field(default=None, ge=1, le=4000)
    height: int | None = Field(default=None, ge=1, le=4000)
    include_svg: bool = False


class ChartResponse(BaseModel):
    period_type: str
    timezone: str
    date_range: DateRangeOut
    split: ComparisonSplitOut | None
    dataset: ChartDatasetOut | None
    rendered: bool
    width: int
    height: int
    commands: list[dict[str, Any]]
    svg: str | None = None


class HitTestRequest(ChartRequest):
    x: float
    y: float


class PlotPointOut(BaseModel):
    series: SeriesName
    day_index: int
    x: float
    y: float
    value: float
    original_value: float
    label: str
    raw_date: date


class TooltipOut(BaseModel):
    title: str
    color: str
    lines: list[str]
    html: str


class HitTestResponse(BaseModel):
    point: PlotPointOut | None
    tooltip: TooltipOut | None
