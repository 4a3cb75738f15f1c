from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from narrator.core.config import Settings
from narrator.schemas.api import (
    ChartDatasetOut,
    ChartMetadataOut,
    ChartRequest,
    ChartResponse,
    ComparisonSplitOut,
    DateRangeOut,
    HitTestResponse,
    PeriodFilterOut,
    PeriodOut,
    PeriodsResponse,
    PlotPointOut,
    SeriesPointOut,
    TooltipOut,
)
from narrator.schemas.common import PeriodType, Timezone
from narrator.services.analytics.aggregation import ChartDataset, aggregate
from narrator.services.charting.render import ChartOptions, ChartStyle, PlotPoint, RenderSession, render_chart
from narrator.services.charting.surfaces import RecordingSurface, SvgSurface
from narrator.services.charting.tooltip import build_tooltip
from narrator.services.periods.comparison import ComparisonSplit, is_comparable, split_for_yesterday
from narrator.services.periods.date_ranges import (
    DateRange,
    date_range_for_yesterday,
    period_category,
    period_filter_metadata,
    resolve_yesterday,
)


@dataclass(slots=True)
class ChartBuild:
    period_type: PeriodType
    timezone: Timezone
    date_range: DateRange
    split: ComparisonSplit | None
    dataset: ChartDataset | None
    session: RenderSession | None
    surface: RecordingSurface
    width: int
    height: int


def date_range_out(date_range: DateRange) -> DateRangeOut:
    return DateRangeOut(min=date_range.min, max=date_range.max, days=date_range.days)


def split_out(split: ComparisonSplit | None) -> ComparisonSplitOut | None:
    if split is None:
        return None
    return ComparisonSplitOut(
        period_type=split.period_type.value,
        comparison_range=date_range_out(split.comparison_range),
        current_range=date_range_out(split.current_range),
        total_days=split.total_days,
        yesterday_index=split.yesterday_index,
        yesterday_label=split.yesterday_label,
    )


def dataset_out(dataset: ChartDataset | None) -> ChartDatasetOut | None:
    if dataset is None:
        return None
    return ChartDatasetOut(
        comparison=[
            SeriesPointOut(day_index=p.day_index, value=p.value, label=p.label, raw_date=p.raw_date)
            for p in dataset.comparison
        ],
        current=[
            SeriesPointOut(day_index=p.day_index, value=p.value, label=p.label, raw_date=p.raw_date)
            for p in dataset.current
        ],
        metadata=ChartMetadataOut(
            total_days=dataset.metadata.total_days,
            yesterday_index=dataset.metadata.yesterday_index,
            yesterday_label=dataset.metadata.yesterday_label,
            period_type=dataset.metadata.period_type.value,
        ),
    )


def plot_point_out(point: PlotPoint) -> PlotPointOut:
    return PlotPointOut(
        series=point.series,
        day_index=point.day_index,
        x=point.x,
        y=point.y,
        value=point.value,
        original_value=point.original_value,
        label=point.label,
        raw_date=point.raw_date,
    )


def build_period_catalog(settings: Settings) -> PeriodsResponse:
    periods: list[PeriodOut] = []
    for period in PeriodType:
        metadata = period_filter_metadata(period)
        periods.append(
            PeriodOut(
                period_type=period.value,
                category=period_category(period),
                comparable=is_comparable(period),
                filter=PeriodFilterOut(
                    use_relative_date=metadata.use_relative_date,
                    period_unit=metadata.period_unit,
                    range_type=metadata.range_type,
                    range_n=metadata.range_n,
                ),
            )
        )
    return PeriodsResponse(
        default_period=settings.default_period,
        default_timezone=settings.default_timezone,
        timezones=[tz.value for tz in Timezone],
        periods=periods,
    )


def build_chart(
    *,
    request: ChartRequest,
    period_type: PeriodType,
    timezone: Timezone,
    now: datetime | None,
    settings: Settings,
) -> ChartBuild:
    yesterday = resolve_yesterday(timezone, now=now)
    date_range = date_range_for_yesterday(period_type, yesterday)
    split = split_for_yesterday(period_type, yesterday)
    dataset = aggregate(
        request.rows,
        request.date_column,
        request.measure_column,
        split,
        columns=request.columns,
    )

    width = request.width or settings.chart_width
    height = request.height or settings.chart_height
    options = ChartOptions(
        cumulative=request.cumulative,
        measure_name=request.measure_name or request.measure_column,
        style=ChartStyle.from_settings(settings),
    )
    surface = RecordingSurface()
    session = render_chart(surface, dataset, width=width, height=height, options=options)

    return ChartBuild(
        period_type=period_type,
        timezone=timezone,
        date_range=date_range,
        split=split,
        dataset=dataset,
        session=session,
        surface=surface,
        width=width,
        height=height,
    )


def chart_response(build: ChartBuild, *, include_svg: bool) -> ChartResponse:
    svg: str | None = None
    if include_svg and build.session is not None:
        svg_surface = SvgSurface()
        render_chart(
            svg_surface,
            build.dataset,
            width=build.width,
            height=build.height,
            options=build.session.options,
        )
        svg = svg_surface.to_svg()

    return ChartResponse(
        period_type=build.period_type.value,
        timezone=build.timezone.value,
        date_range=date_range_out(build.date_range),
        split=split_out(build.split),
        dataset=dataset_out(build.dataset),
        rendered=build.session is not None,
        width=build.width,
        height=build.height,
        commands=build.surface.as_dicts(),
        svg=svg,
    )


def hit_test_response(build: ChartBuild, *, x: float, y: float) -> HitTestResponse:
    if build.session is None:
        return HitTestResponse(point=None, tooltip=None)

    point = build.session.hit_test(x, y)
    if point is None:
        return HitTestResponse(point=None, tooltip=None)

    tooltip = build_tooltip(point, build.session.options)
    return HitTestResponse(
        point=plot_point_out(point),
        tooltip=TooltipOut(
            title=tooltip.title,
            color=tooltip.color,
            lines=list(tooltip.lines),
            html=tooltip.to_html(),
        ),
    )
