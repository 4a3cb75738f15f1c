"""Overlay chart for a comparison window and a current window.

Rendering is a pure mapping from a ChartDataset onto a DrawingSurface. Everything
needed to answer pointer lookups afterwards is captured in the returned
RenderSession, so repeated renders or several charts never share state.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date

from narrator.core.config import Settings
from narrator.schemas.common import SeriesName
from narrator.services.analytics.aggregation import ChartDataset, SeriesPoint
from narrator.services.charting.surfaces import DrawingSurface

LOGGER = logging.getLogger(__name__)


class RenderPreconditionMissing(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class Padding:
    top: float = 20.0
    right: float = 100.0
    bottom: float = 30.0
    left: float = 100.0


@dataclass(frozen=True, slots=True)
class ChartStyle:
    padding: Padding = field(default_factory=Padding)
    background: str = '#f7f7f7'
    reference: str = '#e0e0e0'
    yesterday_line: str = '#999999'
    yesterday_label: str = '#666666'
    comparison: str = '#999999'
    current: str = '#1f77b4'
    cumulative: str = '#4A90E2'
    label_font: str = 'bold 11px sans-serif'
    comparison_dash: tuple[float, ...] = (5.0, 5.0)
    dot_radius: float = 3.5
    hit_threshold_px: float = 10.0

    @classmethod
    def from_settings(cls, settings: Settings) -> ChartStyle:
        return cls(
            padding=Padding(
                top=settings.chart_padding_top,
                right=settings.chart_padding_right,
                bottom=settings.chart_padding_bottom,
                left=settings.chart_padding_left,
            ),
            background=settings.color_background,
            reference=settings.color_reference,
            yesterday_line=settings.color_yesterday_line,
            yesterday_label=settings.color_yesterday_label,
            comparison=settings.color_comparison,
            current=settings.color_current,
            cumulative=settings.color_cumulative,
            hit_threshold_px=settings.hit_threshold_px,
        )

    def series_color(self, series: SeriesName, *, cumulative: bool) -> str:
        if series == SeriesName.comparison:
            return self.comparison
        return self.cumulative if cumulative else self.current


@dataclass(frozen=True, slots=True)
class ChartOptions:
    cumulative: bool = False
    measure_name: str = 'Value'
    style: ChartStyle = field(default_factory=ChartStyle)


@dataclass(frozen=True, slots=True)
class PlotValue:
    day_index: int
    value: float
    original_value: float
    label: str
    raw_date: date


@dataclass(frozen=True, slots=True)
class PlotPoint:
    x: float
    y: float
    series: SeriesName
    day_index: int
    value: float
    original_value: float
    label: str
    raw_date: date


@dataclass(frozen=True, slots=True)
class ElementBounds:
    """On-page box of the drawing element, in CSS pixels."""

    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class ChartGeometry:
    width: float
    height: float
    padding: Padding
    span_days: int
    min_value: float
    max_value: float

    @property
    def chart_width(self) -> float:
        return self.width - self.padding.left - self.padding.right

    @property
    def chart_height(self) -> float:
        return self.height - self.padding.top - self.padding.bottom

    @property
    def plot_top(self) -> float:
        return self.padding.top

    @property
    def plot_bottom(self) -> float:
        return self.padding.top + self.chart_height

    def x_for(self, day_index: int) -> float:
        """span_days widens past total_days when a longer comparison month would run off the plot."""
        step = self.chart_width / max(self.span_days - 1, 1)
        return self.padding.left + step * (day_index - 1)

    def y_for(self, value: float) -> float:
        value_range = (self.max_value - self.min_value) or 1.0
        return self.padding.top + self.chart_height - ((value - self.min_value) / value_range) * self.chart_height


def transform_series(points: Sequence[SeriesPoint], *, cumulative: bool) -> list[PlotValue]:
    out: list[PlotValue] = []
    running = 0.0
    for point in points:
        running += point.value
        out.append(
            PlotValue(
                day_index=point.day_index,
                value=running if cumulative else point.value,
                original_value=point.value,
                label=point.label,
                raw_date=point.raw_date,
            )
        )
    return out


def value_range(values: Iterable[float]) -> tuple[float, float]:
    collected = list(values)
    if not collected:
        return 0.0, 1.0
    return min(collected), max(collected)


def nearest_point(points: Iterable[PlotPoint], x: float, y: float, threshold: float) -> PlotPoint | None:
    nearest: PlotPoint | None = None
    best = math.inf
    for point in points:
        distance = math.hypot(point.x - x, point.y - y)
        if distance < threshold and distance < best:
            best = distance
            nearest = point
    return nearest


@dataclass(frozen=True, slots=True)
class RenderSession:
    dataset: ChartDataset
    options: ChartOptions
    geometry: ChartGeometry
    points: tuple[PlotPoint, ...]

    def series_points(self, series: SeriesName) -> tuple[PlotPoint, ...]:
        return tuple(point for point in self.points if point.series == series)

    def hit_test(self, x: float, y: float, threshold: float | None = None) -> PlotPoint | None:
        limit = self.options.style.hit_threshold_px if threshold is None else threshold
        return nearest_point(self.points, x, y, limit)

    def hit_test_client(self, client_x: float, client_y: float, bounds: ElementBounds) -> PlotPoint | None:
        if bounds.width <= 0 or bounds.height <= 0:
            return None
        scale_x = self.geometry.width / bounds.width
        scale_y = self.geometry.height / bounds.height
        return self.hit_test((client_x - bounds.left) * scale_x, (client_y - bounds.top) * scale_y)


def _skip(reason: str, strict: bool) -> None:
    if strict:
        raise RenderPreconditionMissing(reason)
    LOGGER.debug('Chart render skipped: %s', reason)
    return None


def _plot(values: Sequence[PlotValue], series: SeriesName, geometry: ChartGeometry) -> list[PlotPoint]:
    return [
        PlotPoint(
            x=geometry.x_for(item.day_index),
            y=geometry.y_for(item.value),
            series=series,
            day_index=item.day_index,
            value=item.value,
            original_value=item.original_value,
            label=item.label,
            raw_date=item.raw_date,
        )
        for item in values
    ]


def render_chart(
    surface: DrawingSurface | None,
    dataset: ChartDataset | None,
    *,
    width: float,
    height: float,
    options: ChartOptions | None = None,
    strict: bool = False,
) -> RenderSession | None:
    if surface is None:
        return _skip('no drawing surface', strict)
    if dataset is None:
        return _skip('no dataset', strict)
    if getattr(dataset, 'metadata', None) is None:
        return _skip('dataset has no metadata', strict)
    if dataset.is_empty:
        return _skip('dataset has no points', strict)

    options = options or ChartOptions()
    style = options.style
    metadata = dataset.metadata

    comparison_values = transform_series(dataset.comparison, cumulative=options.cumulative)
    current_values = transform_series(dataset.current, cumulative=options.cumulative)
    min_value, max_value = value_range(item.value for item in [*comparison_values, *current_values])

    largest_index = max(item.day_index for item in [*comparison_values, *current_values])
    geometry = ChartGeometry(
        width=width,
        height=height,
        padding=style.padding,
        span_days=max(metadata.total_days, largest_index),
        min_value=min_value,
        max_value=max_value,
    )
    if geometry.chart_width <= 0 or geometry.chart_height <= 0:
        return _skip(f'surface {width}x{height} is smaller than the padding', strict)

    comparison_points = _plot(comparison_values, SeriesName.comparison, geometry)
    current_points = _plot(current_values, SeriesName.current, geometry)

    surface.clear(width, height)
    surface.fill_rect(
        style.padding.left,
        geometry.plot_top,
        geometry.chart_width,
        geometry.chart_height,
        color=style.background,
    )

    for day_index in (1, metadata.total_days):
        x = geometry.x_for(day_index)
        surface.line(x, geometry.plot_top, x, geometry.plot_bottom, color=style.reference, width=1)

    yesterday_x = geometry.x_for(metadata.yesterday_index)
    surface.line(yesterday_x, geometry.plot_top, yesterday_x, geometry.plot_bottom, color=style.yesterday_line, width=2)
    surface.text(
        yesterday_x,
        geometry.plot_bottom + 6,
        metadata.yesterday_label,
        color=style.yesterday_label,
        font=style.label_font,
    )

    if comparison_points:
        surface.polyline(
            [(p.x, p.y) for p in comparison_points],
            color=style.series_color(SeriesName.comparison, cumulative=options.cumulative),
            width=2,
            dash=style.comparison_dash,
        )

    if current_points:
        current_color = style.series_color(SeriesName.current, cumulative=options.cumulative)
        surface.polyline(
            [(p.x, p.y) for p in current_points],
            color=current_color,
            width=2.5 if options.cumulative else 2,
        )
        if options.cumulative:
            for point in current_points:
                surface.circle(point.x, point.y, style.dot_radius, color=current_color)

    return RenderSession(
        dataset=dataset,
        options=options,
        geometry=geometry,
        points=tuple([*comparison_points, *current_points]),
    )
