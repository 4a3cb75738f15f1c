from __future__ import annotations

import html
from dataclasses import dataclass

from narrator.schemas.common import SeriesName
from narrator.services.charting.render import ChartOptions, PlotPoint

SERIES_TITLES = {
    SeriesName.comparison: 'Comparison',
    SeriesName.current: 'Current',
}


@dataclass(frozen=True, slots=True)
class Tooltip:
    title: str
    color: str
    lines: tuple[str, ...]

    def to_html(self) -> str:
        header_style = f'font-weight: bold; margin-bottom: 4px; color: {html.escape(self.color)};'
        parts = [f'<div style="{header_style}">{html.escape(self.title)}</div>']
        parts.extend(f'<div>{html.escape(line)}</div>' for line in self.lines)
        return ''.join(parts)


def format_number(num: float) -> str:
    if abs(num) >= 1_000_000:
        return f'{num / 1_000_000:.1f}M'
    if abs(num) >= 1_000:
        return f'{num / 1_000:.1f}K'
    return f'{num:.0f}'


def truncate_label(label: str, max_length: int = 10) -> str:
    if len(label) <= max_length:
        return label
    return label[: max_length - 1] + '…'


def build_tooltip(point: PlotPoint, options: ChartOptions) -> Tooltip:
    color = options.style.comparison if point.series == SeriesName.comparison else options.style.cumulative

    lines = [f'{options.measure_name}: {format_number(point.value)}']
    if options.cumulative:
        lines.append(f'Period: {format_number(point.original_value)}')

    return Tooltip(
        title=f'{SERIES_TITLES[point.series]}: {point.label}',
        color=color,
        lines=tuple(lines),
    )
