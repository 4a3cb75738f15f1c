from __future__ import annotations

import argparse
import csv
from datetime import datetime
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
BACKEND_ROOT = ROOT / 'backend'
sys.path.insert(0, str(BACKEND_ROOT))

from narrator.core.config import get_settings
from narrator.core.logging import configure_logging
from narrator.schemas.common import PeriodType, Timezone
from narrator.services.analytics.aggregation import aggregate
from narrator.services.charting.render import ChartOptions, ChartStyle, render_chart
from narrator.services.charting.surfaces import SvgSurface
from narrator.services.periods.comparison import split_for_yesterday
from narrator.services.periods.date_ranges import date_range_for_yesterday, resolve_yesterday


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description='Render a period-over-period chart from a CSV file.')
    parser.add_argument('csv_path', type=Path)
    parser.add_argument('--date-column', required=True)
    parser.add_argument('--measure-column', required=True)
    parser.add_argument('--period', default=settings.default_period, choices=[p.value for p in PeriodType])
    parser.add_argument('--timezone', default=settings.default_timezone, choices=[tz.value for tz in Timezone])
    parser.add_argument('--now', default=None, help='ISO-8601 instant used as "now" (defaults to the clock)')
    parser.add_argument('--cumulative', action='store_true')
    parser.add_argument('--out', type=Path, default=ROOT / 'chart.svg')
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging()

    now = datetime.fromisoformat(args.now) if args.now else None
    yesterday = resolve_yesterday(args.timezone, now=now)
    date_range = date_range_for_yesterday(args.period, yesterday)
    split = split_for_yesterday(args.period, yesterday)
    print(f'yesterday={yesterday} filter={date_range.min}..{date_range.max}')
    if split is None:
        print(f'{args.period} has no comparison chart')
        return 0
    print(f'comparison={split.comparison_range.min}..{split.comparison_range.max}')
    print(f'current={split.current_range.min}..{split.current_range.max}')

    with args.csv_path.open('r', encoding='utf-8', newline='') as handle:
        reader = csv.DictReader(handle)
        rows = list(reader)
        columns = reader.fieldnames or []

    dataset = aggregate(rows, args.date_column, args.measure_column, split, columns=columns)
    if dataset is None:
        raise SystemExit(f'Columns not found in {args.csv_path}: {args.date_column}, {args.measure_column}')

    surface = SvgSurface()
    options = ChartOptions(
        cumulative=args.cumulative,
        measure_name=args.measure_column,
        style=ChartStyle.from_settings(settings),
    )
    session = render_chart(surface, dataset, width=settings.chart_width, height=settings.chart_height, options=options)
    if session is None:
        print('No rows fall inside either window; nothing rendered')
        return 0

    args.out.write_text(surface.to_svg(), encoding='utf-8')
    print(f'comparison_points={len(dataset.comparison)} current_points={len(dataset.current)} -> {args.out}')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
