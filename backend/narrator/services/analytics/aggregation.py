from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from dateutil import parser as date_parser

from narrator.schemas.common import PeriodType
from narrator.services.analytics.summary_table import SummaryTable, infer_columns, resolve_column
from narrator.services.periods.comparison import ComparisonSplit
from narrator.services.periods.date_ranges import DateRange
from narrator.utils.timezone import to_utc_day

LOGGER = logging.getLogger(__name__)

EPOCH_MILLIS_THRESHOLD = 1e11
COMPACT_DATE_FORMAT = '%Y%m%d'
PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


@dataclass(frozen=True, slots=True)
class DayBucket:
    date: date
    value: float


@dataclass(frozen=True, slots=True)
class SeriesPoint:
    day_index: int
    value: float
    label: str
    raw_date: date


@dataclass(frozen=True, slots=True)
class ChartMetadata:
    total_days: int
    yesterday_index: int
    yesterday_label: str
    period_type: PeriodType


@dataclass(frozen=True, slots=True)
class ChartDataset:
    comparison: tuple[SeriesPoint, ...]
    current: tuple[SeriesPoint, ...]
    metadata: ChartMetadata

    @property
    def is_empty(self) -> bool:
        return not self.comparison and not self.current


def parse_row_date(value: Any) -> date | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return to_utc_day(value)
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        return _epoch_to_day(float(value))
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.isascii() and text.lstrip('-').isdigit():
        if len(text) == 8:
            try:
                return datetime.strptime(text, COMPACT_DATE_FORMAT).date()
            except ValueError:
                pass
        return _epoch_to_day(float(text))
    try:
        return to_utc_day(datetime.fromisoformat(text))
    except ValueError:
        pass
    return _parse_free_form(text)


def _parse_free_form(text: str) -> date | None:
    try:
        first, second = (date_parser.parse(text, default=default) for default in PARSE_DEFAULTS)
    except (date_parser.ParserError, ValueError, OverflowError):
        return None
    # A field missing from the text was filled from the default, so the two parses disagree.
    if first.date() != second.date():
        return None
    return to_utc_day(first)


def _epoch_to_day(raw: float) -> date | None:
    if not math.isfinite(raw):
        return None
    seconds = raw / 1000.0 if abs(raw) >= EPOCH_MILLIS_THRESHOLD else raw
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc).date()
    except (OverflowError, OSError, ValueError):
        return None


def parse_measure(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(',', '')
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def aggregate_days(
    rows: Iterable[Mapping[str, Any]],
    *,
    date_column: str,
    measure_column: str,
) -> list[DayBucket]:
    totals: dict[date, float] = {}
    skipped = 0
    for row in rows:
        day = parse_row_date(row.get(date_column))
        if day is None:
            skipped += 1
            continue
        totals[day] = totals.get(day, 0.0) + parse_measure(row.get(measure_column))

    if skipped:
        LOGGER.debug('Skipped %s rows with unparseable %s values', skipped, date_column)
    return [DayBucket(date=day, value=totals[day]) for day in sorted(totals)]


def _series_point(bucket: DayBucket, window: DateRange) -> SeriesPoint:
    return SeriesPoint(
        day_index=(bucket.date - window.min).days + 1,
        value=bucket.value,
        label=bucket.date.isoformat(),
        raw_date=bucket.date,
    )


def aggregate(
    rows: Iterable[Mapping[str, Any]],
    date_column: str,
    measure_column: str,
    split: ComparisonSplit | None,
    *,
    columns: Sequence[str] | None = None,
) -> ChartDataset | None:
    if split is None:
        return None

    rows = list(rows)
    available = tuple(columns) if columns is not None else infer_columns(rows)
    if rows or columns is not None:
        resolved_date = resolve_column(available, date_column)
        resolved_measure = resolve_column(available, measure_column)
        if resolved_date is None or resolved_measure is None:
            LOGGER.info(
                'Cannot locate columns date=%r measure=%r among %s',
                date_column,
                measure_column,
                list(available),
            )
            return None
    else:
        resolved_date, resolved_measure = date_column, measure_column

    buckets = aggregate_days(rows, date_column=resolved_date, measure_column=resolved_measure)

    comparison: list[SeriesPoint] = []
    current: list[SeriesPoint] = []
    for bucket in buckets:
        if split.comparison_range.contains(bucket.date):
            comparison.append(_series_point(bucket, split.comparison_range))
        if split.current_range.contains(bucket.date):
            current.append(_series_point(bucket, split.current_range))

    comparison.sort(key=lambda point: point.day_index)
    current.sort(key=lambda point: point.day_index)

    return ChartDataset(
        comparison=tuple(comparison),
        current=tuple(current),
        metadata=ChartMetadata(
            total_days=split.total_days,
            yesterday_index=split.yesterday_index,
            yesterday_label=split.yesterday_label,
            period_type=split.period_type,
        ),
    )


def aggregate_table(
    table: SummaryTable,
    date_column: str,
    measure_column: str,
    split: ComparisonSplit | None,
) -> ChartDataset | None:
    return aggregate(table.rows, date_column, measure_column, split, columns=table.columns)
