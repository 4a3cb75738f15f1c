from __future__ import annotations

from datetime import date, datetime, timezone

from narrator.schemas.common import PeriodType
from narrator.services.analytics.aggregation import (
    DayBucket,
    aggregate,
    aggregate_days,
    aggregate_table,
    parse_measure,
    parse_row_date,
)
from narrator.services.analytics.summary_table import SummaryTable
from narrator.services.periods.comparison import split_for_yesterday

YESTERDAY = date(2024, 3, 14)


def _rolling7_split():
    split = split_for_yesterday(PeriodType.rolling7, YESTERDAY)
    assert split is not None
    return split


def test_aggregate_sums_duplicate_days_and_buckets_windows() -> None:
    rows = [
        {'Order Date': '2024-03-12', 'Sales': 5},
        {'Order Date': '2024-03-12T23:30:00Z', 'Sales': '7'},
        {'Order Date': '2024-03-01', 'Sales': 3},
        {'Order Date': '2024-02-20', 'Sales': 100},
        {'Order Date': 'not a date', 'Sales': 9},
        {'Order Date': '2024-03-14', 'Sales': 'abc'},
    ]

    dataset = aggregate(rows, 'Order Date', 'Sales', _rolling7_split())

    assert dataset is not None
    assert [(p.day_index, p.value) for p in dataset.current] == [(5, 12.0), (7, 0.0)]
    assert [(p.day_index, p.value) for p in dataset.comparison] == [(1, 3.0)]
    assert dataset.current[0].raw_date == date(2024, 3, 12)
    assert dataset.current[0].label == '2024-03-12'
    assert dataset.metadata.total_days == 7
    assert dataset.metadata.yesterday_index == 7
    assert dataset.metadata.yesterday_label == '3/14'
    assert dataset.metadata.period_type == PeriodType.rolling7


def test_same_row_twice_is_summed_not_overwritten() -> None:
    row = {'day': '2024-03-10', 'value': 4.5}
    buckets = aggregate_days([row, row], date_column='day', measure_column='value')
    assert buckets == [DayBucket(date=date(2024, 3, 10), value=9.0)]


def test_full_current_window_round_trip() -> None:
    split = _rolling7_split()
    rows = [{'day': day.isoformat(), 'value': 1} for day in split.current_range.iter_days()]

    dataset = aggregate(rows, 'day', 'value', split)

    assert dataset is not None
    assert [p.day_index for p in dataset.current] == list(range(1, split.total_days + 1))
    assert dataset.comparison == ()


def test_rows_are_sorted_by_day_index() -> None:
    rows = [
        {'day': '2024-03-13', 'value': 1},
        {'day': '2024-03-08', 'value': 2},
        {'day': '2024-03-10', 'value': 3},
    ]
    dataset = aggregate(rows, 'day', 'value', _rolling7_split())
    assert dataset is not None
    assert [p.day_index for p in dataset.current] == [1, 3, 6]


def test_split_none_propagates() -> None:
    rows = [{'day': '2024-03-13', 'value': 1}]
    assert aggregate(rows, 'day', 'value', split_for_yesterday('lastDay', YESTERDAY)) is None


def test_missing_columns_return_none() -> None:
    rows = [{'day': '2024-03-13', 'value': 1}]
    assert aggregate(rows, 'Order Date', 'value', _rolling7_split()) is None
    assert aggregate([], 'day', 'value', _rolling7_split(), columns=['day']) is None


def test_empty_rows_yield_empty_series() -> None:
    dataset = aggregate([], 'day', 'value', _rolling7_split())
    assert dataset is not None
    assert dataset.is_empty


def test_columns_resolve_through_aggregate_wrappers() -> None:
    table = SummaryTable.from_records(
        [
            {'DAY(Order Date)': '2024-03-09', 'SUM(Sales)': '1,250.5'},
            {'DAY(Order Date)': '2024-03-02', 'SUM(Sales)': 40},
        ]
    )
    dataset = aggregate_table(table, 'order date', 'Sales', _rolling7_split())
    assert dataset is not None
    assert [(p.day_index, p.value) for p in dataset.current] == [(2, 1250.5)]
    assert [(p.day_index, p.value) for p in dataset.comparison] == [(2, 40.0)]


def test_parse_row_date_variants() -> None:
    noon = datetime(2024, 3, 10, 12, tzinfo=timezone.utc)
    assert parse_row_date(int(noon.timestamp() * 1000)) == date(2024, 3, 10)
    assert parse_row_date(noon.timestamp()) == date(2024, 3, 10)
    assert parse_row_date(str(int(noon.timestamp() * 1000))) == date(2024, 3, 10)
    assert parse_row_date(date(2024, 3, 10)) == date(2024, 3, 10)
    assert parse_row_date(noon) == date(2024, 3, 10)
    assert parse_row_date('2024-03-12T01:00:00+09:00') == date(2024, 3, 11)
    assert parse_row_date('March 12, 2024') == date(2024, 3, 12)
    assert parse_row_date('') is None
    assert parse_row_date(None) is None
    assert parse_row_date(True) is None
    assert parse_row_date('nonsense') is None
    assert parse_row_date('²') is None


def test_compact_dates_are_not_read_as_epoch_seconds() -> None:
    assert parse_row_date('20240314') == date(2024, 3, 14)
    assert parse_row_date(' 20231231 ') == date(2023, 12, 31)
    # not a calendar date, so it falls back to epoch seconds
    assert parse_row_date('20241399') == datetime.fromtimestamp(20241399, tz=timezone.utc).date()


def test_partial_free_form_dates_are_rejected() -> None:
    assert parse_row_date('Monday') is None
    assert parse_row_date('March') is None
    assert parse_row_date('March 12') is None
    assert parse_row_date('12 March 2024') == date(2024, 3, 12)


def test_odd_date_cells_are_skipped_not_fatal() -> None:
    rows = [
        {'day': '2024-03-13', 'value': 1},
        {'day': '²', 'value': 5},
        {'day': 'Tuesday', 'value': 7},
        {'day': '20240312', 'value': 2},
    ]
    dataset = aggregate(rows, 'day', 'value', _rolling7_split())
    assert dataset is not None
    assert [(p.day_index, p.value) for p in dataset.current] == [(5, 2.0), (6, 1.0)]
    assert dataset.comparison == ()


def test_parse_measure_variants() -> None:
    assert parse_measure(3) == 3.0
    assert parse_measure('1,234.5') == 1234.5
    assert parse_measure(' 12 ') == 12.0
    assert parse_measure('n/a') == 0.0
    assert parse_measure(None) == 0.0
    assert parse_measure(float('nan')) == 0.0
    assert parse_measure(float('inf')) == 0.0
