from __future__ import annotations

from narrator.services.analytics.summary_table import SummaryTable, resolve_column


def test_from_cells_uses_header_metadata_and_cell_values() -> None:
    table = SummaryTable.from_cells(
        [{'fieldName': 'DAY(Order Date)'}, {'caption': 'SUM(Sales)'}, {}],
        [
            [{'value': '2024-03-10'}, {'formattedValue': '1,200'}, 'x', 'extra'],
            [{'value': None, 'formatted': '2024-03-11'}, {'value': 5}, None],
        ],
    )
    assert table.columns == ('DAY(Order Date)', 'SUM(Sales)', 'Column_3')
    assert table.rows[0] == {
        'DAY(Order Date)': '2024-03-10',
        'SUM(Sales)': '1,200',
        'Column_3': 'x',
        'Column_4': 'extra',
    }
    assert table.rows[1]['DAY(Order Date)'] == '2024-03-11'
    assert table.rows[1]['SUM(Sales)'] == 5


def test_from_records_infers_columns_in_first_seen_order() -> None:
    table = SummaryTable.from_records([{'b': 1, 'a': 2}, {'c': 3, 'a': 4}])
    assert table.columns == ('b', 'a', 'c')


def test_resolve_column() -> None:
    columns = ['Order Date', 'SUM(Sales)', 'AGG(Profit Ratio)']
    assert resolve_column(columns, 'Order Date') == 'Order Date'
    assert resolve_column(columns, 'order date ') == 'Order Date'
    assert resolve_column(columns, 'sales') == 'SUM(Sales)'
    assert resolve_column(columns, 'Profit Ratio') == 'AGG(Profit Ratio)'
    assert resolve_column(columns, 'ATTR(Order Date)') == 'Order Date'
    assert resolve_column(columns, 'Region') is None
    assert resolve_column(columns, '') is None
