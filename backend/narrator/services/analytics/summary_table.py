from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

AGGREGATE_WRAPPER_RE = re.compile(r'^\s*[A-Za-z_][A-Za-z0-9_]*\s*\((.*)\)\s*$')


@dataclass(frozen=True, slots=True)
class SummaryTable:
    """Tabular payload handed over by the host worksheet."""

    columns: tuple[str, ...]
    rows: tuple[Mapping[str, Any], ...]

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        columns: Sequence[str] | None = None,
    ) -> SummaryTable:
        rows = tuple(records)
        if columns is None:
            columns = infer_columns(rows)
        return cls(columns=tuple(columns), rows=rows)

    @classmethod
    def from_cells(cls, columns: Sequence[Any], data: Iterable[Sequence[Any]]) -> SummaryTable:
        names = tuple(column_header(column, idx) for idx, column in enumerate(columns))
        rows: list[dict[str, Any]] = []
        for cells in data:
            record: dict[str, Any] = {}
            for idx, cell in enumerate(cells):
                name = names[idx] if idx < len(names) else f'Column_{idx + 1}'
                record[name] = extract_cell_value(cell)
            rows.append(record)
        return cls(columns=names, rows=tuple(rows))


def infer_columns(rows: Iterable[Mapping[str, Any]]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for row in rows:
        for key in row.keys():
            seen.setdefault(str(key), None)
    return tuple(seen)


def column_header(column: Any, index: int) -> str:
    if isinstance(column, str) and column:
        return column
    if isinstance(column, Mapping):
        for key in ('fieldName', 'displayName', 'columnName', 'caption'):
            value = column.get(key)
            if value:
                return str(value)
    return f'Column_{index + 1}'


def extract_cell_value(cell: Any) -> Any:
    if not isinstance(cell, Mapping):
        return cell
    for key in ('value', 'formattedValue', 'formatted'):
        if cell.get(key) is not None:
            return cell[key]
    return None


def resolve_column(columns: Sequence[str], name: str) -> str | None:
    """Find `name` among `columns`, tolerating case and aggregate wrappers like SUM(...)."""
    if not name:
        return None
    if name in columns:
        return name

    wanted = name.strip().casefold()
    for column in columns:
        if column.strip().casefold() == wanted:
            return column

    for column in columns:
        match = AGGREGATE_WRAPPER_RE.match(column)
        if match and match.group(1).strip().casefold() == wanted:
            return column

    match = AGGREGATE_WRAPPER_RE.match(name)
    if match:
        return resolve_column(columns, match.group(1))
    return None
