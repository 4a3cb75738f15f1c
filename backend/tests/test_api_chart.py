from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from fastapi.testclient import TestClient

from narrator.main import app

NOW = '2024-03-15T10:00:00Z'


def _rows() -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    start = date(2024, 3, 1)
    for offset in range(14):
        day = start + timedelta(days=offset)
        # comparison days get 10..16, current days get 1..7
        value = 10 + offset if offset < 7 else offset - 6
        rows.append({'Order Date': day.isoformat(), 'Sales': value})
    return rows


def _payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        'rows': _rows(),
        'date_column': 'Order Date',
        'measure_column': 'Sales',
        'period_type': 'rolling7',
        'timezone': 'UTC',
        'now': NOW,
        'width': 600,
        'height': 240,
    }
    payload.update(overrides)
    return payload


def test_chart_builds_dataset_and_commands() -> None:
    client = TestClient(app)
    response = client.post('/api/chart', json=_payload(include_svg=True))
    assert response.status_code == 200
    payload = response.json()

    assert payload['rendered'] is True
    assert payload['date_range'] == {'min': '2024-03-01', 'max': '2024-03-14', 'days': 14}
    dataset = payload['dataset']
    assert [p['value'] for p in dataset['current']] == [1, 2, 3, 4, 5, 6, 7]
    assert [p['value'] for p in dataset['comparison']] == [10, 11, 12, 13, 14, 15, 16]
    assert dataset['metadata']['yesterday_label'] == '3/14'

    ops = [command['op'] for command in payload['commands']]
    assert ops[0] == 'clear'
    assert ops.count('polyline') == 2
    assert '<svg' in payload['svg']


def test_last_day_chart_is_not_rendered() -> None:
    client = TestClient(app)
    response = client.post('/api/chart', json=_payload(period_type='lastDay'))
    assert response.status_code == 200
    payload = response.json()
    assert payload['split'] is None
    assert payload['dataset'] is None
    assert payload['rendered'] is False
    assert payload['commands'] == []
    assert payload['svg'] is None


def test_missing_column_yields_no_dataset() -> None:
    client = TestClient(app)
    response = client.post('/api/chart', json=_payload(measure_column='Profit'))
    assert response.status_code == 200
    assert response.json()['dataset'] is None


def test_chart_rejects_unknown_period() -> None:
    client = TestClient(app)
    assert client.post('/api/chart', json=_payload(period_type='ytd')).status_code == 400


def test_hit_test_returns_point_and_tooltip() -> None:
    client = TestClient(app)
    chart = client.post('/api/chart', json=_payload()).json()
    current_line = [command for command in chart['commands'] if command['op'] == 'polyline'][-1]
    x, y = current_line['points'][2]

    response = client.post('/api/chart/hit-test', json=_payload(x=x + 2, y=y + 1))
    assert response.status_code == 200
    payload = response.json()
    assert payload['point']['series'] == 'current'
    assert payload['point']['day_index'] == 3
    assert payload['point']['label'] == '2024-03-10'
    assert payload['tooltip']['title'] == 'Current: 2024-03-10'
    assert payload['tooltip']['lines'] == ['Sales: 3']


def test_hit_test_far_from_points_is_empty() -> None:
    client = TestClient(app)
    response = client.post('/api/chart/hit-test', json=_payload(x=1, y=1))
    assert response.status_code == 200
    assert response.json() == {'point': None, 'tooltip': None}
