from __future__ import annotations

from fastapi.testclient import TestClient

from narrator.main import app

NOW = '2024-03-15T10:00:00Z'


def test_period_catalog() -> None:
    client = TestClient(app)
    response = client.get('/api/periods')
    assert response.status_code == 200
    payload = response.json()

    assert payload['default_period'] == 'mtd'
    assert payload['timezones'] == ['UTC', 'JST']
    periods = {row['period_type']: row for row in payload['periods']}
    assert len(periods) == 9
    assert periods['lastDay']['comparable'] is False
    assert periods['mtd']['category'] == 'period_to_date'
    assert periods['rolling7']['filter'] == {
        'use_relative_date': True,
        'period_unit': 'days',
        'range_type': 'last_n',
        'range_n': 7,
    }


def test_period_range() -> None:
    client = TestClient(app)
    response = client.get('/api/periods/mtd/range', params={'timezone': 'UTC', 'now': NOW})
    assert response.status_code == 200
    payload = response.json()
    assert payload['yesterday'] == '2024-03-14'
    assert payload['date_range'] == {'min': '2024-02-01', 'max': '2024-03-14', 'days': 43}


def test_period_range_accepts_plain_date_and_jst() -> None:
    client = TestClient(app)
    response = client.get('/api/periods/lastDay/range', params={'timezone': 'jst', 'now': '2024-03-15'})
    assert response.status_code == 200
    payload = response.json()
    # Midnight UTC is 09:00 in Tokyo, so yesterday is still the 14th.
    assert payload['timezone'] == 'JST'
    assert payload['yesterday'] == '2024-03-14'
    assert payload['date_range']['days'] == 7


def test_period_split() -> None:
    client = TestClient(app)
    response = client.get('/api/periods/mtd/split', params={'now': NOW})
    assert response.status_code == 200
    split = response.json()['split']
    assert split['comparison_range']['min'] == '2024-02-01'
    assert split['comparison_range']['max'] == '2024-02-14'
    assert split['current_range']['min'] == '2024-03-01'
    assert split['total_days'] == 31
    assert split['yesterday_index'] == 14
    assert split['yesterday_label'] == '3/14'


def test_last_day_split_is_null() -> None:
    client = TestClient(app)
    response = client.get('/api/periods/lastDay/split', params={'now': NOW})
    assert response.status_code == 200
    assert response.json()['split'] is None


def test_bad_parameters_are_rejected() -> None:
    client = TestClient(app)
    assert client.get('/api/periods/yearly/range', params={'now': NOW}).status_code == 400
    assert client.get('/api/periods/mtd/range', params={'timezone': 'PST', 'now': NOW}).status_code == 400
    assert client.get('/api/periods/mtd/split', params={'now': 'yesterday'}).status_code == 400
