from __future__ import annotations

from fastapi.testclient import TestClient

from narrator.main import app


def test_health() -> None:
    client = TestClient(app)
    response = client.get('/health')
    assert response.status_code == 200
    assert response.json() == {'status': 'ok'}


def test_unknown_route_is_404() -> None:
    client = TestClient(app)
    assert client.get('/api/nope').status_code == 404
