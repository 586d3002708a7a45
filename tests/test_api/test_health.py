# nosec B101


import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from api.dependencies import AppDependencies, get_app_dependencies
from api.main import app


@pytest.fixture
def mock_deps():
    deps = AppDependencies()
    deps.db = MagicMock()
    deps.db.ping = AsyncMock(return_value=True)
    deps.redis_client = MagicMock()
    deps.redis_client.ping = AsyncMock(return_value=True)
    deps.aggregation_service = MagicMock()
    return deps


@pytest.fixture
def client(mock_deps):
    app.dependency_overrides[get_app_dependencies] = lambda: mock_deps
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def test_health_all_services_up(client):
    response = client.get('/health')

    assert response.status_code == 200
    assert response.json() == {
        'status': 'healthy',
        'services': {'database': 'healthy', 'redis': 'healthy', 'engine': 'healthy'},
    }


def test_health_degraded_when_redis_down(client, mock_deps):
    mock_deps.redis_client.ping = AsyncMock(side_effect=ConnectionError('refused'))

    response = client.get('/health')

    assert response.status_code == 200
    assert response.json()['status'] == 'degraded'
    assert response.json()['services']['redis'] == 'unhealthy'
