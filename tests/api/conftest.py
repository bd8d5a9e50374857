"""API-specific test fixtures."""

import pytest
from fastapi.testclient import TestClient

from tracking_receiver.main import create_app


@pytest.fixture
def api_client(settings):
    """FastAPI test client over a fresh in-memory database.

    The lifespan builds the service graph inside the TestClient's own event
    loop; use ``api_client.portal`` to call async services from a test.
    """
    app = create_app(settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def services(api_client):
    return api_client.app.state.services


@pytest.fixture
def api_key(api_client, services) -> str:
    """Overrides the service-level fixture: rotate inside the app's event loop."""
    return api_client.portal.call(services.credentials.rotate_key)


@pytest.fixture
def prefix(settings) -> str:
    return settings.api_prefix
