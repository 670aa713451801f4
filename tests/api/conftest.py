import pytest
from fastapi.testclient import TestClient

from api.main import create_app


@pytest.fixture
def api_client(workflow_settings, service):
    app = create_app(workflow_settings, service=service)
    with TestClient(app) as client:
        yield client
