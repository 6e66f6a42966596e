# tests/services/api/conftest.py
from __future__ import annotations
import pytest
from starlette.testclient import TestClient

from streamstats.services.api.app import create_app
from streamstats.services.api.deps import get_registry


@pytest.fixture()
def api_client(registry):
    """
    A TestClient whose `get_registry` dependency is overridden to hand out
    the test registry (backed by the scriptable fake probe).
    """
    app = create_app()
    app.dependency_overrides[get_registry] = lambda: registry
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
