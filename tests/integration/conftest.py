"""Integration fixtures: a TestClient over the real routers and services."""

import pytest
from fastapi.testclient import TestClient

from api_helpers import build_test_app


@pytest.fixture
def client(app_settings, mongo_db, email_sender):
    app = build_test_app(app_settings, mongo_db, email_sender)
    with TestClient(app) as test_client:
        yield test_client
