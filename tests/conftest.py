"""Shared fixtures: an app with zero-delay progress and a fixed test token."""

import pytest
from fastapi.testclient import TestClient

from dbmt.api.main import create_app
from dbmt.config import Settings
from dbmt.storage import MigrationStore

TEST_TOKEN = "test-token"
TEST_USER = "user-1"


@pytest.fixture
def settings():
    return Settings(api_tokens={TEST_TOKEN: TEST_USER}, progress_interval=0)


@pytest.fixture
def store():
    return MigrationStore()


@pytest.fixture
def app(settings, store):
    return create_app(settings=settings, store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {TEST_TOKEN}"}
