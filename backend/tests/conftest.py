import pytest
from fastapi.testclient import TestClient

from taskalloc.core.config import get_settings
from taskalloc.main import create_app


@pytest.fixture(autouse=True)
def fresh_settings():
    """Re-read environment settings for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_app())
