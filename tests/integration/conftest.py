import pytest
from fastapi.testclient import TestClient

from app.http_handler import app
from app.settings import Settings
from tests.helpers.utils import auth_header


@pytest.fixture
def test_client(initialize_posts_table) -> TestClient:
    return TestClient(app, raise_server_exceptions=True)


@pytest.fixture
def owner_headers(owner: str, settings: Settings) -> dict[str, str]:
    return auth_header(settings.jwt_secret, owner)


@pytest.fixture
def other_owner_headers(other_owner: str, settings: Settings) -> dict[str, str]:
    return auth_header(settings.jwt_secret, other_owner)
