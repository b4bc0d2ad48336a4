import pytest
from fastapi.testclient import TestClient

from events_service_api.app.core.config import settings
from events_service_api.app.core.db import Collection, init_db
from events_service_api.app.core.security import create_session_token
from events_service_api.app.main import create_app


@pytest.fixture
def database(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "events_service_test.db"))
    monkeypatch.setattr(settings, "session_secret", "test-secret")
    monkeypatch.setattr(settings, "auth_required", True)
    init_db()
    return tmp_path


@pytest.fixture
def client(database):
    app = create_app()
    with TestClient(app) as test_client:
        test_client.app = app
        yield test_client


def _insert_user(email: str, first_name: str = "Ada") -> str:
    return Collection("users").insert_one(
        {
            "firstName": first_name,
            "lastName": "Lovelace",
            "email": email,
            "subscribedTo": [],
        }
    )


@pytest.fixture
def user_id(database) -> str:
    return _insert_user("ada@example.com")


@pytest.fixture
def other_user_id(database) -> str:
    return _insert_user("grace@example.com", first_name="Grace")


@pytest.fixture
def auth_headers(user_id) -> dict:
    return {"Authorization": f"Bearer {create_session_token({'sub': user_id})}"}
