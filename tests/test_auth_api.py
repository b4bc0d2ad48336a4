from urllib.parse import parse_qs, urlparse

import pytest

from events_service_api.app.api.auth import STATE_COOKIE, get_oauth_client
from events_service_api.app.core.config import settings
from events_service_api.app.core.db import Collection
from events_service_api.app.core.oauth import GoogleOAuthClient, OAuthError

PROFILE = {
    "sub": "google-123",
    "email": "katherine@example.com",
    "given_name": "Katherine",
    "family_name": "Johnson",
    "picture": "https://example.com/k.png",
}


class StubOAuthClient(GoogleOAuthClient):
    def __init__(self, profile=None, error=None):
        super().__init__(client_id="id", client_secret="secret", redirect_uri="http://testserver/cb")
        self.profile = profile or PROFILE
        self.error = error
        self.codes = []

    def exchange_code(self, code):
        self.codes.append(code)
        if self.error:
            raise self.error
        return self.profile


@pytest.fixture
def oauth_client(client):
    stub = StubOAuthClient()
    client.app.dependency_overrides[get_oauth_client] = lambda: stub
    yield stub
    client.app.dependency_overrides.clear()


def test_login_page(client):
    response = client.get("/login")
    assert response.status_code == 200
    assert 'href="/auth/google"' in response.text


def test_google_login_unconfigured(client, monkeypatch):
    monkeypatch.setattr(settings, "google_client_id", "")
    assert client.get("/auth/google", follow_redirects=False).status_code == 503


def test_google_login_redirects_to_consent(client, oauth_client, monkeypatch):
    monkeypatch.setattr(settings, "google_client_id", "id")
    monkeypatch.setattr(settings, "google_client_secret", "secret")

    response = client.get("/auth/google", follow_redirects=False)
    assert response.status_code == 307
    location = urlparse(response.headers["location"])
    assert location.netloc == "accounts.google.com"
    query = parse_qs(location.query)
    assert query["client_id"] == ["id"]
    assert query["state"] == [response.cookies[STATE_COOKIE]]


def test_callback_creates_user_and_session(client, oauth_client):
    client.cookies.set(STATE_COOKIE, "state-1")
    response = client.get(
        "/auth/google/callback",
        params={"code": "abc", "state": "state-1"},
        follow_redirects=False,
    )
    assert response.status_code == 307
    assert response.headers["location"] == "/docs"
    assert settings.session_cookie_name in response.cookies
    assert oauth_client.codes == ["abc"]

    users = Collection("users").find({"googleId": "google-123"})
    assert len(users) == 1
    assert users[0]["firstName"] == "Katherine"
    assert users[0]["subscribedTo"] == []

    # the session cookie now authenticates API calls
    listing = client.get("/api/v1/users/")
    assert listing.status_code == 200
    assert [user["email"] for user in listing.json()] == ["katherine@example.com"]


def test_callback_reuses_existing_user(client, oauth_client):
    client.cookies.set(STATE_COOKIE, "s")
    for _ in range(2):
        client.get("/auth/google/callback", params={"code": "c", "state": "s"}, follow_redirects=False)
    assert len(Collection("users").find()) == 1


def test_callback_links_user_with_same_email(client, oauth_client):
    existing = Collection("users").insert_one(
        {"firstName": "K", "lastName": "J", "email": "katherine@example.com", "subscribedTo": []}
    )
    client.cookies.set(STATE_COOKIE, "s")
    client.get("/auth/google/callback", params={"code": "c", "state": "s"}, follow_redirects=False)

    users = Collection("users").find()
    assert [user["_id"] for user in users] == [existing]
    assert users[0]["googleId"] == "google-123"


def test_callback_rejects_state_mismatch(client, oauth_client):
    client.cookies.set(STATE_COOKIE, "expected")
    response = client.get(
        "/auth/google/callback",
        params={"code": "abc", "state": "forged"},
        follow_redirects=False,
    )
    assert response.status_code == 400
    assert oauth_client.codes == []


def test_callback_without_code_returns_to_login(client, oauth_client):
    response = client.get(
        "/auth/google/callback",
        params={"error": "access_denied"},
        follow_redirects=False,
    )
    assert response.status_code == 307
    assert response.headers["location"] == "/login"


def test_callback_provider_failure(client, oauth_client):
    oauth_client.error = OAuthError("Failed to contact Google")
    client.cookies.set(STATE_COOKIE, "s")
    response = client.get(
        "/auth/google/callback",
        params={"code": "abc", "state": "s"},
        follow_redirects=False,
    )
    assert response.status_code == 502


def test_logout_clears_session(client, user_id):
    response = client.get("/logout", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/login"
    assert 'sid=""' in response.headers["set-cookie"] or "Max-Age=0" in response.headers["set-cookie"]
