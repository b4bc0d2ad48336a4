"""
Google OAuth 2.0 authorization-code flow.

``GoogleOAuthClient`` builds the consent URL the browser is sent to and,
once Google redirects back with a ``code``, exchanges it for an access
token and fetches the user's OpenID Connect profile.  HTTP calls are
made with ``requests`` and are blocking, so callers should run them
outside the event loop.
"""

import logging
import secrets
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

from .config import settings


logger = logging.getLogger(__name__)

AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = ("openid", "profile", "email")


class OAuthError(Exception):
    """Raised when the provider rejects a request or returns bad data."""


def new_state() -> str:
    """Return a random value used to bind the callback to the login request."""
    return secrets.token_urlsafe(24)


class GoogleOAuthClient:
    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        timeout: float = 10.0,
    ) -> None:
        self.client_id = client_id or settings.google_client_id
        self.client_secret = client_secret or settings.google_client_secret
        self.redirect_uri = redirect_uri or settings.google_callback_url
        self.timeout = timeout

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "state": state,
        }
        return f"{AUTHORIZATION_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> Dict[str, Any]:
        """Trade an authorization code for the user's profile.

        Returns the userinfo document (``sub``, ``email``, ``given_name``,
        ``family_name``, ``picture``).  Raises ``OAuthError`` on any
        transport or provider failure.
        """
        try:
            token_response = requests.post(
                TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "authorization_code",
                },
                timeout=self.timeout,
            )
            token_response.raise_for_status()
            access_token = token_response.json().get("access_token")
            if not access_token:
                raise OAuthError("Token response did not include an access token")

            profile_response = requests.get(
                USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
            profile_response.raise_for_status()
            profile = profile_response.json()
        except requests.RequestException as exc:
            logger.warning("Google OAuth request failed: %s", exc)
            raise OAuthError("Failed to contact Google") from exc
        except ValueError as exc:
            raise OAuthError("Google returned a malformed response") from exc

        if not isinstance(profile, dict) or not profile.get("sub"):
            raise OAuthError("Google profile is missing the subject identifier")
        return profile
