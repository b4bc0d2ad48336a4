"""
Login routes: Google sign-in and session handling.

``/auth/google`` sends the browser to Google's consent screen.  Google
redirects back to ``/auth/google/callback`` with an authorization
code, which is exchanged for the user's profile; the matching user
document is created on first login and a signed session cookie is set.
``/logout`` clears that cookie.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from events_service_api.app.core.config import settings
from events_service_api.app.core.oauth import GoogleOAuthClient, OAuthError, new_state
from events_service_api.app.core.security import create_session_token
from events_service_api.app.services.user_service import UserService


logger = logging.getLogger(__name__)

router = APIRouter()

STATE_COOKIE = "oauth_state"
LOGIN_PAGE = """<!DOCTYPE html>
<html>
  <head><title>Login</title></head>
  <body>
    <h1>Login</h1>
    <a href="/auth/google">Sign in with Google</a>
  </body>
</html>
"""


def get_oauth_client() -> GoogleOAuthClient:
    return GoogleOAuthClient()


@router.get("/login", response_class=HTMLResponse, include_in_schema=False)
async def login_page() -> HTMLResponse:
    return HTMLResponse(LOGIN_PAGE)


@router.get("/auth/google")
async def google_login(client: GoogleOAuthClient = Depends(get_oauth_client)) -> RedirectResponse:
    """Redirect to Google's consent screen."""
    if not settings.oauth_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google login is not configured.",
        )
    state = new_state()
    response = RedirectResponse(client.authorization_url(state))
    response.set_cookie(
        STATE_COOKIE,
        state,
        max_age=600,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return response


@router.get("/auth/google/callback")
def google_callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    client: GoogleOAuthClient = Depends(get_oauth_client),
) -> RedirectResponse:
    """Finish the Google login and start a session.

    Declared as a plain function so the blocking calls to Google run in
    the thread pool.
    """
    if error or not code:
        logger.info("Google login was not completed: %s", error or "missing code")
        return RedirectResponse("/login")

    expected_state = request.cookies.get(STATE_COOKIE)
    if not expected_state or state != expected_state:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid OAuth state.")

    try:
        profile = client.exchange_code(code)
    except OAuthError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    user_id = UserService.upsert_google_user(profile)
    logger.info("User %s logged in with Google", user_id)

    response = RedirectResponse("/docs")
    response.delete_cookie(STATE_COOKIE)
    response.set_cookie(
        settings.session_cookie_name,
        create_session_token({"sub": user_id}),
        max_age=settings.session_max_age,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return response


@router.get("/logout")
async def logout() -> RedirectResponse:
    """End the session and return to the login page."""
    response = RedirectResponse("/login")
    response.delete_cookie(settings.session_cookie_name)
    return response
