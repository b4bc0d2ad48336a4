"""
Session tokens and login dependencies.

After a successful Google login the service issues a session token:
a compact JWT-style string (``header.payload.signature``) signed with
HMAC-SHA256 using ``settings.session_secret``.  The token carries the
user's document id in ``sub`` and an expiry timestamp in ``exp``.  It
is delivered in the session cookie and may also be presented as an
``Authorization: Bearer`` header by API clients.
"""

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .db import Collection


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_session_token(data: Dict[str, str], max_age: Optional[int] = None) -> str:
    """Create a signed session token with the given claims.

    Parameters
    ----------
    data : dict
        Claims to embed, typically ``{"sub": <user id>}``.
    max_age : Optional[int]
        Lifetime in seconds.  Defaults to ``settings.session_max_age``.

    Returns
    -------
    str
        The signed token.
    """
    claims = dict(data)
    claims["exp"] = int(time.time()) + (max_age or settings.session_max_age)
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(claims, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.session_secret))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_session_token(token: str) -> Optional[Dict[str, str]]:
    """Verify a session token and return its claims.

    Returns ``None`` if the token is malformed, carries a bad signature
    or has expired.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    try:
        actual_sig = _b64_url_decode(signature_b64)
        if not hmac.compare_digest(_sign(signing_input, settings.session_secret), actual_sig):
            return None
        claims = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    if not isinstance(claims, dict):
        return None
    exp = claims.get("exp")
    if not isinstance(exp, int) or exp < int(time.time()):
        return None
    return claims


bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Dict[str, str]:
    """Dependency returning the logged-in user.

    The token is taken from the session cookie, or from the
    ``Authorization`` header when no cookie is present.  The user the
    token refers to must still exist.  Raises HTTP 401 otherwise.
    """
    token = request.cookies.get(settings.session_cookie_name)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise _unauthorized("Not authenticated")

    claims = decode_session_token(token)
    if not claims or not claims.get("sub"):
        raise _unauthorized("Invalid or expired session")

    user = Collection("users").find_one(str(claims["sub"]))
    if not user:
        raise _unauthorized("User no longer exists")
    return {"user_id": user["_id"], "email": user.get("email")}


def require_login(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Optional[Dict[str, str]]:
    """Like ``get_current_user`` but honours ``settings.auth_required``.

    With authentication disabled, anonymous requests pass through as
    ``None`` while requests carrying a session still resolve to a user.
    """
    if settings.auth_required:
        return get_current_user(request, credentials)
    has_token = request.cookies.get(settings.session_cookie_name) or credentials is not None
    if not has_token:
        return None
    return get_current_user(request, credentials)
