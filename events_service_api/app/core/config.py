"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables, with defaults for every field, so the service
can start locally without any setup.  In a deployment, override the
values through the environment (or a ``.env`` file loaded by your
process manager) before this module is imported.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Events Service API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))

    # Path to the SQLite file holding the document collections.  Relative
    # paths are resolved against the project root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "events_service.db")

    # Session cookie issued after a successful Google login.  The token
    # is signed with ``session_secret`` and expires after
    # ``session_max_age`` seconds (eight hours by default).
    session_secret: str = os.getenv("SESSION_SECRET", "change_me")
    session_max_age: int = int(os.getenv("SESSION_MAX_AGE", str(60 * 60 * 8)))
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "sid")
    session_cookie_secure: bool = _env_flag("SESSION_COOKIE_SECURE", "false")

    # When disabled, mutating endpoints accept anonymous requests.  Useful
    # for local development without Google credentials.
    auth_required: bool = _env_flag("AUTH_REQUIRED", "true")

    google_client_id: str = os.getenv("GOOGLE_CLIENT_ID", "")
    google_client_secret: str = os.getenv("GOOGLE_CLIENT_SECRET", "")
    google_callback_url: str = os.getenv(
        "GOOGLE_CALLBACK_URL", "http://localhost:3000/auth/google/callback"
    )

    # Comma-separated list of allowed CORS origins.
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    @property
    def oauth_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.
settings = Settings()
