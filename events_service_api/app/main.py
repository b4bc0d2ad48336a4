"""
Main entrypoint for the Events Service API.

This module assembles the FastAPI application: it sets up logging,
CORS, the handler that renders payload validation failures, the
login routes and the versioned resource routers.  ``create_app``
builds and configures the app, which is then instantiated at module
import time as ``app`` so it can be served directly::

    uvicorn events_service_api.app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from .api.auth import router as auth_router
from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.logging_config import setup_logging
from .core.validation import PayloadValidationError


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Create the database file and apply migrations before serving.
    init_db()
    yield


async def payload_validation_handler(request: Request, exc: PayloadValidationError) -> JSONResponse:
    logger.info(
        "Rejected %s %s: invalid fields %s",
        request.method,
        request.url.path,
        [detail.field for detail in exc.details],
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=exc.to_dict())


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first so that everything below can log.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        description="API for managing users and events with subscription-driven visibility.",
        lifespan=lifespan,
    )

    origins = settings.cors_origin_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers refuse credentialed requests to a wildcard origin.
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PayloadValidationError, payload_validation_handler)

    app.include_router(auth_router, tags=["auth"])
    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    async def index() -> RedirectResponse:
        return RedirectResponse("/docs")

    return app


app = create_app()
