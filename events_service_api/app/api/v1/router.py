"""
Top-level router for version 1 of the API.

Aggregates the resource routers under a single router that the
application mounts at ``/api/v1``.
"""

from fastapi import APIRouter

from .endpoints import events, users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(events.router, prefix="/events", tags=["events"])
