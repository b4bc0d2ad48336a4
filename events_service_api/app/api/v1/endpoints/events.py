"""
Event endpoints for API v1.

Every route requires a logged-in session unless authentication is
disabled.
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from events_service_api.app.core.security import require_login
from events_service_api.app.schemas.common import ValidationErrorResponse
from events_service_api.app.schemas.event import EventRead
from events_service_api.app.services.errors import EmptyUpdateError
from events_service_api.app.services.event_service import EventService
from events_service_api.app.api.deps import ensure_object_id


router = APIRouter()

_VALIDATION_RESPONSE = {400: {"model": ValidationErrorResponse}}


@router.get("/", response_model=List[EventRead])
async def list_events(
    owner_id: Optional[str] = Query(None, alias="ownerID"),
    visibility: Optional[str] = Query(None),
    current_user: Optional[dict] = Depends(require_login),
) -> List[EventRead]:
    """List events.

    - **ownerID**: only events owned by this user.
    - **visibility**: only events with this visibility (`public`,
      `subscribers` or `private`).
    """
    return await EventService.list_events(owner_id=owner_id, visibility=visibility)


@router.get("/{event_id}", response_model=EventRead)
async def get_event(
    event_id: str,
    current_user: Optional[dict] = Depends(require_login),
) -> EventRead:
    """Get one event by id."""
    ensure_object_id(event_id, "event")
    try:
        return await EventService.get_event(event_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post(
    "/",
    response_model=EventRead,
    status_code=status.HTTP_201_CREATED,
    responses=_VALIDATION_RESPONSE,
)
async def create_event(
    body: Any = Body(None),
    current_user: Optional[dict] = Depends(require_login),
) -> EventRead:
    """Create a new event.

    All fields are required.  ``datetime_end`` may not precede
    ``datetime_start`` and ``repeatUntil`` may not precede either.
    """
    return await EventService.create_event(body, current_user)


@router.put("/{event_id}", response_model=EventRead, responses=_VALIDATION_RESPONSE)
async def update_event(
    event_id: str,
    body: Any = Body(None),
    current_user: Optional[dict] = Depends(require_login),
) -> EventRead:
    """Update an event by id.  Unspecified fields remain unchanged."""
    ensure_object_id(event_id, "event")
    try:
        return await EventService.update_event(event_id, body)
    except EmptyUpdateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No update fields provided.") from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: str,
    current_user: Optional[dict] = Depends(require_login),
) -> None:
    """Delete an event by id."""
    ensure_object_id(event_id, "event")
    try:
        await EventService.delete_event(event_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return None
