"""
User endpoints for API v1.

Request bodies are validated by ``UserService``; a rejected body is
turned into a 400 response by the application's exception handler.
Every route requires a logged-in session unless authentication is
disabled, and a user may only modify or delete their own account.
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from events_service_api.app.core.security import require_login
from events_service_api.app.schemas.common import ValidationErrorResponse
from events_service_api.app.schemas.user import UserRead
from events_service_api.app.services.errors import DuplicateEmailError, EmptyUpdateError
from events_service_api.app.services.user_service import UserService
from events_service_api.app.api.deps import ensure_object_id


router = APIRouter()

_VALIDATION_RESPONSE = {400: {"model": ValidationErrorResponse}}


def _ensure_self(user_id: str, current_user: Optional[dict]) -> None:
    if current_user is not None and current_user.get("user_id") != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")


@router.get("/", response_model=List[UserRead])
async def list_users(current_user: Optional[dict] = Depends(require_login)) -> List[UserRead]:
    """List all users."""
    return await UserService.list_users()


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: str,
    current_user: Optional[dict] = Depends(require_login),
) -> UserRead:
    """Get one user by id."""
    ensure_object_id(user_id, "user")
    try:
        return await UserService.get_user(user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post(
    "/",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses=_VALIDATION_RESPONSE,
)
async def create_user(
    body: Any = Body(None),
    current_user: Optional[dict] = Depends(require_login),
) -> UserRead:
    """Create a user.

    ``firstName``, ``lastName``, ``email`` and ``subscribedTo`` (a list
    of user ids, possibly empty) are required; ``avatar`` is optional.
    """
    try:
        return await UserService.create_user(body)
    except DuplicateEmailError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A user with that email already exists.",
        ) from e


@router.put("/{user_id}", response_model=UserRead, responses=_VALIDATION_RESPONSE)
async def update_user(
    user_id: str,
    body: Any = Body(None),
    current_user: Optional[dict] = Depends(require_login),
) -> UserRead:
    """Update a user by id.

    Every field is optional but at least one must be given.  Unknown
    fields are ignored.
    """
    ensure_object_id(user_id, "user")
    _ensure_self(user_id, current_user)
    try:
        return await UserService.update_user(user_id, body)
    except EmptyUpdateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No update fields provided.") from e
    except DuplicateEmailError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A user with that email already exists.",
        ) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    current_user: Optional[dict] = Depends(require_login),
) -> None:
    """Delete a user by id."""
    ensure_object_id(user_id, "user")
    _ensure_self(user_id, current_user)
    try:
        await UserService.delete_user(user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return None
