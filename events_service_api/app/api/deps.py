"""Shared helpers for API routes."""

from fastapi import HTTPException, status

from ..core.validation import is_object_id


def ensure_object_id(value: str, resource: str) -> str:
    """Reject path identifiers that cannot name a stored document."""
    if not is_object_id(value):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {resource} id format.",
        )
    return value
