"""
Pydantic models for user data.

Field names follow the JSON documents stored in the ``users``
collection (camelCase), so stored documents can be returned as is.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class UserRead(BaseModel):
    """Schema for reading a user from the API."""

    id: str = Field(..., examples=["65f1c2a4e13b4c0012a3b4c5"])
    firstName: Optional[str] = Field(None, examples=["Ada"])
    lastName: Optional[str] = Field(None, examples=["Lovelace"])
    avatar: Optional[str] = Field(None, examples=["https://example.com/ada.png"])
    email: Optional[str] = Field(None, examples=["ada@example.com"])
    subscribedTo: List[str] = Field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "UserRead":
        return cls(
            id=doc["_id"],
            firstName=doc.get("firstName"),
            lastName=doc.get("lastName"),
            avatar=doc.get("avatar"),
            email=doc.get("email"),
            subscribedTo=list(doc.get("subscribedTo") or []),
        )
