"""
Pydantic models for event data.

Events are stored with ISO 8601 timestamps; ``EventRead`` turns them
back into ``datetime`` values so responses are serialized uniformly.
"""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, Field


class EventRead(BaseModel):
    """Schema for reading an event from the API."""

    id: str = Field(..., examples=["65f1c2a4e13b4c0012a3b4c6"])
    ownerID: str = Field(..., examples=["65f1c2a4e13b4c0012a3b4c5"])
    visibility: str = Field(..., examples=["public"])
    googlePoint: str = Field(..., examples=["https://maps.google.com/?q=51.5,-0.12"])
    description: str = Field(..., examples=["Morning run in the park"])
    datetime_start: datetime = Field(..., examples=["2025-09-01T07:00:00Z"])
    datetime_end: datetime = Field(..., examples=["2025-09-01T08:00:00Z"])
    period: datetime = Field(..., examples=["2025-09-08T07:00:00Z"])
    repeatUntil: datetime = Field(..., examples=["2025-12-01T08:00:00Z"])

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "EventRead":
        return cls(
            id=doc["_id"],
            ownerID=doc["ownerID"],
            visibility=doc["visibility"],
            googlePoint=doc["googlePoint"],
            description=doc["description"],
            datetime_start=doc["datetime_start"],
            datetime_end=doc["datetime_end"],
            period=doc["period"],
            repeatUntil=doc["repeatUntil"],
        )
