"""Error envelope returned when a request body fails validation."""

from typing import List

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    field: str = Field(..., examples=["email"])
    message: str = Field(..., examples=["email must be a valid email address."])


class ValidationErrorResponse(BaseModel):
    message: str = Field(..., examples=["Invalid user payload."])
    details: List[ErrorDetail]
