"""
Common response models.

Dependencies: pydantic
System role: Common API response structures
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body returned for every engine failure."""

    kind: str = Field(description="Error kind (InvalidInput, StoreUnavailable, CriticalFailure, ...)")
    message: str = Field(description="Human-readable error message")
    details: dict | None = Field(default=None, description="Additional error context")
