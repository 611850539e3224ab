"""
Common Schemas Module
=====================

Response envelopes and helpers shared by every resource.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body produced by the application exception handlers."""

    message: str = Field(..., description="Human readable error message")
    details: Dict[str, Any] = Field(default_factory=dict, description="Extra error context")


class MessageResponse(BaseModel):
    message: str


def empty_to_none(value: Any) -> Optional[Any]:
    """Treat empty strings sent by HTML forms as missing values."""
    if isinstance(value, str) and value.strip() == "":
        return None
    return value
