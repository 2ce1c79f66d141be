"""Pydantic response contracts for the records API."""
from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field


class RecordEnvelope(BaseModel):
    """Acknowledgement returned by create and update."""

    message: str
    data: Dict[str, Any] = Field(..., description="Record as queued for persistence")


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Body of every 500 response."""

    message: str = "Internal server error"
    error: str
