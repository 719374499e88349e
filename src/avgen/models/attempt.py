"""Attempt (iteration record) data model."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


def _now_iso() -> str:
    return datetime.now().isoformat()


class Attempt(BaseModel):
    """One generate+render cycle within a session."""

    iteration: int = Field(..., description="Attempt number, starting at 1", ge=1)
    code: str = Field(default="", description="Generated scene source")
    success: bool = Field(..., description="Whether the render succeeded")
    error: Optional[str] = Field(None, description="Failure text for this attempt")
    timestamp: str = Field(default_factory=_now_iso, description="ISO-8601 record time")
    cmd: Optional[str] = Field(None, description="Render command line, if the renderer ran")

    class Config:
        """Pydantic config."""
        frozen = True
