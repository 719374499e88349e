"""Render outcome data model."""

from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field


class RenderOutcome(BaseModel):
    """Result of one renderer invocation."""

    success: bool = Field(..., description="Whether a video was produced")
    video_path: Optional[str] = Field(None, description="Public path of the published video")
    output_file: Optional[Path] = Field(None, description="Absolute path of the published video")
    error: Optional[str] = Field(None, description="Diagnostic text on failure")
    cmd: Optional[str] = Field(None, description="Invoked command line")
    stdout: str = Field(default="", description="Captured renderer stdout")
    stderr: str = Field(default="", description="Captured renderer stderr")

    @classmethod
    def failed(cls, error: str, cmd: Optional[str] = None, stdout: str = "", stderr: str = "") -> "RenderOutcome":
        """Build a failure outcome."""
        return cls(success=False, error=error, cmd=cmd, stdout=stdout, stderr=stderr)
