"""Narration artifact data model."""

from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field


class NarrationArtifact(BaseModel):
    """Voice-over produced for a successful render."""

    text: str = Field(..., description="Narration script")
    audio_path: Path = Field(..., description="Synthesized speech file")
    audio_duration: float = Field(..., description="Speech duration in seconds", ge=0)
    video_duration: float = Field(..., description="Original video duration in seconds", ge=0)
    extended_video_path: Optional[Path] = Field(None, description="Looped video, when extension was needed")
    final_video_path: str = Field(..., description="Public path of the merged video")

    @property
    def extended(self) -> bool:
        """Whether the video was looped to fit the audio."""
        return self.extended_video_path is not None
