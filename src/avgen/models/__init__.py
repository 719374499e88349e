"""Data models for the animated video generator."""

from .attempt import Attempt
from .render import RenderOutcome
from .narration import NarrationArtifact
from .session import Session, SessionState, GenerationResult, GenerationResponse, new_session_id

__all__ = [
    "Attempt",
    "RenderOutcome",
    "NarrationArtifact",
    "Session",
    "SessionState",
    "new_session_id",
    "GenerationResult",
    "GenerationResponse",
]
