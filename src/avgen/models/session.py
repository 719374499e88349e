"""Session state and result models."""

import time
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field
import yaml

from .attempt import Attempt


def new_session_id() -> str:
    """Return a unique, time-derived session identifier."""
    return f"{time.time_ns() // 1_000_000}-{uuid.uuid4().hex[:6]}"


class SessionState(str, Enum):
    """Session state enum."""
    START = "start"
    GENERATING = "generating"
    RENDERING = "rendering"
    NARRATING = "narrating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Session(BaseModel):
    """One prompt-to-video request and its attempt history."""

    id: str = Field(default_factory=new_session_id, description="Unique session identifier")
    prompt: str = Field(..., description="User prompt")
    created_at: str = Field(
        default_factory=lambda: datetime.now().isoformat(),
        description="Creation time"
    )
    state: SessionState = Field(default=SessionState.START, description="Current state")
    iterations: List[Attempt] = Field(default_factory=list, description="Attempt records in order")
    video_path: Optional[str] = Field(None, description="Final public video path")
    narration: Optional[str] = Field(None, description="Narration text, if any")
    error: Optional[str] = Field(None, description="Last error on failure")

    class Config:
        """Pydantic config."""
        frozen = False

    def record(self, attempt: Attempt) -> None:
        """Append an attempt record."""
        if attempt.iteration != len(self.iterations) + 1:
            raise ValueError(
                f"Attempt {attempt.iteration} out of order "
                f"({len(self.iterations)} already recorded)"
            )
        self.iterations.append(attempt)

    @property
    def last_error(self) -> Optional[str]:
        """Error text of the most recent attempt."""
        return self.iterations[-1].error if self.iterations else None

    @classmethod
    def from_yaml(cls, path: Path) -> "Session":
        """Load a session record from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls(**data)

    def to_yaml(self, path: Path) -> None:
        """Save the session record to YAML file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)


class GenerationResult(BaseModel):
    """Outcome of a full generate/render/narrate run."""

    success: bool
    session_id: Optional[str] = None
    video_path: Optional[str] = None
    narration: Optional[str] = None
    iterations: List[Attempt] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def attempts(self) -> int:
        return len(self.iterations)


class GenerationResponse(GenerationResult):
    """Inbound API response."""

    error_type: Optional[str] = Field(
        None,
        description="request_validation, attempts_exhausted or internal"
    )

    @classmethod
    def from_result(cls, result: GenerationResult) -> "GenerationResponse":
        return cls(
            **result.model_dump(),
            error_type=None if result.success else "attempts_exhausted",
        )

    @classmethod
    def rejected(cls, error: str) -> "GenerationResponse":
        return cls(success=False, error=error, error_type="request_validation")

    @classmethod
    def internal(cls, error: str) -> "GenerationResponse":
        return cls(success=False, error=error, error_type="internal")
