"""Configuration management."""

import os
import sys
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")


def _workspace() -> Path:
    return Path(os.getenv("AVGEN_WORKSPACE", "."))


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key"
    )

    # Paths
    workspace: Path = Field(
        default_factory=_workspace,
        description="Workspace directory"
    )
    videos_dir: Path = Field(
        default_factory=lambda: Path(
            os.getenv("AVGEN_VIDEOS_DIR", str(_workspace() / "public" / "videos"))
        ),
        description="Published videos directory (served under /videos)"
    )
    temp_dir: Path = Field(
        default_factory=lambda: Path(
            os.getenv("AVGEN_TEMP_DIR", str(_workspace() / "temp"))
        ),
        description="Root for per-session working directories"
    )

    # External tools
    manim_cli: str = Field(
        default_factory=lambda: os.getenv("MANIM_CLI", "python3 -m manim"),
        description="Manim command line (may contain arguments)"
    )
    python_exe: str = Field(
        default_factory=lambda: os.getenv("AVGEN_PYTHON", sys.executable),
        description="Python interpreter used for the speech worker"
    )
    ffmpeg_bin: str = Field(
        default_factory=lambda: os.getenv("FFMPEG_BIN", "ffmpeg"),
        description="ffmpeg executable"
    )
    ffprobe_bin: str = Field(
        default_factory=lambda: os.getenv("FFPROBE_BIN", "ffprobe"),
        description="ffprobe executable"
    )

    # Model settings
    default_model: str = Field(
        default_factory=lambda: os.getenv("AVGEN_MODEL", "claude-sonnet-4-20250514"),
        description="Default Claude model"
    )

    # Generation / render settings
    scene_name: str = Field(default="GeneratedScene", description="Fixed scene class name")
    render_quality: str = Field(
        default_factory=lambda: os.getenv("AVGEN_QUALITY", "h"),
        description="Manim quality flag (l, m, h, p, k)"
    )
    max_attempts: int = Field(default=5, description="Generate/render attempt budget", ge=1)
    render_timeout: float = Field(default=180.0, description="Render timeout in seconds", gt=0)

    # Narration settings
    narration_enabled: bool = Field(
        default_factory=lambda: _env_flag("AVGEN_NARRATION", True),
        description="Add a voice-over after a successful render"
    )
    tts_language: str = Field(
        default_factory=lambda: os.getenv("AVGEN_TTS_LANG", "en"),
        description="gTTS language code"
    )
    tts_timeout: float = Field(default=30.0, description="Speech synthesis timeout in seconds", gt=0)
    probe_timeout: float = Field(default=30.0, description="ffprobe timeout in seconds", gt=0)
    ffmpeg_timeout: float = Field(default=300.0, description="ffmpeg merge timeout in seconds", gt=0)
    extension_tolerance: float = Field(
        default=0.5,
        description="Audio may exceed video by this many seconds before the video is extended",
        ge=0
    )

    class Config:
        """Pydantic config."""
        frozen = False

    def validate_required(self) -> None:
        """Validate that required credentials are set."""
        if not self.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")


# Global config instance
config = Config()
