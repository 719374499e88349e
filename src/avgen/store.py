"""Per-session working directories and published video placement."""

import logging
import shutil
from pathlib import Path
from typing import Optional

from .config import config

logger = logging.getLogger(__name__)


class ArtifactStore:
    """Filesystem layout for sessions and published artifacts.

    Every session gets its own directory under ``temp_dir``; every attempt
    gets its own subdirectory of that. Published files live flat in
    ``videos_dir`` and are named after the session id, so concurrent
    sessions never write the same path.
    """

    PUBLIC_PREFIX = "/videos"

    def __init__(
        self,
        videos_dir: Optional[Path] = None,
        temp_dir: Optional[Path] = None,
    ) -> None:
        """Initialize the store.

        Args:
            videos_dir: Directory for published videos. Defaults to config.videos_dir.
            temp_dir: Root of session working directories. Defaults to config.temp_dir.
        """
        self._videos_dir = Path(videos_dir or config.videos_dir)
        self._temp_dir = Path(temp_dir or config.temp_dir)
        self._videos_dir.mkdir(parents=True, exist_ok=True)

    @property
    def videos_dir(self) -> Path:
        return self._videos_dir

    @property
    def temp_dir(self) -> Path:
        return self._temp_dir

    def session_dir(self, session_id: str) -> Path:
        """Return (creating it) the working directory of a session."""
        path = self._temp_dir / session_id
        path.mkdir(parents=True, exist_ok=True)
        return path

    def attempt_dir(self, session_id: str, attempt: int) -> Path:
        """Return (creating it) a fresh working directory for one attempt."""
        path = self.session_dir(session_id) / f"attempt_{attempt}"
        path.mkdir(parents=True, exist_ok=True)
        return path

    def session_record_path(self, session_id: str) -> Path:
        return self._temp_dir / session_id / "session.yaml"

    def path_for(self, name: str) -> Path:
        """Absolute path of a published artifact."""
        return self._videos_dir / name

    def public_path(self, name: str) -> str:
        """Client-facing path of a published artifact."""
        return f"{self.PUBLIC_PREFIX}/{name}"

    def publish(self, source: Path, name: str) -> Path:
        """Copy a file into the published directory.

        Args:
            source: File to publish.
            name: Target file name (session-scoped).

        Returns:
            Absolute path of the published copy.
        """
        target = self.path_for(name)
        shutil.copyfile(source, target)
        logger.debug(f"Published {source} -> {target}")
        return target

    # Naming scheme, derived from the session id only

    @staticmethod
    def video_name(session_id: str) -> str:
        return f"{session_id}.mp4"

    @staticmethod
    def audio_name(session_id: str) -> str:
        return f"{session_id}_audio.mp3"

    @staticmethod
    def extended_name(session_id: str) -> str:
        return f"{session_id}_extended.mp4"

    @staticmethod
    def narrated_name(session_id: str) -> str:
        return f"{session_id}_with_audio.mp4"
