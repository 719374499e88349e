"""Manim Community Edition render executor."""

import logging
import shlex
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from ..config import config
from ..errors import NoOutputProducedError, RenderTimeoutError
from ..models import RenderOutcome
from ..store import ArtifactStore
from .process import ProcessResult, run_process

logger = logging.getLogger(__name__)

Runner = Callable[..., Awaitable[ProcessResult]]

# Manim writes per-animation fragments here before concatenating them
PARTIAL_DIR = "partial_movie_files"


def find_rendered_videos(media_dir: Path) -> List[Path]:
    """List MP4 files under a media directory, oldest first.

    Ordering is by modification time, then by path, so the last element is
    the most recent output regardless of directory traversal order.

    Args:
        media_dir: Manim media directory to scan recursively.

    Returns:
        Paths sorted ascending by (mtime, path). Empty if the directory is missing.
    """
    if not media_dir.is_dir():
        return []

    videos = [
        p for p in media_dir.rglob("*")
        if p.is_file() and p.suffix.lower() == ".mp4" and PARTIAL_DIR not in p.parts
    ]
    return sorted(videos, key=lambda p: (p.stat().st_mtime, str(p)))


class RenderExecutor:
    """Runs generated scene code through the Manim CLI.

    Each call gets its own working directory (keyed by session and attempt)
    with caching disabled, so renders never reuse stale frames. Failures are
    returned as RenderOutcome objects, never raised.
    """

    DEFAULT_TIMEOUT = 180.0  # 3 minutes

    def __init__(
        self,
        store: ArtifactStore,
        manim_cli: Optional[str] = None,
        scene_name: Optional[str] = None,
        quality: Optional[str] = None,
        timeout: Optional[float] = None,
        runner: Runner = run_process,
    ) -> None:
        """Initialize the executor.

        Args:
            store: Artifact store for working directories and published videos.
            manim_cli: Manim command line. Defaults to config.manim_cli.
            scene_name: Scene class to render. Defaults to config.scene_name.
            quality: Manim quality flag. Defaults to config.render_quality.
            timeout: Render timeout in seconds. Defaults to config.render_timeout.
            runner: Coroutine function used to run the command.
        """
        self._store = store
        self._manim = shlex.split(manim_cli or config.manim_cli)
        self._scene_name = scene_name or config.scene_name
        self._quality = quality or config.render_quality
        self._timeout = timeout or config.render_timeout or self.DEFAULT_TIMEOUT
        self._runner = runner

    @property
    def scene_name(self) -> str:
        return self._scene_name

    def build_command(self, script_path: Path, media_dir: Path, output_name: str) -> List[str]:
        """Build the manim render argument list."""
        return [
            *self._manim,
            "render",
            str(script_path),
            self._scene_name,
            f"--quality={self._quality}",
            "--disable_caching",
            "--media_dir",
            str(media_dir),
            "-o",
            output_name,
        ]

    async def execute(self, source: str, session_id: str, attempt: int = 1) -> RenderOutcome:
        """Render scene source and publish the resulting video.

        Args:
            source: Python source declaring the scene class.
            session_id: Owning session; names the directories and output.
            attempt: Attempt number, used to isolate the working directory.

        Returns:
            RenderOutcome; on success video_path is /videos/<session_id>.mp4.
        """
        try:
            work_dir = self._store.attempt_dir(session_id, attempt)
            script_path = work_dir / f"{session_id}.py"
            script_path.write_text(source, encoding="utf-8")
        except OSError as e:
            logger.error(f"Could not prepare render directory: {e}")
            return RenderOutcome.failed(f"Could not prepare render directory: {e}")
        media_dir = work_dir / "media"

        args = self.build_command(script_path, media_dir, f"{self._scene_name}_{session_id}")
        cmd = shlex.join(args)
        logger.info(f"Rendering session {session_id} attempt {attempt}")
        logger.debug(f"Render command: {cmd}")

        try:
            result = await self._runner(args, cwd=work_dir, timeout=self._timeout)
        except OSError as e:
            logger.error(f"Could not start renderer: {e}")
            return RenderOutcome.failed(str(e) or "Execution failed", cmd=cmd)

        if result.timed_out:
            error = RenderTimeoutError(
                f"Render timed out after {self._timeout:g}s", cmd=cmd
            )
            logger.warning(str(error))
            return RenderOutcome.failed(str(error), cmd=cmd)

        if not result.ok:
            logger.warning(f"Render failed with exit code {result.returncode}")
            return RenderOutcome.failed(
                result.diagnostic(), cmd=cmd, stdout=result.stdout, stderr=result.stderr
            )

        videos = find_rendered_videos(media_dir)
        if not videos:
            error = NoOutputProducedError("Render finished but no MP4 found", cmd=cmd)
            logger.warning(str(error))
            return RenderOutcome.failed(
                str(error), cmd=cmd, stdout=result.stdout, stderr=result.stderr
            )

        latest = videos[-1]
        name = self._store.video_name(session_id)
        try:
            published = self._store.publish(latest, name)
        except OSError as e:
            logger.error(f"Could not publish {latest}: {e}")
            return RenderOutcome.failed(str(e), cmd=cmd, stdout=result.stdout, stderr=result.stderr)

        logger.info(f"Render succeeded: {published}")
        return RenderOutcome(
            success=True,
            video_path=self._store.public_path(name),
            output_file=published,
            cmd=cmd,
            stdout=result.stdout,
            stderr=result.stderr,
        )
