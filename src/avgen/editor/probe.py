"""Media duration probing with ffprobe."""

import logging
from pathlib import Path
from typing import Awaitable, Callable

from ..errors import NarrationError
from ..services.process import ProcessError, ProcessResult, run_process

logger = logging.getLogger(__name__)

Runner = Callable[..., Awaitable[ProcessResult]]


async def probe_duration(
    media_path: Path,
    ffprobe_bin: str = "ffprobe",
    timeout: float = 30.0,
    runner: Runner = run_process,
) -> float:
    """Return the container duration of a media file in seconds.

    Raises:
        NarrationError: If ffprobe fails or prints no usable duration.
    """
    args = [
        ffprobe_bin,
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(media_path),
    ]
    try:
        result = (await runner(args, timeout=timeout)).check()
    except (OSError, ProcessError) as e:
        raise NarrationError(f"ffprobe failed: {e}") from e

    try:
        duration = float(result.stdout.strip())
    except ValueError:
        raise NarrationError(f"ffprobe returned no duration for {media_path}")

    logger.debug(f"{media_path.name}: {duration:.2f}s")
    return duration
