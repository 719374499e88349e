"""Video duration reconciliation and audio muxing."""

import logging
from pathlib import Path
from typing import Awaitable, Callable

from moviepy import VideoFileClip
from moviepy.video.fx import Loop

from ..errors import NarrationError
from ..services.process import ProcessError, ProcessResult, run_process

logger = logging.getLogger(__name__)

Runner = Callable[..., Awaitable[ProcessResult]]


def needs_extension(audio_duration: float, video_duration: float, tolerance: float = 0.5) -> bool:
    """Whether narration outlasts the video by more than ``tolerance`` seconds.

    Shorter narration is left alone; the merge truncates to the shorter stream.
    """
    return audio_duration > video_duration + tolerance


def extend_video(
    video_path: Path,
    target_duration: float,
    output_path: Path,
    codec: str = "libx264",
    preset: str = "fast",
) -> Path:
    """Loop a video and cut it at ``target_duration``, re-encoding the frames.

    Args:
        video_path: Source video.
        target_duration: Length of the result in seconds.
        output_path: File to write.
        codec: Video codec.
        preset: Encoder preset.

    Returns:
        Path to the extended video.
    """
    if not video_path.exists():
        raise FileNotFoundError(f"Video not found: {video_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    clip = VideoFileClip(str(video_path))
    try:
        looped = clip.with_effects([Loop(duration=target_duration)])
        looped.write_videofile(
            str(output_path),
            fps=clip.fps,
            codec=codec,
            preset=preset,
            audio=False,
            logger=None,
        )
    finally:
        clip.close()

    logger.info(f"Video extended to {target_duration:.2f}s")
    return output_path


async def merge_audio(
    video_path: Path,
    audio_path: Path,
    output_path: Path,
    ffmpeg_bin: str = "ffmpeg",
    timeout: float = 300.0,
    runner: Runner = run_process,
) -> Path:
    """Mux narration into a video.

    The video stream is copied unchanged, audio is encoded to AAC and the
    output stops at the end of the shorter stream.

    Raises:
        NarrationError: If ffmpeg fails or times out.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    args = [
        ffmpeg_bin, "-y",
        "-hide_banner", "-loglevel", "error",
        "-i", str(video_path),
        "-i", str(audio_path),
        "-map", "0:v:0",
        "-map", "1:a:0",
        "-c:v", "copy",
        "-c:a", "aac",
        "-shortest",
        str(output_path),
    ]
    try:
        (await runner(args, timeout=timeout)).check()
    except (OSError, ProcessError) as e:
        raise NarrationError(f"ffmpeg failed: {e}") from e

    return output_path
