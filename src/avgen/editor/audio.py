"""Narration audio synthesis."""

import logging
import re
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional

from ..errors import NarrationError
from ..services.process import ProcessError, ProcessResult, run_process
from .tts_worker import DURATION_MARKER

logger = logging.getLogger(__name__)

Runner = Callable[..., Awaitable[ProcessResult]]

_DURATION_RE = re.compile(rf"{DURATION_MARKER}:([\d.]+)")


def parse_tts_duration(output: str) -> Optional[float]:
    """Extract the duration marker from speech worker output.

    Args:
        output: Captured stdout of the worker.

    Returns:
        Duration in seconds, or None if no marker is present.
    """
    match = _DURATION_RE.search(output)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


async def synthesize_speech(
    text: str,
    output_path: Path,
    lang: str = "en",
    python_exe: Optional[str] = None,
    timeout: float = 30.0,
    runner: Runner = run_process,
) -> float:
    """Convert text to an MP3 file with gTTS and measure it.

    The synthesis runs in a separate interpreter so a hung network call can
    be killed by the timeout.

    Args:
        text: Narration text.
        output_path: MP3 file to write.
        lang: gTTS language code.
        python_exe: Interpreter for the worker. Defaults to the current one.
        timeout: Seconds before the worker is killed.
        runner: Coroutine function used to run the worker.

    Returns:
        Audio duration in seconds.

    Raises:
        NarrationError: If synthesis fails, times out, or reports no duration.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    text_file = output_path.with_suffix(".txt")
    text_file.write_text(text, encoding="utf-8")

    args = [
        python_exe or sys.executable,
        "-m", "avgen.editor.tts_worker",
        str(text_file),
        str(output_path),
        "--lang", lang,
    ]
    try:
        result = (await runner(args, cwd=output_path.parent, timeout=timeout)).check()
    except (OSError, ProcessError) as e:
        raise NarrationError(f"TTS failed: {e}") from e
    finally:
        text_file.unlink(missing_ok=True)

    duration = parse_tts_duration(result.stdout)
    if duration is None:
        raise NarrationError("TTS failed: no duration reported")

    logger.info(f"Audio duration: {duration:.2f}s")
    return duration
