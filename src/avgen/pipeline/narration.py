"""Voice-over pipeline: narration text, speech, reconciliation, merge."""

import asyncio
import logging
from functools import partial
from pathlib import Path
from typing import Awaitable, Callable, Optional

from ..agents.narrator import NarrationAgent, NarrationRequest
from ..config import Config, config
from ..editor import extend_video, merge_audio, needs_extension, probe_duration, synthesize_speech
from ..models import NarrationArtifact
from ..services.process import ProcessResult, run_process
from ..store import ArtifactStore

logger = logging.getLogger(__name__)

Synthesizer = Callable[[str, Path], Awaitable[float]]
Prober = Callable[[Path], Awaitable[float]]
Extender = Callable[[Path, float, Path], Awaitable[Path]]
Merger = Callable[[Path, Path, Path], Awaitable[Path]]
Runner = Callable[..., Awaitable[ProcessResult]]


class NarrationPipeline:
    """Adds a spoken narration track to a rendered video.

    Every step is best-effort: the first failure is logged and `narrate`
    returns None, leaving the rendered video as the final result.

    The media steps are injectable so the pipeline can run without
    ffmpeg, gTTS or network access.
    """

    def __init__(
        self,
        store: ArtifactStore,
        narrator: Optional[NarrationAgent] = None,
        synthesize: Optional[Synthesizer] = None,
        probe: Optional[Prober] = None,
        extend: Optional[Extender] = None,
        merge: Optional[Merger] = None,
        tolerance: Optional[float] = None,
        settings: Optional[Config] = None,
        runner: Runner = run_process,
    ) -> None:
        """Initialize the pipeline.

        Args:
            store: Artifact store that names and holds the outputs.
            narrator: Narration text agent. Created on first use if omitted.
            synthesize: Speech step. Defaults to the gTTS worker.
            probe: Duration step. Defaults to ffprobe.
            extend: Loop-and-cut step. Defaults to moviepy in a thread.
            merge: Mux step. Defaults to ffmpeg.
            tolerance: Seconds audio may exceed video before extending.
            settings: Source of binaries, language and timeouts for the
                default steps. Defaults to the global config.
            runner: Subprocess runner for the default steps.
        """
        cfg = settings or config
        self._settings = cfg
        self._store = store
        self._narrator = narrator
        self._synthesize = synthesize or partial(
            synthesize_speech,
            lang=cfg.tts_language,
            python_exe=cfg.python_exe,
            timeout=cfg.tts_timeout,
            runner=runner,
        )
        self._probe = probe or partial(
            probe_duration, ffprobe_bin=cfg.ffprobe_bin, timeout=cfg.probe_timeout, runner=runner
        )
        self._extend = extend or self._extend_in_thread
        self._merge = merge or partial(
            merge_audio, ffmpeg_bin=cfg.ffmpeg_bin, timeout=cfg.ffmpeg_timeout, runner=runner
        )
        self._tolerance = cfg.extension_tolerance if tolerance is None else tolerance

    @property
    def settings(self) -> Config:
        return self._settings

    @staticmethod
    async def _extend_in_thread(video: Path, duration: float, output: Path) -> Path:
        return await asyncio.to_thread(extend_video, video, duration, output)

    def _narration_agent(self) -> NarrationAgent:
        if self._narrator is None:
            self._narrator = NarrationAgent()
        return self._narrator

    async def narrate(
        self,
        prompt: str,
        code: str,
        video_file: Path,
        session_id: str,
    ) -> Optional[NarrationArtifact]:
        """Produce a narrated copy of a rendered video.

        Args:
            prompt: The user's original request.
            code: Scene source that produced the video.
            video_file: Rendered (published) video.
            session_id: Owning session; names the output files.

        Returns:
            NarrationArtifact, or None if any step failed.
        """
        try:
            return await self._run(prompt, code, video_file, session_id)
        except Exception as e:
            logger.warning(f"Voice-over generation failed: {e}")
            return None

    async def _run(
        self,
        prompt: str,
        code: str,
        video_file: Path,
        session_id: str,
    ) -> NarrationArtifact:
        agent = self._narration_agent()
        text = await asyncio.to_thread(agent.run, NarrationRequest(prompt=prompt, code=code))

        audio_path = self._store.path_for(self._store.audio_name(session_id))
        audio_duration = await self._synthesize(text, audio_path)

        video_duration = await self._probe(video_file)
        logger.info(f"Audio {audio_duration:.2f}s, video {video_duration:.2f}s")

        extended_path: Optional[Path] = None
        video_to_merge = video_file
        if needs_extension(audio_duration, video_duration, self._tolerance):
            logger.info("Extending video to match audio duration...")
            extended_path = await self._extend(
                video_file,
                audio_duration,
                self._store.path_for(self._store.extended_name(session_id)),
            )
            video_to_merge = extended_path

        merged_name = self._store.narrated_name(session_id)
        await self._merge(video_to_merge, audio_path, self._store.path_for(merged_name))
        logger.info("Voice-over added successfully")

        return NarrationArtifact(
            text=text,
            audio_path=audio_path,
            audio_duration=audio_duration,
            video_duration=video_duration,
            extended_video_path=extended_path,
            final_video_path=self._store.public_path(merged_name),
        )
