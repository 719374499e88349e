"""Generate/render/repair loop."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from ..agents.coder import SceneCodeAgent
from ..config import config
from ..errors import GenerationError
from ..models import Attempt, GenerationResult, Session, SessionState
from ..services.manim import RenderExecutor
from ..store import ArtifactStore
from .narration import NarrationPipeline

logger = logging.getLogger(__name__)


class RetryOrchestrator:
    """Drives up to ``max_attempts`` generate-then-render cycles.

    Each failed attempt feeds its code and error into the next, corrective
    generation. The first successful render ends the loop and is handed to
    the narration pipeline, whose failure never affects the outcome.
    """

    MAX_ATTEMPTS = 5

    def __init__(
        self,
        store: ArtifactStore,
        generator: Optional[SceneCodeAgent] = None,
        executor: Optional[RenderExecutor] = None,
        narration: Optional[NarrationPipeline] = None,
        max_attempts: Optional[int] = None,
        narration_enabled: Optional[bool] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            store: Artifact store shared by the collaborators.
            generator: Scene code agent. Created if not provided.
            executor: Render executor. Created if not provided.
            narration: Narration pipeline. Created if not provided.
            max_attempts: Attempt budget. Defaults to config.max_attempts.
            narration_enabled: Run the narration pipeline after success.
                Defaults to config.narration_enabled.
        """
        self._store = store
        self._generator = generator or SceneCodeAgent()
        self._executor = executor or RenderExecutor(store)
        self._narration = narration or NarrationPipeline(store)
        self._max_attempts = max_attempts or config.max_attempts or self.MAX_ATTEMPTS
        self._narration_enabled = (
            config.narration_enabled if narration_enabled is None else narration_enabled
        )

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def narration(self) -> NarrationPipeline:
        return self._narration

    async def run(self, prompt: str, session: Optional[Session] = None) -> GenerationResult:
        """Run the loop for one prompt.

        Args:
            prompt: The user's request.
            session: Session to record into. A new one is created if omitted.

        Returns:
            GenerationResult with every attempt recorded.
        """
        session = session or Session(prompt=prompt)
        logger.info(f"Session {session.id}: {prompt!r}")

        code = ""
        error: Optional[str] = None

        for index in range(1, self._max_attempts + 1):
            session.state = SessionState.GENERATING
            try:
                code = await asyncio.to_thread(
                    self._generator.generate,
                    prompt,
                    code if index > 1 else None,
                    error if index > 1 else None,
                    index,
                )
            except GenerationError as e:
                code, error = e.code, str(e)
                logger.warning(f"Attempt {index}/{self._max_attempts} rejected: {error}")
                session.record(Attempt(iteration=index, code=code, success=False, error=error))
                continue

            session.state = SessionState.RENDERING
            outcome = await self._executor.execute(code, session.id, attempt=index)
            session.record(Attempt(
                iteration=index,
                code=code,
                success=outcome.success,
                error=None if outcome.success else outcome.error,
                cmd=outcome.cmd,
            ))

            if outcome.success:
                logger.info(f"Attempt {index}/{self._max_attempts} rendered {outcome.video_path}")
                return await self._finish(session, prompt, code, outcome.video_path, outcome.output_file)

            error = outcome.error or ""
            logger.warning(f"Attempt {index}/{self._max_attempts} failed: {error[:200]}")

        session.state = SessionState.FAILED
        session.error = session.last_error or "All attempts failed"
        self._save(session)
        return GenerationResult(
            success=False,
            session_id=session.id,
            iterations=list(session.iterations),
            error=session.error,
        )

    async def _finish(
        self,
        session: Session,
        prompt: str,
        code: str,
        video_path: str,
        video_file: Path,
    ) -> GenerationResult:
        narration = None
        final_path = video_path

        if self._narration_enabled:
            session.state = SessionState.NARRATING
            narration = await self._narration.narrate(prompt, code, video_file, session.id)
            if narration is not None:
                final_path = narration.final_video_path
        else:
            logger.info("Skipping voice-over (narration disabled)")

        session.state = SessionState.SUCCEEDED
        session.video_path = final_path
        session.narration = narration.text if narration else None
        self._save(session)

        return GenerationResult(
            success=True,
            session_id=session.id,
            video_path=final_path,
            narration=session.narration,
            iterations=list(session.iterations),
        )

    def _save(self, session: Session) -> None:
        path = self._store.session_record_path(session.id)
        try:
            session.to_yaml(path)
        except OSError as e:
            logger.warning(f"Could not write session record {path}: {e}")
