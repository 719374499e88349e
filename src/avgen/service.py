"""Inbound API: validate a request, run one session, shape the response."""

import logging
from typing import Callable, Optional

from .config import Config, config as default_config
from .errors import RequestValidationError
from .models import GenerationResponse, Session
from .agents import NarrationAgent, SceneCodeAgent
from .pipeline import NarrationPipeline, RetryOrchestrator
from .services import AnthropicClient, RenderExecutor
from .store import ArtifactStore

logger = logging.getLogger(__name__)


class GenerationService:
    """Entry point for prompt-to-video requests.

    Only request-validation and unexpected errors surface as error
    responses; attempt failures are reported through the iteration history.
    """

    def __init__(
        self,
        settings: Optional[Config] = None,
        store: Optional[ArtifactStore] = None,
        orchestrator_factory: Optional[Callable[[ArtifactStore], RetryOrchestrator]] = None,
    ) -> None:
        self._config = settings or default_config
        self._store = store or ArtifactStore(self._config.videos_dir, self._config.temp_dir)
        self._orchestrator_factory = orchestrator_factory or self._default_orchestrator

    def _default_orchestrator(self, store: ArtifactStore) -> RetryOrchestrator:
        cfg = self._config
        client = AnthropicClient(api_key=cfg.anthropic_api_key, model=cfg.default_model)
        return RetryOrchestrator(
            store,
            generator=SceneCodeAgent(client=client, model=cfg.default_model, scene_name=cfg.scene_name),
            executor=RenderExecutor(
                store,
                manim_cli=cfg.manim_cli,
                scene_name=cfg.scene_name,
                quality=cfg.render_quality,
                timeout=cfg.render_timeout,
            ),
            narration=NarrationPipeline(
                store,
                narrator=NarrationAgent(client=client, model=cfg.default_model),
                tolerance=cfg.extension_tolerance,
                settings=cfg,
            ),
            max_attempts=cfg.max_attempts,
            narration_enabled=cfg.narration_enabled,
        )

    @property
    def store(self) -> ArtifactStore:
        return self._store

    def validate(self, prompt: Optional[str]) -> str:
        """Return the stripped prompt or raise RequestValidationError."""
        if not prompt or not prompt.strip():
            raise RequestValidationError("Prompt required")
        try:
            self._config.validate_required()
        except ValueError as e:
            raise RequestValidationError(str(e)) from e
        return prompt.strip()

    async def submit(self, prompt: Optional[str]) -> GenerationResponse:
        """Run one prompt-to-video session.

        Args:
            prompt: Natural-language description of the animation.

        Returns:
            GenerationResponse; never raises.
        """
        try:
            prompt = self.validate(prompt)
        except RequestValidationError as e:
            logger.warning(f"Rejected request: {e}")
            return GenerationResponse.rejected(str(e))

        session = Session(prompt=prompt)
        try:
            orchestrator = self._orchestrator_factory(self._store)
            result = await orchestrator.run(prompt, session=session)
        except Exception as e:
            logger.exception(f"Session {session.id} crashed")
            response = GenerationResponse.internal(str(e) or "Internal error")
            response.session_id = session.id
            response.iterations = list(session.iterations)
            return response

        return GenerationResponse.from_result(result)

    def health(self) -> dict:
        """Report configuration relevant to serving requests."""
        return {
            "ok": True,
            "model": self._config.default_model,
            "llm_configured": bool(self._config.anthropic_api_key),
            "manim_cli": self._config.manim_cli,
            "scene_name": self._config.scene_name,
            "videos_dir": str(self._store.videos_dir),
            "narration_enabled": self._config.narration_enabled,
        }
