from __future__ import annotations

import asyncio

from avgen.config import Config
from avgen.models import GenerationResult
from avgen.service import GenerationService


class StubOrchestrator:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.prompts = []

    async def run(self, prompt, session=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.result.model_copy(update={"session_id": session.id})


def _service(store, orchestrator, api_key="sk-test"):
    settings = Config(anthropic_api_key=api_key)
    return GenerationService(settings, store=store, orchestrator_factory=lambda s: orchestrator)


def test_blank_prompt_rejected(store):
    orchestrator = StubOrchestrator()
    response = asyncio.run(_service(store, orchestrator).submit("   "))

    assert not response.success
    assert response.error == "Prompt required"
    assert response.error_type == "request_validation"
    assert response.iterations == []
    assert orchestrator.prompts == []


def test_missing_credentials_rejected(store):
    orchestrator = StubOrchestrator()
    response = asyncio.run(_service(store, orchestrator, api_key="").submit("a circle"))

    assert response.error_type == "request_validation"
    assert "ANTHROPIC_API_KEY" in response.error
    assert orchestrator.prompts == []


def test_success_passthrough(store):
    orchestrator = StubOrchestrator(GenerationResult(success=True, video_path="/videos/x.mp4"))
    response = asyncio.run(_service(store, orchestrator).submit("  a circle  "))

    assert response.success
    assert response.error_type is None
    assert response.video_path == "/videos/x.mp4"
    assert response.session_id
    assert orchestrator.prompts == ["a circle"]


def test_exhausted_attempts(store):
    orchestrator = StubOrchestrator(GenerationResult(success=False, error="boom"))
    response = asyncio.run(_service(store, orchestrator).submit("a circle"))

    assert not response.success
    assert response.error == "boom"
    assert response.error_type == "attempts_exhausted"


def test_unexpected_error_becomes_internal_response(store):
    orchestrator = StubOrchestrator(error=RuntimeError("API down"))
    response = asyncio.run(_service(store, orchestrator).submit("a circle"))

    assert not response.success
    assert response.error == "API down"
    assert response.error_type == "internal"


def test_health(store):
    report = _service(store, StubOrchestrator()).health()
    assert report["ok"] is True
    assert report["llm_configured"] is True
    assert report["scene_name"] == "GeneratedScene"
    assert report["videos_dir"] == str(store.videos_dir)


def test_default_orchestrator_narrates_with_service_settings(store):
    settings = Config(
        anthropic_api_key="sk-test",
        tts_language="de",
        ffprobe_bin="/opt/ffmpeg/bin/ffprobe",
        ffmpeg_timeout=42.0,
    )
    service = GenerationService(settings, store=store)

    orchestrator = service._default_orchestrator(store)

    assert orchestrator.narration.settings is settings
