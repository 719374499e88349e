from __future__ import annotations

from pathlib import Path

import pytest

from avgen.services.process import ProcessResult
from avgen.store import ArtifactStore

VALID_CODE = """from manim import *

class GeneratedScene(Scene):
    def construct(self):
        circle = Circle(color=BLUE)
        self.play(Create(circle))
        self.wait(2)"""


class FakeClient:
    """Stands in for AnthropicClient; replays canned replies and records prompts."""

    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.prompts: list[str] = []
        self.options: list[dict] = []
        self.model = "fake-model"

    def create_message(self, prompt, max_tokens=4096, system=None, temperature=0.7):
        self.prompts.append(prompt)
        self.options.append({"max_tokens": max_tokens, "system": system, "temperature": temperature})
        if self.error is not None:
            raise self.error
        if not self.replies:
            raise AssertionError("FakeClient ran out of replies")
        return self.replies.pop(0)


class FakeRenderRunner:
    """Simulates the manim CLI by writing MP4 files into --media_dir."""

    def __init__(self, results=None):
        # Each entry: "ok", "ok-empty", "timeout", or ("fail", stderr)
        self.results = list(results or ["ok"])
        self.calls: list[dict] = []

    async def __call__(self, args, cwd=None, timeout=None):
        self.calls.append({"args": list(args), "cwd": cwd, "timeout": timeout})
        kind = self.results.pop(0) if self.results else "ok"
        if kind == "timeout":
            return ProcessResult(args=list(args), returncode=-9, timed_out=True, timeout=timeout)
        if isinstance(kind, tuple):
            return ProcessResult(args=list(args), returncode=1, stderr=kind[1])
        if kind == "ok":
            media_dir = Path(args[args.index("--media_dir") + 1])
            name = args[args.index("-o") + 1]
            out = media_dir / "videos" / "scene" / "1080p60" / f"{name}.mp4"
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_bytes(b"video")
        return ProcessResult(args=list(args), returncode=0, stdout="File ready")


@pytest.fixture
def store(tmp_path):
    return ArtifactStore(videos_dir=tmp_path / "videos", temp_dir=tmp_path / "temp")
