from __future__ import annotations

import asyncio
import os

from avgen.services.manim import RenderExecutor, find_rendered_videos
from avgen.services.process import ProcessResult
from avgen.store import ArtifactStore

from conftest import VALID_CODE, FakeRenderRunner


def _touch(path, mtime):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x")
    os.utime(path, (mtime, mtime))
    return path


def test_find_rendered_videos_orders_by_mtime(tmp_path):
    media = tmp_path / "media"
    newest = _touch(media / "a" / "newest.mp4", 3000)
    oldest = _touch(media / "z" / "deep" / "oldest.mp4", 1000)
    middle = _touch(media / "m" / "middle.MP4", 2000)
    _touch(media / "a" / "poster.png", 4000)
    _touch(media / "videos" / "partial_movie_files" / "GeneratedScene" / "frag.mp4", 5000)

    assert find_rendered_videos(media) == [oldest, middle, newest]
    assert find_rendered_videos(tmp_path / "missing") == []


def test_execute_success_publishes_video(store):
    runner = FakeRenderRunner(["ok"])
    executor = RenderExecutor(store, manim_cli="python3 -m manim", runner=runner)

    outcome = asyncio.run(executor.execute(VALID_CODE, "s1"))

    assert outcome.success
    assert outcome.video_path == "/videos/s1.mp4"
    assert outcome.output_file == store.path_for("s1.mp4")
    assert outcome.output_file.read_bytes() == b"video"
    assert outcome.error is None

    call = runner.calls[0]
    args = call["args"]
    assert args[:4] == ["python3", "-m", "manim", "render"]
    assert args[5] == "GeneratedScene"
    assert "--disable_caching" in args
    assert "--quality=h" in args
    assert args[args.index("-o") + 1] == "GeneratedScene_s1"
    work_dir = store.attempt_dir("s1", 1)
    assert args[args.index("--media_dir") + 1] == str(work_dir / "media")
    assert call["cwd"] == work_dir
    assert call["timeout"] == 180
    assert (work_dir / "s1.py").read_text() == VALID_CODE
    assert outcome.cmd.startswith("python3 -m manim render")


def test_attempts_use_separate_directories(store):
    runner = FakeRenderRunner([("fail", "boom"), "ok"])
    executor = RenderExecutor(store, runner=runner)

    asyncio.run(executor.execute(VALID_CODE, "s1", attempt=1))
    asyncio.run(executor.execute(VALID_CODE, "s1", attempt=2))

    assert runner.calls[0]["cwd"] != runner.calls[1]["cwd"]


def test_execute_nonzero_exit_returns_stderr(store):
    runner = FakeRenderRunner([("fail", "Traceback...\nNameError: name 'Circel' is not defined\n")])
    outcome = asyncio.run(RenderExecutor(store, runner=runner).execute(VALID_CODE, "s2"))

    assert not outcome.success
    assert outcome.error == "Traceback...\nNameError: name 'Circel' is not defined"
    assert outcome.video_path is None
    assert "render" in outcome.cmd
    assert not store.path_for("s2.mp4").exists()


def test_execute_timeout_is_a_failure(store):
    runner = FakeRenderRunner(["timeout"])
    outcome = asyncio.run(RenderExecutor(store, timeout=180, runner=runner).execute(VALID_CODE, "s3"))

    assert not outcome.success
    assert outcome.error == "Render timed out after 180s"


def test_execute_clean_exit_without_output(store):
    runner = FakeRenderRunner(["ok-empty"])
    outcome = asyncio.run(RenderExecutor(store, runner=runner).execute(VALID_CODE, "s4"))

    assert not outcome.success
    assert outcome.error == "Render finished but no MP4 found"


def test_execute_spawn_failure(store):
    async def missing(args, cwd=None, timeout=None):
        raise FileNotFoundError(2, "No such file or directory", args[0])

    outcome = asyncio.run(RenderExecutor(store, manim_cli="nope", runner=missing).execute(VALID_CODE, "s5"))

    assert not outcome.success
    assert "No such file or directory" in outcome.error
    assert outcome.cmd.startswith("nope render")


def test_execute_nonzero_exit_without_output_text(store):
    async def silent(args, cwd=None, timeout=None):
        return ProcessResult(args=list(args), returncode=3)

    outcome = asyncio.run(RenderExecutor(store, runner=silent).execute(VALID_CODE, "s6"))
    assert outcome.error == "Process exited with code 3"


def test_execute_unwritable_workspace_is_a_failure(tmp_path):
    blocked = tmp_path / "temp"
    blocked.write_text("not a directory")
    store = ArtifactStore(videos_dir=tmp_path / "videos", temp_dir=blocked)
    runner = FakeRenderRunner(["ok"])

    outcome = asyncio.run(RenderExecutor(store, runner=runner).execute(VALID_CODE, "s7"))

    assert not outcome.success
    assert outcome.error.startswith("Could not prepare render directory")
    assert runner.calls == []
