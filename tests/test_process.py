from __future__ import annotations

import asyncio
import os
import sys
import textwrap
import time

import pytest

from avgen.services.process import ProcessError, run_process


def test_run_process_captures_output(tmp_path):
    result = asyncio.run(run_process(
        [sys.executable, "-c", "import os, sys; print(os.getcwd()); print('warn', file=sys.stderr)"],
        cwd=tmp_path,
        timeout=30,
    ))
    assert result.ok
    assert result.stdout.strip() == str(tmp_path.resolve())
    assert result.stderr.strip() == "warn"
    assert result.check() is result


def test_run_process_nonzero_exit():
    result = asyncio.run(run_process(
        [sys.executable, "-c", "import sys; sys.exit('bad input')"],
        timeout=30,
    ))
    assert not result.ok
    assert result.returncode == 1
    assert result.diagnostic() == "bad input"
    with pytest.raises(ProcessError):
        result.check()


def test_run_process_timeout_kills():
    result = asyncio.run(run_process(
        [sys.executable, "-c", "import time; time.sleep(30)"],
        timeout=0.5,
    ))
    assert result.timed_out
    assert not result.ok
    assert result.diagnostic().startswith("Process timed out after 0.5s")


def test_run_process_missing_executable():
    with pytest.raises(OSError):
        asyncio.run(run_process(["definitely-not-a-real-binary-xyz"], timeout=5))


posix_only = pytest.mark.skipif(os.name != "posix", reason="process groups are POSIX-only")


@posix_only
def test_run_process_timeout_kills_descendants_holding_pipes():
    script = textwrap.dedent(f"""
        import subprocess, time
        subprocess.Popen([{sys.executable!r}, "-c", "import time; time.sleep(20)"])
        time.sleep(60)
    """)
    started = time.monotonic()
    result = asyncio.run(run_process([sys.executable, "-c", script], timeout=0.5))
    elapsed = time.monotonic() - started

    assert result.timed_out
    assert elapsed < 5


@posix_only
def test_run_process_cancellation_kills_child(tmp_path):
    pid_file = tmp_path / "child.pid"
    script = textwrap.dedent(f"""
        import os, time
        with open({str(pid_file)!r}, "w") as f:
            f.write(str(os.getpid()))
        time.sleep(30)
    """)

    async def cancel_while_running():
        task = asyncio.create_task(run_process([sys.executable, "-c", script], timeout=60))
        for _ in range(200):
            if pid_file.exists() and pid_file.read_text():
                break
            await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        return int(pid_file.read_text())

    pid = asyncio.run(cancel_while_running())

    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)
