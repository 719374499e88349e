from __future__ import annotations

from typer.testing import CliRunner

from avgen import __version__
from avgen.cli import app
from avgen.models import Attempt, Session, SessionState

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_status_missing_session(tmp_path):
    result = runner.invoke(app, ["status", "nope", "--temp-dir", str(tmp_path)])
    assert result.exit_code == 1
    assert "No session found" in result.output


def test_status_shows_attempts(tmp_path):
    session = Session(id="123-abc", prompt="a circle", state=SessionState.FAILED, error="Render timed out after 180s")
    session.record(Attempt(iteration=1, code="x = 1", success=False, error="Render timed out after 180s"))
    session.to_yaml(tmp_path / "123-abc" / "session.yaml")

    result = runner.invoke(app, ["status", "123-abc", "--temp-dir", str(tmp_path)])

    assert result.exit_code == 0
    assert "Session: 123-abc" in result.output
    assert "State: failed" in result.output
    assert "Attempts: 1" in result.output
    assert "Render timed out after 180s" in result.output


def test_generate_without_credentials(monkeypatch, tmp_path):
    from avgen.config import config

    monkeypatch.setattr(config, "anthropic_api_key", "")
    monkeypatch.setattr(config, "videos_dir", tmp_path / "videos")
    monkeypatch.setattr(config, "temp_dir", tmp_path / "temp")

    result = runner.invoke(app, ["generate", "a circle", "--json"])

    assert result.exit_code == 2
    assert '"error_type": "request_validation"' in result.output
