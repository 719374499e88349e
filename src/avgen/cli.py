"""CLI entry point for the animated video generator."""

import asyncio
import logging
import typer
from pathlib import Path
from typing import Optional

from . import __version__
from .config import config
from .models import GenerationResponse, Session

app = typer.Typer(
    name="scene-maker",
    help="Turn a prompt into a narrated Manim animation",
    no_args_is_help=True
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"scene-maker version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """Scene Maker - generate, render and narrate Manim scenes with AI."""
    pass


def _print_iterations(response: GenerationResponse) -> None:
    for attempt in response.iterations:
        icon = "✅" if attempt.success else "❌"
        typer.echo(f"   {icon} Attempt {attempt.iteration} ({attempt.timestamp})")
        if attempt.error:
            lines = attempt.error.strip().splitlines()
            typer.echo(f"      → {lines[-1][:100] if lines else ''}")


@app.command()
def generate(
    prompt: str = typer.Argument(
        ...,
        help="Description of the animation"
    ),
    narration: bool = typer.Option(
        True,
        "--narration/--no-narration",
        help="Add a synthesized voice-over"
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full response as JSON"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Generate scene code, render it (repairing failures) and add narration."""
    from .service import GenerationService

    setup_logging(verbose)
    config.narration_enabled = narration

    if not as_json:
        typer.echo(f"🎬 Generating: {prompt}")
        typer.echo(f"   Model: {config.default_model}")
        typer.echo(f"   Attempts: up to {config.max_attempts}")

    service = GenerationService(config)
    response = asyncio.run(service.submit(prompt))

    if as_json:
        typer.echo(response.model_dump_json(indent=2))
    elif response.success:
        typer.echo(f"\n📋 Attempts ({len(response.iterations)}):")
        _print_iterations(response)
        typer.echo(f"\n✅ Video: {response.video_path}")
        if response.narration:
            typer.echo(f"   Narration: {response.narration}")
        typer.echo(f"   Session: {response.session_id}")
    else:
        if response.iterations:
            typer.echo(f"\n📋 Attempts ({len(response.iterations)}):")
            _print_iterations(response)
        typer.echo(f"\n❌ {response.error}")

    if not response.success:
        raise typer.Exit(2 if response.error_type == "request_validation" else 1)


@app.command()
def status(
    session_id: str = typer.Argument(
        ...,
        help="Session identifier printed by 'generate'"
    ),
    temp_dir: Optional[Path] = typer.Option(
        None,
        "--temp-dir",
        help="Root of session working directories"
    ),
) -> None:
    """Show the recorded attempts of a session."""
    record = (temp_dir or config.temp_dir) / session_id / "session.yaml"
    if not record.exists():
        typer.echo(f"❌ No session found at {record}")
        raise typer.Exit(1)

    try:
        session = Session.from_yaml(record)
    except Exception as e:
        typer.echo(f"❌ Error loading session: {e}")
        raise typer.Exit(1)

    typer.echo(f"📁 Session: {session.id}")
    typer.echo(f"   Prompt: {session.prompt}")
    typer.echo(f"   State: {session.state.value}")
    typer.echo(f"   Attempts: {len(session.iterations)}")
    if session.video_path:
        typer.echo(f"   Video: {session.video_path}")
    if session.error and session.error.strip():
        typer.echo(f"   Error: {session.error.strip().splitlines()[-1][:100]}")

    typer.echo("\n📽️  Attempts:")
    for attempt in session.iterations:
        icon = "✅" if attempt.success else "❌"
        typer.echo(f"   {icon} {attempt.iteration}: {len(attempt.code.splitlines())} lines of code")


@app.command()
def health() -> None:
    """Show configuration used for generation."""
    from .service import GenerationService

    report = GenerationService(config).health()
    for key, value in report.items():
        typer.echo(f"   {key}: {value}")
    if not report["llm_configured"]:
        typer.echo("⚠️  ANTHROPIC_API_KEY environment variable not set")


if __name__ == "__main__":
    app()
