"""Speech synthesis worker, run as a subprocess.

Usage: python -m avgen.editor.tts_worker TEXT_FILE OUTPUT_MP3 [--lang en]

Writes the MP3 and prints ``TTS_DURATION:<seconds>`` on stdout.
"""

from pathlib import Path

import typer
from gtts import gTTS
from mutagen.mp3 import MP3

DURATION_MARKER = "TTS_DURATION"

app = typer.Typer(add_completion=False)


@app.command()
def main(
    text_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="UTF-8 narration text"),
    output: Path = typer.Argument(..., help="MP3 file to write"),
    lang: str = typer.Option("en", "--lang", help="gTTS language code"),
) -> None:
    """Synthesize narration text to MP3 and report its duration."""
    text = text_file.read_text(encoding="utf-8").strip()
    if not text:
        typer.echo("No text to synthesize", err=True)
        raise typer.Exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    gTTS(text=text, lang=lang, slow=False).save(str(output))

    duration = MP3(str(output)).info.length
    typer.echo(f"{DURATION_MARKER}:{duration}")


if __name__ == "__main__":
    app()
