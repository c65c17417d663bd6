import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import NoReturn, Optional

import typer
from dotenv import load_dotenv
from filelock import FileLock

from audible_vision import AudibleVisionNarrator
from audible_vision.errors import CollaboratorFailure
from audible_vision.speech.client import SpeechClient
from audible_vision.speech.config import SpeechConfig
from audible_vision.vision.client import VisionAnalysisClient

load_dotenv()

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="Narrate images with Azure Vision and Azure Speech.")

# Narration is written one fragment per speech call, so the file format must
# stay playable when fragments are appended back to back. RIFF/WAV does not.
STREAM_OUTPUT_FORMAT = "Audio16Khz32KBitRateMonoMp3"

_FORMAT_SUFFIXES = (("Mp3", ".mp3"), ("Ogg", ".ogg"), ("Raw", ".pcm"))


def _output_suffix(output_format: str) -> Optional[str]:
    for marker, suffix in _FORMAT_SUFFIXES:
        if marker in output_format:
            return suffix
    return None


def _stream_output_format(configured: Optional[str]) -> str:
    if configured and _output_suffix(configured):
        return configured
    return STREAM_OUTPUT_FORMAT


def _stream_speech_config() -> SpeechConfig:
    """Speech settings from the environment, with an output format that survives concatenation."""
    config = SpeechConfig.from_env()
    output_format = _stream_output_format(config.output_format)
    if config.output_format and output_format != config.output_format:
        logger.warning(
            f"Output format {config.output_format} cannot hold more than one fragment; "
            f"using {output_format}"
        )
    config.output_format = output_format
    return config


def _build_narrator() -> AudibleVisionNarrator:
    return AudibleVisionNarrator(VisionAnalysisClient.from_env(), SpeechClient(_stream_speech_config()))


_narrator_factory = _build_narrator


@app.callback()
def _configure(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def _default_output(image: Path) -> Path:
    output_format = _stream_output_format(os.environ.get("AZURE_SPEECH_OUTPUT_FORMAT"))
    return image.with_suffix(_output_suffix(output_format))


@contextmanager
def _file_access(path: Path):
    lock_path = Path(f"{path}.lock")
    try:
        with FileLock(str(lock_path)):
            yield
    finally:
        lock_path.unlink(missing_ok=True)


def _fail(e: Exception) -> NoReturn:
    typer.echo(f"Error: {e}", err=True)
    raise typer.Exit(code=1)


def _narrate_to_file(output: Path, narrate) -> None:
    with _file_access(output):
        with open(output, "wb") as output_file:
            narrate(output_file)


@app.command()
def read(
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image to read aloud"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Audio file to write (default: IMAGE.mp3)"),
) -> None:
    """Read the text found in an image aloud into an audio file."""
    try:
        narrator = _narrator_factory()
        output = output or _default_output(image)
        with open(image, "rb") as image_file:
            _narrate_to_file(output, lambda out: narrator.read_to_stream(image_file, out, image.name))
    except (CollaboratorFailure, ValueError) as e:
        _fail(e)
    typer.echo(f"Saved narration to {output}")


@app.command()
def describe(
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image to describe"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Audio file to write (default: IMAGE.mp3)"),
    speakers: bool = typer.Option(False, "--speakers", help="Play on the default speakers instead of writing a file"),
) -> None:
    """Describe an image and narrate the captions and tags."""
    if speakers and output:
        _fail(ValueError("--speakers and --output cannot be used together"))

    try:
        narrator = _narrator_factory()
        if speakers:
            with open(image, "rb") as image_file:
                narrator.describe_to_default_speakers(image_file, image.name)
            return

        output = output or _default_output(image)
        with open(image, "rb") as image_file:
            _narrate_to_file(output, lambda out: narrator.describe_to_stream(image_file, out, image.name))
    except (CollaboratorFailure, ValueError) as e:
        _fail(e)
    typer.echo(f"Saved narration to {output}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
