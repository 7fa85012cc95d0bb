import functools
import importlib.resources
import json
import logging
import sys
from enum import Enum
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.logging import RichHandler

from .mail import InMemoryMailHost, MailService
from .settings import get_log_level, load_processor_config
from .text_processor import TextProcessor

logger = logging.getLogger("revision_text")


class FormatChoice(str, Enum):
    html = "html"
    text = "text"


def setup_logging(verbose: bool = False):
    """Configure logging with RichHandler."""
    level = logging.DEBUG if verbose else get_log_level()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, markup=True)]
    )


# Load environment variables from .env file if present
load_dotenv()

app = typer.Typer(
    help="Normalize email bodies for translation and check AI output before insertion.",
    no_args_is_help=True,
    add_completion=False,
)


@functools.lru_cache(maxsize=1)
def load_manifest() -> dict:
    """
    Load the manifest from the package resources or local file system.
    """
    try:
        ref = importlib.resources.files("revision_text") / "manifest.json"
        with ref.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (FileNotFoundError, ModuleNotFoundError):
        pass

    # Running from a source checkout
    local_manifest = Path(__file__).parent / "manifest.json"
    if local_manifest.exists():
        with local_manifest.open("r", encoding="utf-8") as f:
            return json.load(f)

    raise FileNotFoundError("manifest.json not found in package or local directory.")


def _should_emit_manifest(argv: list[str]) -> bool:
    """Return True when CLI should output the manifest instead of help text."""

    return len(argv) == 2 and argv[1] in ("-h", "--help")


def _print_manifest() -> None:
    print(json.dumps(load_manifest(), indent=2))


@functools.lru_cache(maxsize=1)
def get_processor() -> TextProcessor:
    return TextProcessor(load_processor_config())


def _read_input(input_file: str) -> str:
    if input_file == "-":
        return sys.stdin.read()

    path = Path(input_file)
    if not path.exists():
        logger.error(f"Input file not found: {input_file}")
        raise typer.Exit(code=1)
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.error(f"Could not read {input_file}: {e}")
        raise typer.Exit(code=1)


@app.command()
def prepare(
    input_file: str = typer.Argument(..., help="Email body file, or - for stdin"),
    format: FormatChoice = typer.Option(FormatChoice.html, "--format", "-f", help="Body format: html or text"),
    human: bool = typer.Option(False, "--human", help="Human-readable output instead of JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Prepare an email body for translation."""
    setup_logging(verbose)

    raw = _read_input(input_file)
    service = MailService(InMemoryMailHost(body=raw), processor=get_processor())
    result = service.get_processed_text_for_translation(format.value)

    if not result.success:
        logger.error(result.error)
        raise typer.Exit(code=1)

    if human:
        typer.echo(result.data)
    else:
        typer.echo(json.dumps({
            "processed_text": result.data,
            "format": format.value,
            "original_length": len(raw),
            "processed_length": len(result.data or ""),
        }))


@app.command()
def markdown(
    input_file: str = typer.Argument(..., help="HTML file, or - for stdin"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Convert an HTML email body to markdown."""
    setup_logging(verbose)
    typer.echo(get_processor().convert_html_to_markdown(_read_input(input_file)))


@app.command()
def clean(
    input_file: str = typer.Argument(..., help="Text file, or - for stdin"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Normalize whitespace and line breaks in text."""
    setup_logging(verbose)
    typer.echo(get_processor().clean_text(_read_input(input_file)))


@app.command()
def check(
    input_file: str = typer.Argument(..., help="Text file, or - for stdin"),
    human: bool = typer.Option(False, "--human", help="Human-readable output instead of JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Check whether text is translatable and safe to insert into an email."""
    setup_logging(verbose)
    processor = get_processor()
    text = _read_input(input_file)

    report = {
        "translatable": processor.has_translatable_content(text),
        "safe_for_insertion": processor.is_safe_for_insertion(text),
    }
    if human:
        typer.echo(f"Translatable: {'yes' if report['translatable'] else 'no'}")
        typer.echo(f"Safe for insertion: {'yes' if report['safe_for_insertion'] else 'no'}")
    else:
        typer.echo(json.dumps(report))


@app.command(name="to-html")
def to_html(
    input_file: str = typer.Argument(..., help="Text file, or - for stdin"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Convert plain text to an HTML body fragment with <br> line breaks."""
    setup_logging(verbose)
    typer.echo(get_processor().convert_text_to_html(_read_input(input_file)))


def run() -> None:
    """CLI entry point that handles manifest-aware help output."""

    if _should_emit_manifest(sys.argv):
        _print_manifest()
        return

    app()


if __name__ == "__main__":
    run()
