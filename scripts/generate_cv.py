#!/usr/bin/env python3
"""
Resume Generation CLI

Generates resume PDFs from form-style fields or a free-text prompt, and lists or
fetches previously generated artifacts for a caller.

Commands:
    generate - Normalize, (optionally) expand, render and store a resume
    preview  - Write the HTML document without printing or storing it
    list     - List a caller's stored artifacts, newest first
    fetch    - Copy a stored artifact to a local file
    events   - Show recent pipeline events

Examples:\n

    generate_cv.py generate --caller jane --name "Jane Doe" --skills "Go, Rust"

    generate_cv.py generate --caller jane --name "Jane Doe" --prompt "10y backend, Go"

    generate_cv.py list --caller jane

    generate_cv.py fetch 1731590000000000000_Jane_Doe.pdf --caller jane -o jane.pdf
"""

import mimetypes
import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from cvforge.contexts.intake import Photo
from cvforge.exceptions import PipelineError
from cvforge.pipeline import ResumePipeline
from cvforge.utils.event_logging import get_recent_events
from cvforge.utils.logger import new_session_dir, setup_logger
from cvforge.utils.settings import load_settings
from cvforge.utils.timestamp import format_timestamp

load_dotenv()
DEFAULT_CALLER = os.getenv("CVFORGE_CALLER")

CallerOption = Annotated[
    Optional[str],
    typer.Option(
        "--caller",
        "-c",
        help="Caller identity (default: CVFORGE_CALLER env var)",
    ),
]

app = typer.Typer(
    help="Generate resume PDFs and manage stored artifacts",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def read_text_argument(value: Optional[str]) -> Optional[str]:
    """Allow '@path/to/file' for any text field."""
    if value is not None and value.startswith("@"):
        return Path(value[1:]).read_text(encoding="utf-8")
    return value


def load_photo(path: Optional[Path]) -> Optional[Photo]:
    """Read a photo file, guessing its media type from the extension."""
    if path is None:
        return None
    media_type, _ = mimetypes.guess_type(path.name)
    return Photo(data=path.read_bytes(), media_type=media_type or "image/jpeg")


def fail(error: PipelineError) -> None:
    """Report a pipeline error with its stage and exit non-zero."""
    typer.secho(f"✗ {error.stage} failed: {error.message}\n", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command("generate")
def generate_command(
    caller: CallerOption = DEFAULT_CALLER,
    name: Annotated[str, typer.Option(help="Full name")] = "",
    email: Annotated[str, typer.Option(help="Email address")] = "",
    phone: Annotated[str, typer.Option(help="Phone number")] = "",
    location: Annotated[str, typer.Option(help="City, country")] = "",
    prompt: Annotated[
        Optional[str],
        typer.Option(help="Free-text notes to expand with the LLM (@file to read from file)"),
    ] = None,
    summary: Annotated[Optional[str], typer.Option(help="Summary text (@file allowed)")] = None,
    experience: Annotated[
        Optional[str], typer.Option(help="Experience as JSON (@file allowed)")
    ] = None,
    education: Annotated[
        Optional[str], typer.Option(help="Education as JSON (@file allowed)")
    ] = None,
    skills: Annotated[
        Optional[str], typer.Option(help="Skills as JSON list or comma-separated text")
    ] = None,
    photo: Annotated[
        Optional[Path],
        typer.Option(help="Portrait image file", exists=True, dir_okay=False),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Also write the PDF to this path"),
    ] = None,
):
    """
    Generate a resume PDF and store it for the caller.

    With --prompt, structured fields are ignored and the notes are expanded by
    the configured LLM (falling back to the notes as summary if that fails).

    Examples:\n

        $ generate_cv.py generate -c jane --name "Jane Doe" --experience @exp.json

        $ generate_cv.py generate -c jane --name "Jane Doe" --prompt @notes.txt -o jane.pdf
    """
    log_dir = new_session_dir("generate")
    settings = load_settings()
    setup_logger(
        context_name="generate",
        log_dir=log_dir,
        extra_provenance={"LLM": f"{settings.llm.provider}/{settings.llm.model}"},
    )

    raw_fields = {
        "name": name,
        "email": email,
        "phone": phone,
        "location": location,
        "prompt": read_text_argument(prompt),
        "summary": read_text_argument(summary),
        "experience": read_text_argument(experience),
        "education": read_text_argument(education),
        "skills": read_text_argument(skills),
    }

    typer.secho(f"\nGenerating: {name or 'cv'}", fg=typer.colors.BLUE, bold=True)

    pipeline = ResumePipeline(settings=settings)
    try:
        result = pipeline.run(caller, raw_fields, photo=load_photo(photo))
    except PipelineError as e:
        fail(e)

    typer.echo("")
    typer.secho("✓ Generation succeeded", fg=typer.colors.GREEN, bold=True)
    if result.expansion_degraded:
        typer.secho("  Expansion unavailable: prompt used as summary", fg=typer.colors.YELLOW)
    typer.echo(f"  Stored as: {result.stored_name}")
    typer.echo(f"  Size: {len(result.pdf)} bytes")

    if output is not None:
        output.write_bytes(result.pdf)
        typer.echo(f"  PDF: {output}")
    typer.echo(f"  Log: {log_dir / 'generate.log'}")
    typer.echo("")


@app.command("preview")
def preview_command(
    output: Annotated[Path, typer.Argument(help="HTML file to write")],
    name: Annotated[str, typer.Option(help="Full name")] = "",
    email: Annotated[str, typer.Option(help="Email address")] = "",
    phone: Annotated[str, typer.Option(help="Phone number")] = "",
    location: Annotated[str, typer.Option(help="City, country")] = "",
    summary: Annotated[Optional[str], typer.Option(help="Summary text (@file allowed)")] = None,
    experience: Annotated[
        Optional[str], typer.Option(help="Experience as JSON (@file allowed)")
    ] = None,
    education: Annotated[
        Optional[str], typer.Option(help="Education as JSON (@file allowed)")
    ] = None,
    skills: Annotated[
        Optional[str], typer.Option(help="Skills as JSON list or comma-separated text")
    ] = None,
):
    """
    Write the HTML document for structured fields without printing a PDF.

    Examples:\n

        $ generate_cv.py preview out.html --name "Jane Doe" --skills "Go, Rust"
    """
    raw_fields = {
        "name": name,
        "email": email,
        "phone": phone,
        "location": location,
        "summary": read_text_argument(summary),
        "experience": read_text_argument(experience),
        "education": read_text_argument(education),
        "skills": read_text_argument(skills),
    }

    try:
        html = ResumePipeline().preview(raw_fields)
    except PipelineError as e:
        fail(e)

    output.write_text(html, encoding="utf-8")
    typer.secho(f"✓ Preview written to {output}", fg=typer.colors.GREEN)


@app.command("list")
def list_command(caller: CallerOption = DEFAULT_CALLER):
    """
    List the caller's stored artifacts, newest first.

    Examples:\n

        $ generate_cv.py list -c jane
    """
    try:
        entries = ResumePipeline().list_artifacts(caller)
    except PipelineError as e:
        fail(e)

    if not entries:
        typer.echo("No artifacts stored.")
        return

    typer.secho(f"\n{len(entries)} artifacts\n", bold=True)
    for entry in entries:
        created = format_timestamp(entry.created_at.isoformat(), relative=True)
        typer.echo(f"  {entry.retrieval_key:<48} {entry.name:<30} {created}")
    typer.echo("")


@app.command("fetch")
def fetch_command(
    retrieval_key: Annotated[str, typer.Argument(help="Stored name from 'list'")],
    output: Annotated[Path, typer.Option("--output", "-o", help="Destination file")],
    caller: CallerOption = DEFAULT_CALLER,
):
    """
    Copy a stored artifact to a local file.

    Examples:\n

        $ generate_cv.py fetch 1731590000000000000_Jane_Doe.pdf -c jane -o jane.pdf
    """
    try:
        data = ResumePipeline().fetch_artifact(caller, retrieval_key)
    except PipelineError as e:
        fail(e)

    output.write_bytes(data)
    typer.secho(f"✓ Wrote {len(data)} bytes to {output}", fg=typer.colors.GREEN)


@app.command("events")
def events_command(
    n: Annotated[int, typer.Option("-n", help="Number of events", min=1)] = 10,
    event_type: Annotated[
        Optional[str], typer.Option("--type", "-t", help="Filter by event type")
    ] = None,
):
    """
    Show recent pipeline events (requires PIPELINE_EVENTS_FILE).

    Examples:\n

        $ generate_cv.py events -n 20 --type expansion_degraded
    """
    events = get_recent_events(n=n, event_type=event_type)
    if not events:
        typer.echo("No events recorded.")
        return

    for event in events:
        when = format_timestamp(event.get("timestamp", ""))
        details = {
            k: v
            for k, v in event.items()
            if k not in ("timestamp", "event_type", "namespace", "source")
        }
        typer.echo(f"{when}  {event.get('event_type', '?'):<22} {event.get('namespace', '')}  {details}")


if __name__ == "__main__":
    app()
