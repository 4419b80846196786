"""CLI entry point for lecturelens."""

import asyncio
import logging
import shutil
import sys
from pathlib import Path

import click

from .adapters.platform import copy_to_clipboard
from .adapters.storage import FilesystemExporter
from .adapters.transcriber import create_transcriber
from .config import Settings, load_settings
from .domain.errors import EmptyDocumentError, UnsupportedDocumentError
from .domain.models import SessionStatus
from .domain.services import DigitizationService
from .domain.session import DigitizationSession
from .presentation import ResultView, copy_text, render
from .shell import ShellSession, digitize_with_progress
from .source import DocumentSource, load_document


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_session(settings: Settings) -> DigitizationSession:
    """Wire the configured transcriber into a fresh session."""
    service = DigitizationService(
        transcriber=create_transcriber(settings.transcriber),
        timeout=settings.transcriber.timeout,
    )
    return DigitizationSession(service, include_summary=settings.session.include_summary)


def build_exporter(settings: Settings, directory: Path | None = None) -> FilesystemExporter:
    return FilesystemExporter(
        directory=directory or settings.export.directory,
        filename=settings.export.filename,
        name_from_title=settings.export.name_from_title,
    )


def _session_or_exit(settings: Settings) -> DigitizationSession:
    try:
        return build_session(settings)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("-c", "--config", type=click.Path(exists=True), help="Config file path")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None) -> None:
    """LectureLens - digitize photographed lecture notes."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else None


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--summary/--no-summary", default=None, help="Generate a summary (default from config)")
@click.option(
    "--view",
    type=click.Choice([v.value for v in ResultView]),
    default=ResultView.READER.value,
    help="Result view to print",
)
@click.option("--copy", is_flag=True, help="Copy the printed view to the clipboard")
@click.option("--save", is_flag=True, help="Export the record as JSON")
@click.option(
    "-o", "--output", type=click.Path(file_okay=False, path_type=Path), help="Export directory"
)
@click.pass_context
def digitize(
    ctx: click.Context,
    file: Path,
    summary: bool | None,
    view: str,
    copy: bool,
    save: bool,
    output: Path | None,
) -> None:
    """Digitize a single image or PDF of notes."""
    settings = load_settings(ctx.obj["config_path"])

    try:
        document = load_document(file)
    except (UnsupportedDocumentError, EmptyDocumentError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    session = _session_or_exit(settings)
    if summary is not None:
        session.set_include_summary(summary)
    session.select_document(document)

    click.echo("Digitizing notes...", err=True)
    asyncio.run(digitize_with_progress(session))

    state = session.state
    if state.status is not SessionStatus.SUCCESS or state.current_result is None:
        click.echo(f"Error: {state.last_error}", err=True)
        sys.exit(1)

    result_view = ResultView(view)
    click.echo(render(state, result_view))

    if copy:
        if copy_to_clipboard(copy_text(state.current_result, result_view)):
            click.echo("Copied to clipboard", err=True)
        else:
            click.echo("Clipboard unavailable", err=True)

    if save or output:
        path = build_exporter(settings, output).export(state.current_result)
        click.echo(f"Saved: {path}", err=True)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o", "--output", required=True, type=click.Path(dir_okay=False, path_type=Path), help="PNG file to write"
)
def preview(file: Path, output: Path) -> None:
    """Render a PNG preview of an image or the first page of a PDF."""
    source = DocumentSource()
    try:
        source.select(file)
    except (UnsupportedDocumentError, EmptyDocumentError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    try:
        if source.preview_path is None:
            click.echo(f"Error: could not render a preview of {file.name}", err=True)
            sys.exit(1)
        shutil.copyfile(source.preview_path, output)
        click.echo(f"Preview: {output}")
    finally:
        source.clear()


@cli.command()
@click.pass_context
def shell(ctx: click.Context) -> None:
    """Interactive digitization session."""
    settings = load_settings(ctx.obj["config_path"])
    shell_session = ShellSession(_session_or_exit(settings), build_exporter(settings))

    click.echo("LectureLens - type 'help' for commands")
    try:
        while True:
            try:
                line = click.prompt("lecturelens", prompt_suffix="> ", default="", show_default=False)
            except (EOFError, click.Abort):
                break
            if not shell_session.handle(line):
                break
    finally:
        shell_session.close()


if __name__ == "__main__":
    cli()
