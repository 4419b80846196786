"""Interactive session: the terminal counterpart of the upload/digitize/view UI."""

import asyncio
import logging
from pathlib import Path

import click

from .adapters.platform import copy_to_clipboard
from .domain.errors import EmptyDocumentError, SessionBusyError, UnsupportedDocumentError
from .domain.session import DigitizationSession
from .ports.storage import StoragePort
from .presentation import ResultView, copy_text, render
from .source import DocumentSource

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 2.5  # seconds between progress messages

HELP_TEXT = """\
Commands:
  open PATH          select an image or PDF
  clear              drop the current selection
  summary on|off     include a summary in the next digitization
  digitize           digitize the selected document
  view reader|raw    switch the result view
  show               show the current result
  copy               copy the current view to the clipboard
  save               export the result as JSON
  status             show session status
  help               show this help
  quit               leave the session"""


async def digitize_with_progress(session: DigitizationSession, show_progress: bool = True) -> bool:
    """Run one digitization, echoing rotating progress messages meanwhile."""
    task = asyncio.create_task(session.start_digitization())
    tick = 0
    while True:
        try:
            done, _ = await asyncio.wait({task}, timeout=PROGRESS_INTERVAL)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if done:
            return task.result()
        if show_progress:
            click.echo(render(session.state, tick=tick), err=True)
        tick += 1


class ShellSession:
    """Line-oriented driver for a DigitizationSession."""

    def __init__(
        self,
        session: DigitizationSession,
        exporter: StoragePort,
        source: DocumentSource | None = None,
        show_progress: bool = True,
    ) -> None:
        self.session = session
        self.exporter = exporter
        self.source = source or DocumentSource()
        self.show_progress = show_progress
        self.view = ResultView.READER

    def handle(self, line: str) -> bool:
        """Run one command line. Returns False when the session should end."""
        command, _, arg = line.strip().partition(" ")
        command = command.lower()
        arg = arg.strip()

        if not command:
            return True
        if command in ("quit", "exit"):
            return False

        handler = getattr(self, f"do_{command}", None)
        if handler is None:
            click.echo(f"Unknown command: {command} (try 'help')")
            return True

        try:
            handler(arg)
        except SessionBusyError as e:
            click.echo(str(e))
        return True

    def close(self) -> None:
        self.source.clear()

    def do_help(self, arg: str) -> None:
        click.echo(HELP_TEXT)

    def do_open(self, arg: str) -> None:
        if not arg:
            click.echo("Usage: open PATH")
            return
        if self.session.state.is_processing:
            raise SessionBusyError("Cannot select a document while digitizing")

        path = Path(arg).expanduser()
        try:
            document = self.source.select(path)
        except (UnsupportedDocumentError, EmptyDocumentError) as e:
            click.echo(str(e))
            return
        except OSError as e:
            click.echo(f"Cannot read {path}: {e.strerror or e}")
            return

        self.session.select_document(document)
        click.echo(f"Selected {document.name} ({document.mime_type}, {document.size} bytes)")
        if self.source.preview_path is not None:
            click.echo(f"Preview: {self.source.preview_path}")
        else:
            click.echo("No preview available")

    def do_clear(self, arg: str) -> None:
        self.source.clear()
        self.session.clear_document()
        click.echo("Selection cleared")

    def do_summary(self, arg: str) -> None:
        if arg.lower() not in ("on", "off"):
            click.echo("Usage: summary on|off")
            return
        self.session.set_include_summary(arg.lower() == "on")
        click.echo(f"Summary: {arg.lower()}")

    def do_digitize(self, arg: str) -> None:
        if not self.session.state.can_digitize:
            click.echo("Select a document first (open PATH)")
            return
        click.echo("Digitizing notes...", err=True)
        try:
            asyncio.run(digitize_with_progress(self.session, self.show_progress))
        except KeyboardInterrupt:
            click.echo("Digitization cancelled")
            return
        click.echo(render(self.session.state, self.view))

    def do_view(self, arg: str) -> None:
        try:
            self.view = ResultView(arg.lower())
        except ValueError:
            click.echo("Usage: view reader|raw")
            return
        self.do_show(arg)

    def do_show(self, arg: str) -> None:
        click.echo(render(self.session.state, self.view))

    def do_copy(self, arg: str) -> None:
        record = self.session.state.current_result
        if record is None:
            click.echo("Nothing to copy")
            return
        if copy_to_clipboard(copy_text(record, self.view)):
            click.echo("Copied to clipboard")
        else:
            click.echo("Clipboard unavailable")

    def do_save(self, arg: str) -> None:
        record = self.session.state.current_result
        if record is None:
            click.echo("Nothing to save")
            return
        click.echo(f"Saved: {self.exporter.export(record)}")

    def do_status(self, arg: str) -> None:
        state = self.session.state
        document = state.current_document
        click.echo(f"status: {state.status.value}")
        click.echo(f"document: {document.name if document else '-'}")
        click.echo(f"summary: {'on' if state.include_summary else 'off'}")
        click.echo(f"view: {self.view.value}")
        if state.last_error:
            click.echo(f"error: {state.last_error}")
