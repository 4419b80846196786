"""Result presentation: reader and raw views, copy text."""

import json
from enum import Enum

import click

from .domain.models import LectureRecord, SessionState, SessionStatus

PLACEHOLDER = "Your organized notes will appear here"
LOADING_MESSAGES = (
    "Analyzing document structure...",
    "Identifying headers and sections...",
    "Transcribing handwriting...",
    "Formatting markdown...",
    "Finalizing notes...",
)


class ResultView(str, Enum):
    READER = "reader"
    RAW = "raw"


def serialize_record(record: LectureRecord) -> str:
    """Pretty-printed JSON of exactly the record fields."""
    return json.dumps(record.to_dict(), indent=2, ensure_ascii=False)


def format_reader_text(record: LectureRecord) -> str:
    """Plain-text reader view; also what gets copied from it."""
    text = f"# {record.display_title}\nDate: {record.display_date}\n\n"
    if record.summary:
        text += f"**Summary:** {record.summary}\n\n---\n\n"
    return text + record.content


def copy_text(record: LectureRecord, view: ResultView) -> str:
    if view is ResultView.RAW:
        return serialize_record(record)
    return format_reader_text(record)


def render_reader(record: LectureRecord) -> str:
    """Reader view styled for the terminal."""
    header = click.style(record.display_title, bold=True)
    badge = click.style(f" {record.display_date.upper()} ", fg="blue", reverse=True)
    lines = [f"{header}  {badge}", ""]
    if record.summary:
        lines += [click.style("SUMMARY", fg="bright_black", bold=True), click.style(record.summary, italic=True), ""]
    lines.append(click.style("-" * 60, fg="bright_black"))
    lines.append(record.content)
    return "\n".join(lines)


def render(state: SessionState, view: ResultView = ResultView.READER, tick: int = 0) -> str:
    """Render whatever the session currently has to show."""
    if state.status is SessionStatus.PROCESSING:
        return LOADING_MESSAGES[tick % len(LOADING_MESSAGES)]
    if state.status is SessionStatus.ERROR and state.last_error:
        return click.style(f"Error: {state.last_error}", fg="red")
    if state.current_result is None:
        return PLACEHOLDER
    if view is ResultView.RAW:
        return serialize_record(state.current_result)
    return render_reader(state.current_result)
