"""Response contract: schema, sanitization and parsing of model output."""

import json
import logging
import re
from typing import Any

from .errors import (
    MALFORMED_MESSAGE,
    EmptyResponseError,
    MalformedResponseError,
    SchemaViolationError,
)
from .models import LectureRecord

logger = logging.getLogger(__name__)

BASE_FIELDS = ("title", "date", "content")
SUMMARY_FIELD = "summary"
UNESCAPED_FIELDS = ("content", "summary")
EMPTY_MESSAGE = "No text returned from the model."

FIELD_DESCRIPTIONS = {
    "title": "A short descriptive title from the document",
    "date": "Date of the lecture or 'Undated'",
    "content": (
        "The COMPLETE text content of the document in Markdown format. "
        "Do not summarize or truncate. Preserve all headers, bullet points, "
        "and original structure."
    ),
    "summary": "A concise summary of the content",
}

# Whole payload wrapped in a fence, optionally tagged (```json ... ```)
_FENCED = re.compile(r"\A```[\w-]*[ \t]*\r?\n?(.*?)\s*```\Z", re.DOTALL)
# Opening fence with no closing one (cut-off output)
_OPENING_FENCE = re.compile(r"\A```[\w-]*\s*")


def required_fields(want_summary: bool) -> list[str]:
    fields = list(BASE_FIELDS)
    if want_summary:
        fields.append(SUMMARY_FIELD)
    return fields


def build_response_schema(want_summary: bool) -> dict[str, Any]:
    """JSON schema the model output must conform to."""
    fields = required_fields(want_summary)
    return {
        "type": "object",
        "properties": {
            name: {"type": "string", "description": FIELD_DESCRIPTIONS[name]}
            for name in fields
        },
        "required": fields,
    }


def strip_code_fences(text: str) -> str:
    """Remove a code fence surrounding the payload, if any."""
    stripped = text.strip()
    match = _FENCED.match(stripped)
    if match:
        return match.group(1).strip()
    return _OPENING_FENCE.sub("", stripped, count=1).strip()


def unescape_newlines(text: str) -> str:
    """Turn literal backslash-n sequences into real newlines."""
    return text.replace("\\n", "\n")


def parse_record(text: str | None, want_summary: bool) -> LectureRecord:
    """Parse raw model output into a LectureRecord.

    Raises EmptyResponseError, MalformedResponseError or
    SchemaViolationError.
    """
    if text is None or not text.strip():
        raise EmptyResponseError(EMPTY_MESSAGE)

    payload = strip_code_fences(text)
    if not payload:
        raise EmptyResponseError(EMPTY_MESSAGE)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.warning(f"Invalid JSON response: {payload[:200]}")
        raise MalformedResponseError(MALFORMED_MESSAGE, cause=e) from e

    if not isinstance(data, dict):
        raise SchemaViolationError(
            f"Expected a JSON object from the model, got {type(data).__name__}"
        )

    for key in UNESCAPED_FIELDS:
        if isinstance(data.get(key), str):
            data[key] = unescape_newlines(data[key])

    missing = [name for name in required_fields(want_summary) if not isinstance(data.get(name), str)]
    if missing:
        raise SchemaViolationError(
            f"The model response is missing required fields: {', '.join(missing)}"
        )

    if not want_summary and SUMMARY_FIELD in data:
        logger.debug("Dropping summary that was not requested")

    return LectureRecord(
        title=data["title"],
        date=data["date"],
        content=data["content"],
        summary=data[SUMMARY_FIELD] if want_summary else None,
    )
