"""Unit tests for result presentation."""

import json

import click

from lecturelens.domain.models import LectureRecord, SessionState, SessionStatus
from lecturelens.presentation import (
    LOADING_MESSAGES,
    PLACEHOLDER,
    ResultView,
    copy_text,
    format_reader_text,
    render,
    serialize_record,
)


class TestSerializeRecord:
    """Tests for serialize_record."""

    def test_exact_fields(self, sample_record: LectureRecord) -> None:
        assert json.loads(serialize_record(sample_record)) == {
            "title": "Lecture 1",
            "date": "2024-01-10",
            "content": "# Topic\n- point one",
        }

    def test_pretty_printed(self, sample_record: LectureRecord) -> None:
        assert serialize_record(sample_record).startswith('{\n  "title": "Lecture 1"')

    def test_keeps_unicode(self) -> None:
        record = LectureRecord(title="Vorlesung über Ökonomie", date="Undated", content="Ä")
        assert "über" in serialize_record(record)


class TestReaderText:
    """Tests for format_reader_text."""

    def test_without_summary(self, sample_record: LectureRecord) -> None:
        assert format_reader_text(sample_record) == "# Lecture 1\nDate: 2024-01-10\n\n# Topic\n- point one"

    def test_with_summary(self) -> None:
        record = LectureRecord(title="T", date="D", content="Body", summary="Short")
        assert format_reader_text(record) == "# T\nDate: D\n\n**Summary:** Short\n\n---\n\nBody"

    def test_sentinels(self) -> None:
        record = LectureRecord(title="", date="", content="Body")
        assert format_reader_text(record).startswith("# Untitled\nDate: Undated\n")


class TestCopyText:
    """Tests for copy_text."""

    def test_reader_view(self, sample_record: LectureRecord) -> None:
        assert copy_text(sample_record, ResultView.READER) == format_reader_text(sample_record)

    def test_raw_view(self, sample_record: LectureRecord) -> None:
        assert copy_text(sample_record, ResultView.RAW) == serialize_record(sample_record)


class TestRender:
    """Tests for render."""

    def test_processing_shows_progress(self) -> None:
        state = SessionState(status=SessionStatus.PROCESSING)
        assert render(state) == LOADING_MESSAGES[0]
        assert render(state, tick=2) == LOADING_MESSAGES[2]
        assert render(state, tick=len(LOADING_MESSAGES)) == LOADING_MESSAGES[0]

    def test_idle_placeholder(self) -> None:
        assert render(SessionState()) == PLACEHOLDER

    def test_error_message(self) -> None:
        state = SessionState(status=SessionStatus.ERROR, last_error="Model unavailable")
        assert click.unstyle(render(state)) == "Error: Model unavailable"

    def test_reader_view(self, sample_record: LectureRecord) -> None:
        state = SessionState(status=SessionStatus.SUCCESS, current_result=sample_record)
        output = click.unstyle(render(state, ResultView.READER))
        assert output.startswith("Lecture 1")
        assert "2024-01-10" in output
        assert output.endswith("# Topic\n- point one")
        assert "SUMMARY" not in output

    def test_reader_view_with_summary(self) -> None:
        record = LectureRecord(title="T", date="D", content="Body", summary="Short")
        state = SessionState(status=SessionStatus.SUCCESS, current_result=record)
        output = click.unstyle(render(state, ResultView.READER))
        assert "SUMMARY\nShort" in output

    def test_raw_view(self, sample_record: LectureRecord) -> None:
        state = SessionState(status=SessionStatus.SUCCESS, current_result=sample_record)
        assert render(state, ResultView.RAW) == serialize_record(sample_record)
