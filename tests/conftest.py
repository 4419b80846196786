"""Shared test fixtures."""

import json
from unittest.mock import MagicMock

import pytest

from lecturelens.domain.models import DocumentInput, LectureRecord
from lecturelens.domain.services import DigitizationService
from lecturelens.ports.storage import StoragePort
from lecturelens.ports.transcriber import TranscriberPort

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00fake-jpeg-body"
PDF_BYTES = b"%PDF-1.4 test content"


@pytest.fixture
def sample_record() -> LectureRecord:
    """Sample lecture record for testing."""
    return LectureRecord(
        title="Lecture 1",
        date="2024-01-10",
        content="# Topic\n- point one",
    )


@pytest.fixture
def jpeg_document() -> DocumentInput:
    return DocumentInput(data=JPEG_BYTES, mime_type="image/jpeg", name="notes.jpg")


@pytest.fixture
def pdf_document() -> DocumentInput:
    return DocumentInput(data=PDF_BYTES, mime_type="application/pdf", name="notes.pdf")


@pytest.fixture
def model_payload() -> str:
    """What the model returns for the sample record."""
    return json.dumps({"title": "Lecture 1", "date": "2024-01-10", "content": "# Topic\n- point one"})


@pytest.fixture
def mock_transcriber(model_payload: str) -> MagicMock:
    """Mock transcriber port."""
    mock = MagicMock(spec=TranscriberPort)
    mock.transcribe.return_value = model_payload
    return mock


@pytest.fixture
def service(mock_transcriber: MagicMock) -> DigitizationService:
    return DigitizationService(transcriber=mock_transcriber, timeout=5.0)


@pytest.fixture
def mock_storage(tmp_path) -> MagicMock:
    """Mock storage port."""
    mock = MagicMock(spec=StoragePort)
    mock.export.return_value = tmp_path / "lecture_notes.json"
    return mock
