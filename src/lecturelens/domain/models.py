"""Domain models."""

import base64
from dataclasses import dataclass, field
from enum import Enum

from .errors import DigitizationError, EmptyDocumentError, UnsupportedDocumentError

PDF_MIME_TYPE = "application/pdf"
UNTITLED = "Untitled"
UNDATED = "Undated"


def is_accepted_mime_type(mime_type: str | None) -> bool:
    """Images of any kind and PDFs are accepted."""
    if not mime_type:
        return False
    return mime_type.startswith("image/") or mime_type == PDF_MIME_TYPE


@dataclass(frozen=True)
class DocumentInput:
    """A user-selected document, held in memory for one request."""

    data: bytes = field(repr=False)
    mime_type: str
    name: str = ""

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == PDF_MIME_TYPE

    @property
    def size(self) -> int:
        return len(self.data)

    def validate(self) -> None:
        """Raise if the document cannot be sent for digitization."""
        if not is_accepted_mime_type(self.mime_type):
            raise UnsupportedDocumentError()
        if not self.data:
            raise EmptyDocumentError(f"Document is empty: {self.name or '<unnamed>'}")


@dataclass(frozen=True)
class DigitizationRequest:
    """Snapshot of one document, encoded for transport."""

    encoded_payload: str = field(repr=False)
    mime_type: str
    want_summary: bool = False

    @classmethod
    def from_document(cls, document: DocumentInput, want_summary: bool) -> "DigitizationRequest":
        document.validate()
        return cls(
            encoded_payload=base64.b64encode(document.data).decode("ascii"),
            mime_type=document.mime_type,
            want_summary=want_summary,
        )


@dataclass
class LectureRecord:
    """Structured result of one digitization."""

    title: str
    date: str
    content: str  # Markdown
    summary: str | None = None

    @property
    def display_title(self) -> str:
        return self.title or UNTITLED

    @property
    def display_date(self) -> str:
        return self.date or UNDATED

    def to_dict(self) -> dict[str, str]:
        """Exactly the record fields; no `summary` key when absent."""
        data = {"title": self.title, "date": self.date}
        if self.summary is not None:
            data["summary"] = self.summary
        data["content"] = self.content
        return data


@dataclass
class DigitizationResult:
    """Result of a digitization attempt."""

    record: LectureRecord | None = None
    error: DigitizationError | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.record is not None


class SessionStatus(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class SessionState:
    """UI-facing session state. Mutated only by DigitizationSession."""

    status: SessionStatus = SessionStatus.IDLE
    current_document: DocumentInput | None = None
    current_result: LectureRecord | None = None
    last_error: str | None = None
    include_summary: bool = False

    @property
    def is_processing(self) -> bool:
        return self.status is SessionStatus.PROCESSING

    @property
    def can_digitize(self) -> bool:
        return self.current_document is not None and not self.is_processing
