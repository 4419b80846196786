"""Domain errors."""

from enum import Enum

DEFAULT_FAILURE_MESSAGE = "Failed to digitize notes."
MODEL_UNAVAILABLE_MESSAGE = "The selected model is not available. Please try again later."
MALFORMED_MESSAGE = (
    "Failed to parse the document structure. "
    "The content might be too complex or the image unclear."
)
REJECTED_DOCUMENT_MESSAGE = "Please upload an image file (JPG, PNG) or a PDF document."


class ErrorKind(str, Enum):
    """Classification of a failed digitization attempt."""

    EMPTY_RESPONSE = "empty-response"
    MALFORMED_RESPONSE = "malformed-response"
    SCHEMA_VIOLATION = "schema-violation"
    SERVICE_UNAVAILABLE = "service-unavailable"
    UNKNOWN = "unknown"


class DigitizationError(Exception):
    """A classified digitization failure.

    `message` is meant for the user; `cause` keeps the underlying
    exception (if any) for diagnostics.
    """

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str = DEFAULT_FAILURE_MESSAGE, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class EmptyResponseError(DigitizationError):
    kind = ErrorKind.EMPTY_RESPONSE


class MalformedResponseError(DigitizationError):
    kind = ErrorKind.MALFORMED_RESPONSE


class SchemaViolationError(DigitizationError):
    kind = ErrorKind.SCHEMA_VIOLATION


class ServiceUnavailableError(DigitizationError):
    kind = ErrorKind.SERVICE_UNAVAILABLE


class UnknownDigitizationError(DigitizationError):
    kind = ErrorKind.UNKNOWN


class UnsupportedDocumentError(ValueError):
    """File is neither an image nor a PDF."""

    def __init__(self, message: str = REJECTED_DOCUMENT_MESSAGE) -> None:
        super().__init__(message)


class EmptyDocumentError(ValueError):
    """File has no content."""


class SessionBusyError(RuntimeError):
    """Transition not allowed while a digitization is in flight."""
