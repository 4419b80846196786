"""Domain services - orchestrate business logic."""

import asyncio
import logging

from ..ports.transcriber import TranscriberPort
from .errors import (
    DEFAULT_FAILURE_MESSAGE,
    DigitizationError,
    EmptyDocumentError,
    ServiceUnavailableError,
    UnknownDigitizationError,
    UnsupportedDocumentError,
)
from .models import DigitizationRequest, DigitizationResult, DocumentInput
from .parsing import parse_record

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300.0


class DigitizationService:
    """Turns one document into a LectureRecord via the transcriber."""

    def __init__(self, transcriber: TranscriberPort, timeout: float | None = DEFAULT_TIMEOUT) -> None:
        self.transcriber = transcriber
        self.timeout = timeout

    async def digitize(self, document: DocumentInput | None, want_summary: bool) -> DigitizationResult:
        """Digitize a document.

        Pipeline:
            1. Snapshot and encode the document
            2. One transcriber call (bounded by the timeout)
            3. Strip fences, parse, unescape, validate

        Never raises: failures come back classified in the result.
        No retries are made.
        """
        result = DigitizationResult()

        if document is None:
            result.error = UnknownDigitizationError("No document selected.")
            return result

        logger.info(
            f"Digitizing: {document.name or '<unnamed>'} "
            f"({document.mime_type}, {document.size} bytes, summary={want_summary})"
        )

        try:
            request = DigitizationRequest.from_document(document, want_summary)
            text = await self._transcribe(request)
            result.record = parse_record(text, want_summary)
            logger.info(f"Digitized: {result.record.display_title} ({len(result.record.content)} chars)")
        except DigitizationError as e:
            logger.error(f"Digitization failed [{e.kind.value}]: {e.message}")
            result.error = e
        except (UnsupportedDocumentError, EmptyDocumentError) as e:
            logger.error(f"Document rejected: {e}")
            result.error = UnknownDigitizationError(str(e), cause=e)
        except Exception as e:
            logger.exception(f"Digitization failed: {e}")
            result.error = UnknownDigitizationError(str(e) or DEFAULT_FAILURE_MESSAGE, cause=e)

        return result

    async def _transcribe(self, request: DigitizationRequest) -> str | None:
        try:
            return await asyncio.wait_for(self.transcriber.transcribe(request), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ServiceUnavailableError(
                f"The model did not respond within {self.timeout:g} seconds. Please try again.",
                cause=e,
            ) from e
