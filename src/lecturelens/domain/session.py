"""Session state machine around the digitization call."""

import asyncio
import logging
from dataclasses import replace

from .errors import DigitizationError, SessionBusyError, UnknownDigitizationError
from .models import DocumentInput, LectureRecord, SessionState, SessionStatus
from .services import DigitizationService

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Digitization cancelled."


class DigitizationSession:
    """Owns SessionState and funnels every mutation through a transition.

    States: IDLE -> PROCESSING -> SUCCESS | ERROR, cycling for the
    lifetime of the application. At most one digitization is in flight;
    outcomes are applied only if their request token is still current.
    """

    def __init__(self, service: DigitizationService, include_summary: bool = False) -> None:
        self.service = service
        self._state = SessionState(include_summary=include_summary)
        self._token = 0

    @property
    def state(self) -> SessionState:
        # Copy so readers cannot write back into the session
        return replace(self._state)

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    def select_document(self, document: DocumentInput) -> None:
        """Select a new document; clears any result and error."""
        self._ensure_idle("select a document")
        self._state.current_document = document
        self._state.current_result = None
        self._state.last_error = None
        self._state.status = SessionStatus.IDLE
        logger.debug(f"Selected document: {document.name or '<unnamed>'}")

    def clear_document(self) -> None:
        """Drop the selection. Supersedes any in-flight request."""
        if self._state.is_processing:
            logger.info("Clearing document while processing; pending result will be ignored")
        self._token += 1
        self._state.current_document = None
        self._state.current_result = None
        self._state.last_error = None
        self._state.status = SessionStatus.IDLE

    def set_include_summary(self, include_summary: bool) -> None:
        self._ensure_idle("change the summary option")
        self._state.include_summary = include_summary

    def begin_digitization(self) -> int | None:
        """Move to PROCESSING and return the request token.

        Returns None (and changes nothing) if no document is selected or a
        digitization is already in flight.
        """
        if self._state.is_processing:
            logger.debug("Digitization already in progress; ignoring start")
            return None
        if self._state.current_document is None:
            logger.debug("No document selected; ignoring start")
            return None

        self._token += 1
        self._state.current_result = None
        self._state.last_error = None
        self._state.status = SessionStatus.PROCESSING
        return self._token

    def on_success(self, token: int, record: LectureRecord) -> bool:
        if not self._is_current(token):
            return False
        self._state.current_result = record
        self._state.status = SessionStatus.SUCCESS
        return True

    def on_failure(self, token: int, error: DigitizationError) -> bool:
        if not self._is_current(token):
            return False
        self._state.current_result = None
        self._state.last_error = error.message
        self._state.status = SessionStatus.ERROR
        return True

    async def start_digitization(self) -> bool:
        """Run one digitization of the current document.

        Returns False if the start was a no-op.
        """
        token = self.begin_digitization()
        if token is None:
            return False

        document = self._state.current_document
        try:
            result = await self.service.digitize(document, self._state.include_summary)
        except asyncio.CancelledError:
            # Leave PROCESSING so the session can be used again
            self.on_failure(token, UnknownDigitizationError(CANCELLED_MESSAGE))
            raise

        if result.success and result.record is not None:
            self.on_success(token, result.record)
        elif result.error is not None:
            self.on_failure(token, result.error)
        return True

    def _is_current(self, token: int) -> bool:
        if token != self._token or not self._state.is_processing:
            logger.info(f"Ignoring stale digitization outcome (token {token}, current {self._token})")
            return False
        return True

    def _ensure_idle(self, action: str) -> None:
        if self._state.is_processing:
            raise SessionBusyError(f"Cannot {action} while digitizing")
