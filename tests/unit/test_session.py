"""Unit tests for the session state machine."""

import asyncio
import json

import pytest

from lecturelens.domain.errors import SessionBusyError, UnknownDigitizationError
from lecturelens.domain.models import DigitizationRequest, DocumentInput, LectureRecord, SessionStatus
from lecturelens.domain.services import DigitizationService
from lecturelens.domain.session import DigitizationSession
from lecturelens.ports.transcriber import TranscriberPort


class GatedTranscriber(TranscriberPort):
    """Transcriber whose calls block until the test releases them."""

    def __init__(self) -> None:
        self.calls: list[asyncio.Future] = []
        self.requests: list[DigitizationRequest] = []

    async def transcribe(self, request: DigitizationRequest) -> str | None:
        future = asyncio.get_running_loop().create_future()
        self.calls.append(future)
        self.requests.append(request)
        return await future

    async def wait_for_calls(self, count: int) -> None:
        while len(self.calls) < count:
            await asyncio.sleep(0)


def payload(title: str) -> str:
    return json.dumps({"title": title, "date": "2024-01-10", "content": f"{title} body"})


@pytest.fixture
def gated() -> GatedTranscriber:
    return GatedTranscriber()


@pytest.fixture
def session(gated: GatedTranscriber) -> DigitizationSession:
    return DigitizationSession(DigitizationService(gated, timeout=None))


@pytest.fixture
def second_document() -> DocumentInput:
    return DocumentInput(data=b"\x89PNG\r\n\x1a\nsecond", mime_type="image/png", name="second.png")


class TestTransitions:
    """Tests for the synchronous transitions."""

    def test_initial_state(self, session: DigitizationSession) -> None:
        state = session.state
        assert state.status is SessionStatus.IDLE
        assert state.current_document is None
        assert state.current_result is None
        assert state.last_error is None

    def test_select_document(self, session: DigitizationSession, jpeg_document: DocumentInput) -> None:
        session.select_document(jpeg_document)
        assert session.state.current_document is jpeg_document
        assert session.status is SessionStatus.IDLE

    def test_select_clears_result_and_error_after_success(
        self, session: DigitizationSession, jpeg_document: DocumentInput, sample_record: LectureRecord
    ) -> None:
        session.select_document(jpeg_document)
        token = session.begin_digitization()
        assert token is not None
        session.on_success(token, sample_record)
        assert session.status is SessionStatus.SUCCESS

        session.select_document(jpeg_document)
        assert session.state.current_result is None
        assert session.state.last_error is None
        assert session.status is SessionStatus.IDLE

    def test_select_clears_error(self, session: DigitizationSession, jpeg_document: DocumentInput) -> None:
        session.select_document(jpeg_document)
        token = session.begin_digitization()
        assert token is not None
        session.on_failure(token, UnknownDigitizationError("boom"))
        assert session.state.last_error == "boom"

        session.select_document(jpeg_document)
        assert session.state.last_error is None
        assert session.status is SessionStatus.IDLE

    def test_select_while_processing_disallowed(
        self, session: DigitizationSession, jpeg_document: DocumentInput, second_document: DocumentInput
    ) -> None:
        session.select_document(jpeg_document)
        session.begin_digitization()
        with pytest.raises(SessionBusyError):
            session.select_document(second_document)
        assert session.state.current_document is jpeg_document

    def test_summary_toggle_disallowed_while_processing(
        self, session: DigitizationSession, jpeg_document: DocumentInput
    ) -> None:
        session.set_include_summary(True)
        assert session.state.include_summary is True
        session.select_document(jpeg_document)
        session.begin_digitization()
        with pytest.raises(SessionBusyError):
            session.set_include_summary(False)

    def test_begin_without_document_is_noop(self, session: DigitizationSession) -> None:
        assert session.begin_digitization() is None
        assert session.status is SessionStatus.IDLE

    def test_begin_while_processing_is_noop(
        self, session: DigitizationSession, jpeg_document: DocumentInput
    ) -> None:
        session.select_document(jpeg_document)
        assert session.begin_digitization() is not None
        assert session.begin_digitization() is None
        assert session.status is SessionStatus.PROCESSING

    def test_failure_keeps_result_empty(
        self, session: DigitizationSession, jpeg_document: DocumentInput
    ) -> None:
        session.select_document(jpeg_document)
        token = session.begin_digitization()
        assert token is not None
        assert session.on_failure(token, UnknownDigitizationError("nope")) is True
        state = session.state
        assert state.status is SessionStatus.ERROR
        assert state.current_result is None
        assert state.last_error == "nope"

    def test_retry_from_error_clears_error(
        self, session: DigitizationSession, jpeg_document: DocumentInput
    ) -> None:
        session.select_document(jpeg_document)
        token = session.begin_digitization()
        assert token is not None
        session.on_failure(token, UnknownDigitizationError("nope"))

        assert session.begin_digitization() is not None
        assert session.state.last_error is None
        assert session.status is SessionStatus.PROCESSING

    def test_outcome_without_processing_ignored(
        self, session: DigitizationSession, sample_record: LectureRecord
    ) -> None:
        assert session.on_success(0, sample_record) is False
        assert session.status is SessionStatus.IDLE

    def test_clear_document_resets(self, session: DigitizationSession, jpeg_document: DocumentInput) -> None:
        session.select_document(jpeg_document)
        session.begin_digitization()
        session.clear_document()
        state = session.state
        assert state.status is SessionStatus.IDLE
        assert state.current_document is None

    def test_state_is_a_copy(self, session: DigitizationSession, jpeg_document: DocumentInput) -> None:
        state = session.state
        state.current_document = jpeg_document
        assert session.state.current_document is None


class TestStartDigitization:
    """Tests for the async start_digitization."""

    def test_success(
        self, session: DigitizationSession, gated: GatedTranscriber, jpeg_document: DocumentInput
    ) -> None:
        async def scenario() -> bool:
            session.select_document(jpeg_document)
            task = asyncio.create_task(session.start_digitization())
            await gated.wait_for_calls(1)
            assert session.status is SessionStatus.PROCESSING
            gated.calls[0].set_result(payload("Lecture 1"))
            return await task

        assert asyncio.run(scenario()) is True
        state = session.state
        assert state.status is SessionStatus.SUCCESS
        assert state.current_result is not None
        assert state.current_result.title == "Lecture 1"

    def test_failure(
        self, session: DigitizationSession, gated: GatedTranscriber, jpeg_document: DocumentInput
    ) -> None:
        async def scenario() -> None:
            session.select_document(jpeg_document)
            task = asyncio.create_task(session.start_digitization())
            await gated.wait_for_calls(1)
            gated.calls[0].set_result("not json")
            await task

        asyncio.run(scenario())
        state = session.state
        assert state.status is SessionStatus.ERROR
        assert state.current_result is None
        assert "Failed to parse the document structure" in (state.last_error or "")

    def test_no_document_is_noop(self, session: DigitizationSession, gated: GatedTranscriber) -> None:
        assert asyncio.run(session.start_digitization()) is False
        assert session.status is SessionStatus.IDLE
        assert gated.calls == []

    def test_concurrent_start_does_not_overlap(
        self, session: DigitizationSession, gated: GatedTranscriber, jpeg_document: DocumentInput
    ) -> None:
        async def scenario() -> tuple[bool, bool]:
            session.select_document(jpeg_document)
            first = asyncio.create_task(session.start_digitization())
            await gated.wait_for_calls(1)
            second = await session.start_digitization()
            assert session.state.current_result is None
            gated.calls[0].set_result(payload("Only"))
            return await first, second

        first, second = asyncio.run(scenario())
        assert (first, second) == (True, False)
        assert len(gated.calls) == 1
        assert session.state.current_result is not None
        assert session.state.current_result.title == "Only"

    def test_uses_include_summary(
        self, session: DigitizationSession, gated: GatedTranscriber, jpeg_document: DocumentInput
    ) -> None:
        async def scenario() -> None:
            session.set_include_summary(True)
            session.select_document(jpeg_document)
            task = asyncio.create_task(session.start_digitization())
            await gated.wait_for_calls(1)
            gated.calls[0].set_result(
                json.dumps({"title": "T", "date": "D", "content": "C", "summary": "S"})
            )
            await task

        asyncio.run(scenario())
        assert gated.requests[0].want_summary is True
        assert session.state.current_result is not None
        assert session.state.current_result.summary == "S"

    @pytest.mark.parametrize("stale_outcome", [payload("A"), "not json"])
    def test_stale_outcome_never_overwrites_newer(
        self,
        session: DigitizationSession,
        gated: GatedTranscriber,
        jpeg_document: DocumentInput,
        second_document: DocumentInput,
        stale_outcome: str,
    ) -> None:
        async def scenario() -> None:
            session.select_document(jpeg_document)
            task_a = asyncio.create_task(session.start_digitization())
            await gated.wait_for_calls(1)

            # A is superseded: selection cleared, new document, request B
            session.clear_document()
            session.select_document(second_document)
            task_b = asyncio.create_task(session.start_digitization())
            await gated.wait_for_calls(2)

            gated.calls[1].set_result(payload("B"))
            await task_b
            gated.calls[0].set_result(stale_outcome)
            await task_a

        asyncio.run(scenario())
        state = session.state
        assert state.status is SessionStatus.SUCCESS
        assert state.current_result is not None
        assert state.current_result.title == "B"
        assert state.last_error is None
        assert state.current_document is second_document

    def test_outcome_after_clear_ignored(
        self, session: DigitizationSession, gated: GatedTranscriber, jpeg_document: DocumentInput
    ) -> None:
        async def scenario() -> None:
            session.select_document(jpeg_document)
            task = asyncio.create_task(session.start_digitization())
            await gated.wait_for_calls(1)
            session.clear_document()
            gated.calls[0].set_result(payload("Late"))
            await task

        asyncio.run(scenario())
        state = session.state
        assert state.status is SessionStatus.IDLE
        assert state.current_result is None

    def test_cancelled_digitization_releases_session(
        self, session: DigitizationSession, gated: GatedTranscriber, jpeg_document: DocumentInput
    ) -> None:
        async def cancel() -> None:
            session.select_document(jpeg_document)
            task = asyncio.create_task(session.start_digitization())
            await gated.wait_for_calls(1)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(cancel())
        state = session.state
        assert state.status is SessionStatus.ERROR
        assert state.last_error == "Digitization cancelled."
        assert state.current_document is jpeg_document

        async def retry() -> bool:
            task = asyncio.create_task(session.start_digitization())
            await gated.wait_for_calls(2)
            gated.calls[1].set_result(payload("Again"))
            return await task

        assert asyncio.run(retry()) is True
        assert session.status is SessionStatus.SUCCESS
        assert session.state.current_result is not None
        assert session.state.current_result.title == "Again"

    def test_cancelled_superseded_request_keeps_newer_state(
        self,
        session: DigitizationSession,
        gated: GatedTranscriber,
        jpeg_document: DocumentInput,
        second_document: DocumentInput,
    ) -> None:
        async def scenario() -> None:
            session.select_document(jpeg_document)
            task_a = asyncio.create_task(session.start_digitization())
            await gated.wait_for_calls(1)
            session.clear_document()
            session.select_document(second_document)
            task_b = asyncio.create_task(session.start_digitization())
            await gated.wait_for_calls(2)

            task_a.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task_a
            assert session.status is SessionStatus.PROCESSING

            gated.calls[1].set_result(payload("B"))
            await task_b

        asyncio.run(scenario())
        assert session.status is SessionStatus.SUCCESS
        assert session.state.last_error is None
