"""Transcriber port - interface for the hosted multimodal model."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.models import DigitizationRequest


class TranscriberPort(ABC):
    """Interface for model-backed document transcription."""

    @abstractmethod
    async def transcribe(self, request: "DigitizationRequest") -> str | None:
        """Send one request to the model and return its raw text output.

        Transport-class failures are raised as ServiceUnavailableError.
        """
        pass
