"""Transcriber adapter using Ollama."""

import logging
from urllib.parse import urlparse

import httpx

from ...domain.errors import (
    MODEL_UNAVAILABLE_MESSAGE,
    ServiceUnavailableError,
    UnknownDigitizationError,
    UnsupportedDocumentError,
)
from ...domain.models import DigitizationRequest
from ...domain.parsing import build_response_schema
from ...ports.transcriber import TranscriberPort
from .prompts import SYSTEM_PROMPT, USER_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemma3:4b"


def error_reason(response: httpx.Response) -> str:
    """Ollama's `error` field, falling back to the HTTP reason phrase."""
    try:
        message = response.json().get("error")
    except (ValueError, AttributeError):
        message = None
    return message or f"HTTP {response.status_code} {response.reason_phrase}"


class OllamaAdapter(TranscriberPort):
    """Transcriber implementation using a local Ollama vision model."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = "http://localhost:11434",
        max_output_tokens: int = 65536,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        parsed = urlparse(base_url)
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"Invalid ollama_url scheme: {parsed.scheme}")
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self._client = client

    async def transcribe(self, request: DigitizationRequest) -> str | None:
        if not request.mime_type.startswith("image/"):
            raise UnsupportedDocumentError("Ollama models accept images only; convert the PDF to an image first.")

        logger.info(f"Transcribing document with Ollama ({self.model})")

        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": USER_PROMPT, "images": [request.encoded_payload]},
            ],
            "stream": False,
            "format": build_response_schema(request.want_summary),
            "options": {"num_predict": self.max_output_tokens},
        }

        try:
            response = await self._post(body)
        except httpx.TransportError as e:
            raise ServiceUnavailableError(f"Could not reach Ollama at {self.base_url}: {e}", cause=e) from e

        if response.status_code == 404:
            logger.warning(f"Ollama model not found: {self.model}")
            raise ServiceUnavailableError(MODEL_UNAVAILABLE_MESSAGE)
        if response.status_code >= 500:
            raise ServiceUnavailableError(f"Ollama is unavailable (HTTP {response.status_code}).")
        if response.is_error:
            reason = error_reason(response)
            logger.error(f"Ollama request failed (HTTP {response.status_code}): {reason}")
            raise UnknownDigitizationError(f"Ollama rejected the request: {reason}")

        return response.json().get("message", {}).get("content") or None

    async def _post(self, body: dict) -> httpx.Response:
        url = f"{self.base_url}/api/chat"
        if self._client is not None:
            return await self._client.post(url, json=body)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, json=body)
