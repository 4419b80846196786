"""Transcriber adapter using the Gemini API."""

import logging
import os
from typing import Any

import httpx

from ...domain.errors import MODEL_UNAVAILABLE_MESSAGE, ServiceUnavailableError, UnknownDigitizationError
from ...domain.models import DigitizationRequest
from ...domain.parsing import build_response_schema
from ...ports.transcriber import TranscriberPort
from .prompts import SYSTEM_PROMPT, USER_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-3-flash-preview"
GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta"
API_KEY_VARS = ("GEMINI_API_KEY", "API_KEY")
RETRYABLE_STATUS = (408, 429)
AUTH_STATUS = (401, 403)


def to_gemini_schema(node: dict[str, Any]) -> dict[str, Any]:
    """Convert a JSON schema to Gemini's OpenAPI-style schema (upper-case types)."""
    converted = dict(node)
    converted["type"] = node["type"].upper()
    if "properties" in node:
        converted["properties"] = {
            name: to_gemini_schema(child) for name, child in node["properties"].items()
        }
    return converted


def error_reason(response: httpx.Response) -> str:
    """The API's own error message, falling back to the HTTP reason phrase."""
    try:
        message = response.json().get("error", {}).get("message")
    except (ValueError, AttributeError):
        message = None
    return message or f"HTTP {response.status_code} {response.reason_phrase}"


class GeminiAdapter(TranscriberPort):
    """Transcriber implementation using Gemini structured output."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        max_output_tokens: int = 65536,
        timeout: float | None = None,
        base_url: str = GEMINI_API_URL,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        key = api_key or next((os.environ[v] for v in API_KEY_VARS if os.environ.get(v)), None)
        if not key:
            raise ValueError(f"No Gemini API key configured (set {API_KEY_VARS[0]})")
        self.model = model
        self.api_key = key
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self._client = client

    async def transcribe(self, request: DigitizationRequest) -> str | None:
        logger.info(f"Transcribing document with Gemini ({self.model})")

        try:
            response = await self._post(self.build_body(request))
        except httpx.TransportError as e:
            raise ServiceUnavailableError(f"Could not reach the Gemini API: {e}", cause=e) from e

        if response.status_code == 404:
            logger.warning(f"Gemini model not found: {self.model}")
            raise ServiceUnavailableError(MODEL_UNAVAILABLE_MESSAGE)
        if response.status_code in RETRYABLE_STATUS or response.status_code >= 500:
            raise ServiceUnavailableError(
                f"The Gemini API is unavailable (HTTP {response.status_code}). Please try again later."
            )
        if response.is_error:
            reason = error_reason(response)
            logger.error(f"Gemini request failed (HTTP {response.status_code}): {reason}")
            if response.status_code in AUTH_STATUS:
                raise ServiceUnavailableError(
                    f"The Gemini API rejected the request: {reason.rstrip('.')}. Check the configured API key."
                )
            raise UnknownDigitizationError(f"The Gemini API rejected the request: {reason}")

        return self._extract_text(response.json())

    def build_body(self, request: DigitizationRequest) -> dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {
                            "inlineData": {
                                "mimeType": request.mime_type,
                                "data": request.encoded_payload,
                            }
                        },
                        {"text": USER_PROMPT},
                    ],
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": to_gemini_schema(build_response_schema(request.want_summary)),
                "maxOutputTokens": self.max_output_tokens,
            },
        }

    async def _post(self, body: dict[str, Any]) -> httpx.Response:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {"x-goog-api-key": self.api_key}
        if self._client is not None:
            return await self._client.post(url, json=body, headers=headers)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, json=body, headers=headers)

    def _extract_text(self, data: dict[str, Any]) -> str | None:
        candidates = data.get("candidates") or []
        if not candidates:
            logger.warning(f"Gemini returned no candidates: {data.get('promptFeedback')}")
            return None

        candidate = candidates[0]
        if candidate.get("finishReason") == "MAX_TOKENS":
            logger.warning("Gemini output hit max_output_tokens; transcription may be cut off")

        parts = candidate.get("content", {}).get("parts", [])
        text = "".join(part.get("text", "") for part in parts if not part.get("thought"))
        return text or None
