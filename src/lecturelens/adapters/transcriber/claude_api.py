"""Transcriber adapter using Claude API."""

import logging
from typing import Any

from ...domain.errors import MODEL_UNAVAILABLE_MESSAGE, ServiceUnavailableError
from ...domain.models import PDF_MIME_TYPE, DigitizationRequest
from ...ports.transcriber import TranscriberPort
from .prompts import USER_PROMPT, system_prompt_with_schema

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"
MAX_OUTPUT_TOKENS = 64000  # Sonnet 4 output ceiling


class ClaudeAPIAdapter(TranscriberPort):
    """Transcriber implementation using Claude API (pay-as-you-go)."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        max_tokens: int = MAX_OUTPUT_TOKENS,
        api_key: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.model = model
        self.max_tokens = min(max_tokens, MAX_OUTPUT_TOKENS)

    async def transcribe(self, request: DigitizationRequest) -> str | None:
        import anthropic

        logger.info(f"Transcribing document with Claude API ({self.model})")

        try:
            # Clients are bound to the event loop they first run on
            async with anthropic.AsyncAnthropic(api_key=self.api_key, timeout=self.timeout) as client:
                message = await self._stream_message(client, request)
        except anthropic.NotFoundError as e:
            logger.warning(f"Claude model not found: {self.model}")
            raise ServiceUnavailableError(MODEL_UNAVAILABLE_MESSAGE, cause=e) from e
        except (
            anthropic.APIConnectionError,
            anthropic.RateLimitError,
            anthropic.InternalServerError,
        ) as e:
            raise ServiceUnavailableError(
                f"The Claude API is unavailable: {e}. Please try again later.", cause=e
            ) from e

        if message.stop_reason == "max_tokens":
            logger.warning("Claude output hit max_tokens; transcription may be cut off")

        text = "".join(block.text for block in message.content if block.type == "text")
        return text or None

    @staticmethod
    def document_block(request: DigitizationRequest) -> dict[str, Any]:
        source = {
            "type": "base64",
            "media_type": request.mime_type,
            "data": request.encoded_payload,
        }
        block_type = "document" if request.mime_type == PDF_MIME_TYPE else "image"
        return {"type": block_type, "source": source}

    async def _stream_message(self, client, request: DigitizationRequest):
        # Streamed so that large max_tokens values are accepted
        async with client.messages.stream(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system_prompt_with_schema(request.want_summary),
            messages=[
                {
                    "role": "user",
                    "content": [self.document_block(request), {"type": "text", "text": USER_PROMPT}],
                }
            ],
        ) as stream:
            return await stream.get_final_message()
