"""Transcriber adapters."""

from ...config import TranscriberConfig, TranscriberProvider
from ...ports.transcriber import TranscriberPort
from .claude_api import ClaudeAPIAdapter
from .gemini import GeminiAdapter
from .ollama import OllamaAdapter

__all__ = ["ClaudeAPIAdapter", "GeminiAdapter", "OllamaAdapter", "create_transcriber"]


def create_transcriber(config: TranscriberConfig) -> TranscriberPort:
    """Create transcriber adapter based on configuration."""
    options = {"model": config.model} if config.model else {}
    api_key = config.api_key.get_secret_value() if config.api_key else None

    if config.provider == TranscriberProvider.GEMINI:
        return GeminiAdapter(
            api_key=api_key,
            max_output_tokens=config.max_output_tokens,
            timeout=config.timeout,
            **options,
        )
    elif config.provider == TranscriberProvider.CLAUDE_API:
        return ClaudeAPIAdapter(
            api_key=api_key,
            max_tokens=config.max_output_tokens,
            timeout=config.timeout,
            **options,
        )
    elif config.provider == TranscriberProvider.OLLAMA:
        return OllamaAdapter(
            base_url=config.ollama_url,
            max_output_tokens=config.max_output_tokens,
            timeout=config.timeout,
            **options,
        )
    else:
        raise ValueError(f"Unknown transcriber provider: {config.provider}")
