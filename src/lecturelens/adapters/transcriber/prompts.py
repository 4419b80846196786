"""Shared prompts for note transcription."""

import json

from ...domain.parsing import build_response_schema

SYSTEM_PROMPT = """\
You are an expert academic transcriber.
Your task is to accurately digitize handwritten or printed lecture notes.

CRITICAL INSTRUCTIONS:
1. Analyze the provided image/PDF.
2. Extract ALL text content verbatim into the 'content' field.
3. DO NOT TRUNCATE. Process the entire document from start to finish.
4. Use Markdown formatting to mirror the visual structure (headers #, lists -, bold **).
5. Ensure the output is valid JSON matching the schema."""

USER_PROMPT = "Digitize these notes. Extract EVERYTHING."


def system_prompt_with_schema(want_summary: bool) -> str:
    """System prompt with the schema spelled out, for providers without native schemas."""
    schema = json.dumps(build_response_schema(want_summary), indent=2)
    return f"{SYSTEM_PROMPT}\n\nRespond only with a JSON object matching this schema:\n{schema}"
