"""Domain layer - core business logic."""

from .models import (
    DigitizationRequest,
    DigitizationResult,
    DocumentInput,
    LectureRecord,
    SessionState,
    SessionStatus,
)

__all__ = [
    "DigitizationRequest",
    "DigitizationResult",
    "DocumentInput",
    "LectureRecord",
    "SessionState",
    "SessionStatus",
]
