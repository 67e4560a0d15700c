"""Data models for the Whisperer application."""

from .status import TranscriptionStatus
from .events import NotificationEvent
from .transcription import TranscriptionResult, WhispererResponse
from .audio import AudioStats

__all__ = [
    "TranscriptionStatus",
    "NotificationEvent",
    "TranscriptionResult",
    "WhispererResponse",
    "AudioStats",
]
