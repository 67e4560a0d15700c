"""Transcription lifecycle status."""

from enum import Enum


class TranscriptionStatus(Enum):
    """Lifecycle of one recording, observed by both processes."""
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    FINISHED = "finished"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (TranscriptionStatus.FINISHED, TranscriptionStatus.ERROR)
