"""Transcription module for Whisperer."""

from .base import AbstractTranscriptionBackend, TranscriptionError
from .openai_backend import OpenAITranscriptionBackend
from .prompt import build_vocabulary_prompt
from ..models.transcription import TranscriptionResult

__all__ = [
    "AbstractTranscriptionBackend",
    "TranscriptionError",
    "OpenAITranscriptionBackend",
    "TranscriptionResult",
    "build_vocabulary_prompt",
]
