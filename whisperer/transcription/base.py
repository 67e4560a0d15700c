"""Abstract base classes for transcription backends."""

from abc import ABC, abstractmethod
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class TranscriptionError(Exception):
    """A transcription attempt failed (transport, HTTP status or response shape)."""


class AbstractTranscriptionBackend(ABC):
    """Abstract base class for transcription backends."""

    service_name = "abstract"
    model = ""

    @abstractmethod
    async def transcribe_audio(self, audio: bytes, api_key: str, prompt: Optional[str] = None) -> str:
        """Transcribe a complete recording and return the recognized text.

        Args:
            audio: Encoded audio file contents
            api_key: Credential sent as a bearer token
            prompt: Optional hint biasing recognition toward known terms

        Returns:
            Recognized text

        Raises:
            TranscriptionError: If the request or its response is unusable
        """
        pass
