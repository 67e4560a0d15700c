"""OpenAI audio transcription backend."""

import asyncio
import logging
from typing import Optional

import aiohttp
from pydantic import ValidationError

from ..models.transcription import WhispererResponse
from .base import AbstractTranscriptionBackend, TranscriptionError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.openai.com/v1/audio/transcriptions"
DEFAULT_MODEL = "gpt-4o-transcribe"
DEFAULT_UPLOAD_FILENAME = "recording.m4a"


class OpenAITranscriptionBackend(AbstractTranscriptionBackend):
    """Sends one recording to the OpenAI transcription endpoint as multipart form data."""

    service_name = "openai"

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        model: str = DEFAULT_MODEL,
        upload_filename: str = DEFAULT_UPLOAD_FILENAME,
        timeout_seconds: Optional[float] = None,
    ):
        """Initialize OpenAI transcription backend.

        Args:
            endpoint: Transcription URL
            model: Model identifier sent in the ``model`` part
            upload_filename: Filename given to the ``file`` part
            timeout_seconds: Total request timeout; None keeps aiohttp's default
        """
        self.endpoint = endpoint
        self.model = model
        self.upload_filename = upload_filename
        self.timeout_seconds = timeout_seconds

        logger.info(f"OpenAITranscriptionBackend initialized with model: {model}")

    def build_form(self, audio: bytes, prompt: Optional[str] = None) -> aiohttp.FormData:
        """Multipart body with ``file``, ``model`` and, when given, ``prompt`` in that order."""
        form = aiohttp.FormData()
        form.add_field(
            "file",
            audio,
            filename=self.upload_filename,
            content_type="application/octet-stream",
        )
        form.add_field("model", self.model)
        if prompt:
            form.add_field("prompt", prompt)
        return form

    async def transcribe_audio(self, audio: bytes, api_key: str, prompt: Optional[str] = None) -> str:
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        form = self.build_form(audio, prompt)

        timeout = None
        if self.timeout_seconds is not None:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        session_kwargs = {"timeout": timeout} if timeout else {}
        try:
            async with aiohttp.ClientSession(**session_kwargs) as session:
                async with session.post(self.endpoint, headers=headers, data=form) as response:
                    status = response.status
                    body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"API request error: {e!r}")
            raise TranscriptionError(f"API request error: {e!r}") from e

        logger.info(f"API response status: {status}")
        if status != 200:
            error_text = body.decode('utf-8', errors='replace')
            logger.error(f"API error response: {error_text}")
            raise TranscriptionError(f"Transcription API error: {status} - {error_text}")

        try:
            parsed = WhispererResponse.model_validate_json(body)
        except ValidationError as e:
            logger.error(f"Failed to decode response. Raw response: {body.decode('utf-8', errors='replace')}")
            raise TranscriptionError(f"Undecodable transcription response: {e}") from e

        return parsed.text
