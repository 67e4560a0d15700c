"""Transcription-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class WhispererResponse(BaseModel):
    """Body returned by the transcription endpoint; anything else is a decode failure."""
    text: str


@dataclass
class TranscriptionResult:
    """Outcome of one transcription attempt."""
    text: str
    success: bool
    processing_time: float
    service: str
    model: str
    timestamp: datetime = field(default_factory=datetime.now)
    prompt: Optional[str] = None
    error: Optional[str] = None
