"""Services layer for Whisperer application logic."""

from .status_machine import StatusMachine, InvalidStatusTransition
from .vocabulary import VocabularyManager
from .stats import StatsManager
from .transcription_service import TranscriptionService
from .host_app import HostApp
from .keyboard_extension import KeyboardExtension, BufferTextProxy

__all__ = [
    "StatusMachine",
    "InvalidStatusTransition",
    "VocabularyManager",
    "StatsManager",
    "TranscriptionService",
    "HostApp",
    "KeyboardExtension",
    "BufferTextProxy",
]
