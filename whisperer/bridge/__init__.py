"""Cross-process bridge between the keyboard and the host app."""

from .notifications import NotificationCenter
from .transcription_bridge import TranscriptionBridge
from .intents import OpenIntent, HostLauncher, parse_open_intent

__all__ = [
    "NotificationCenter",
    "TranscriptionBridge",
    "OpenIntent",
    "HostLauncher",
    "parse_open_intent",
]
