"""Cross-process notification names."""

from enum import Enum
from typing import Optional


class NotificationEvent(Enum):
    """Payload-free signals exchanged between the host and keyboard processes.

    The value is the wire name; receivers re-read the shared store for data.
    """
    AUDIO_READY = "com.whisperer.audio.ready"
    TRANSCRIPTION_READY = "com.whisperer.transcription.ready"
    APP_RUNNING = "com.whisperer.app.running"

    @property
    def topic_name(self) -> str:
        """Topic segment used for in-process dispatch (e.g. ``audio_ready``)."""
        return self.name.lower()

    @classmethod
    def from_wire(cls, name: str) -> Optional["NotificationEvent"]:
        for event in cls:
            if event.value == name:
                return event
        return None
