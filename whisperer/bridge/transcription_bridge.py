"""Communication bridge between the keyboard process and the host app."""

import logging
from pathlib import Path
from typing import Callable, Optional

from ..models.events import NotificationEvent
from ..storage.shared_store import SharedStateStore
from .notifications import NotificationCenter

logger = logging.getLogger(__name__)

TRANSCRIBED_TEXT_KEY = "transcribedText"
APP_RUNNING_KEY = "app_running"
AUDIO_FILENAME = "recording.wav"


class TranscriptionBridge:
    """Typed accessors over the shared store plus notification post/observe.

    Constructed once at each process entry point and handed to whatever needs it.
    """

    def __init__(self, store: SharedStateStore, notifications: NotificationCenter):
        self.store = store
        self.notifications = notifications

    # App status

    def set_app_running(self, running: bool) -> None:
        self.store.set(APP_RUNNING_KEY, running)
        if running:
            self.post_notification(NotificationEvent.APP_RUNNING)

    def is_app_running(self) -> bool:
        return self.store.get_bool(APP_RUNNING_KEY)

    # Audio file

    def get_audio_file_path(self) -> Path:
        return self.store.group_directory / AUDIO_FILENAME

    # Notifications

    def post_notification(self, event: NotificationEvent) -> None:
        self.notifications.post_notification(event)

    def add_observer(self, event: NotificationEvent, callback: Callable[[], None]) -> None:
        self.notifications.add_observer(event, callback)

    # Transcription data

    def set_transcription(self, text: str) -> None:
        self.store.set(TRANSCRIBED_TEXT_KEY, text)

    def get_transcription(self) -> Optional[str]:
        return self.store.get_string(TRANSCRIBED_TEXT_KEY)

    def clear_transcription(self) -> None:
        self.store.remove(TRANSCRIBED_TEXT_KEY)
