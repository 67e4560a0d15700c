"""Keyboard controller: inserts finished transcriptions into the focused text."""

import logging
import threading
from typing import Callable, List, Optional, Protocol

from ..bridge.intents import HELP_URL, RECORD_URL
from ..bridge.transcription_bridge import TranscriptionBridge
from ..models.events import NotificationEvent

logger = logging.getLogger(__name__)


class TextDocumentProxy(Protocol):
    """The text input the keyboard is attached to."""

    def insert_text(self, text: str) -> None:
        ...

    def delete_backward(self) -> None:
        ...


class BufferTextProxy:
    """In-memory text field."""

    def __init__(self, text: str = ""):
        self.text = text

    def insert_text(self, text: str) -> None:
        self.text += text

    def delete_backward(self) -> None:
        self.text = self.text[:-1]


class KeyboardExtension:
    """Record / return / backspace / help controls bound to a text proxy.

    The keyboard has no microphone: record opens the host app through the URL
    scheme. Pending text is consumed whenever the keyboard appears and whenever
    the host signals TranscriptionReady, whichever comes first.
    """

    def __init__(
        self,
        bridge: TranscriptionBridge,
        text_proxy: TextDocumentProxy,
        open_url: Callable[[str], bool],
    ):
        self.bridge = bridge
        self.text_proxy = text_proxy
        self.open_url = open_url
        self.inserted: List[str] = []
        # What the host was last heard doing; informational only
        self.host_activity: Optional[str] = None
        self._consume_lock = threading.Lock()

    def view_did_load(self) -> None:
        self.bridge.add_observer(NotificationEvent.TRANSCRIPTION_READY, self.insert_pending_transcription)
        self.bridge.add_observer(NotificationEvent.APP_RUNNING, self._on_app_running)
        self.bridge.add_observer(NotificationEvent.AUDIO_READY, self._on_audio_ready)
        logger.info("[Keyboard] viewDidLoad called")

    def _on_app_running(self) -> None:
        if self.bridge.is_app_running():
            self.host_activity = "recording"

    def _on_audio_ready(self) -> None:
        self.host_activity = "transcribing"

    def view_did_appear(self) -> None:
        logger.info("[Keyboard] viewDidAppear called")
        self.insert_pending_transcription()

    def insert_pending_transcription(self) -> Optional[str]:
        """Insert and clear the stored transcription, if there is one."""
        with self._consume_lock:
            text = self.bridge.get_transcription()
            if not text:
                logger.info("[Keyboard] No transcribed text found in shared store")
                return None
            self.text_proxy.insert_text(text)
            self.bridge.clear_transcription()
            self.inserted.append(text)
        logger.info("[Keyboard] Text inserted and cleared from shared store")
        return text

    def handle_record_tap(self) -> bool:
        logger.info("[Keyboard] Record button tapped")
        return self.open_url(RECORD_URL)

    def handle_help_tap(self) -> bool:
        logger.info("[Keyboard] Help button tapped")
        return self.open_url(HELP_URL)

    def handle_return_tap(self) -> None:
        self.text_proxy.insert_text("\n")

    def handle_backspace_tap(self) -> None:
        self.text_proxy.delete_backward()

    def close(self) -> None:
        self.bridge.notifications.close()
