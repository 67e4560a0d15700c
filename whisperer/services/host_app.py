"""Host app controller: owns the microphone and the transcription call."""

import logging
from typing import Optional

from ..audio.recorder import Recorder
from ..bridge.intents import OpenIntent, parse_open_intent
from ..bridge.transcription_bridge import TranscriptionBridge
from ..models.events import NotificationEvent
from ..models.status import TranscriptionStatus
from .stats import StatsManager
from .transcription_service import TranscriptionService

logger = logging.getLogger(__name__)

BUTTON_LABELS = {
    TranscriptionStatus.RECORDING: "Stop Recording",
    TranscriptionStatus.TRANSCRIBING: "Transcribing...",
    TranscriptionStatus.FINISHED: "Re-record",
    TranscriptionStatus.ERROR: "Error - Try Again",
}


class HostApp:
    """Process-level state of the host app.

    When opened through the record intent the app starts recording at once.
    The main button stops and submits, then re-records or retries; the keyboard
    picks the result up from the shared store.
    """

    def __init__(
        self,
        bridge: TranscriptionBridge,
        recorder: Recorder,
        transcription: TranscriptionService,
        stats: StatsManager,
    ):
        self.bridge = bridge
        self.recorder = recorder
        self.transcription = transcription
        self.stats = stats

        self.opened_via_url = False
        self.show_help = False
        self.launched = False

    @property
    def status(self) -> TranscriptionStatus:
        return self.transcription.status

    def launch(self) -> None:
        """Cold start: clear a stale running flag before anything can be observed."""
        self.bridge.set_app_running(False)
        self.bridge.add_observer(NotificationEvent.APP_RUNNING, self._on_app_running)
        self.launched = True
        logger.info("Host app launched")

    def _on_app_running(self) -> None:
        logger.debug(f"App running signal received, flag={self.bridge.is_app_running()}")

    def open_url(self, url: str) -> Optional[OpenIntent]:
        """Handle a ``whisperer://`` URL."""
        intent = parse_open_intent(url)
        if intent is OpenIntent.HELP:
            self.show_help = True
        elif intent is OpenIntent.RECORD:
            self.opened_via_url = True
            self.bridge.set_app_running(True)
            if self.transcription.reset():
                self.recorder.start()
        return intent

    def on_foreground(self) -> None:
        """App became active without a URL: back to a fresh state."""
        if self.opened_via_url:
            return
        if self.status is TranscriptionStatus.TRANSCRIBING:
            return
        self.transcription.reset(clear_shared=False)

    def handle_button_tap(self) -> None:
        if not self.opened_via_url:
            # No recording screen without the record URL
            logger.debug("Button ignored on the welcome screen")
            return
        status = self.status
        if status is TranscriptionStatus.RECORDING:
            # Request to transcribe is what stops the audio recording
            self.recorder.stop()
            self.bridge.post_notification(NotificationEvent.AUDIO_READY)
            self.stats.increment_transcription_count()
            self.transcription.transcribe(self.recorder.audio_path)
        elif status.is_terminal:
            # Re-record after FINISHED, retry after ERROR
            if self.transcription.reset():
                self.recorder.start()
        else:
            logger.debug("Button disabled while transcribing")

    def handle_clear_tap(self) -> None:
        """Drop the text everywhere and return to the welcome screen."""
        self.transcription.clear_text()
        self.opened_via_url = False

    @property
    def button_label(self) -> str:
        return BUTTON_LABELS[self.status]

    @property
    def button_enabled(self) -> bool:
        return self.status is not TranscriptionStatus.TRANSCRIBING

    def shutdown(self) -> None:
        if self.status is TranscriptionStatus.TRANSCRIBING:
            self.transcription.wait(timeout=5.0)
        self.recorder.release()
        self.bridge.set_app_running(False)
        self.bridge.notifications.close()
        logger.info("Host app shut down")
