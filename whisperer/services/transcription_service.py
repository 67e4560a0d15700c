"""Transcription of the recorded audio file, driving the status machine."""

import time
import asyncio
import logging
import threading
from pathlib import Path
from typing import Optional

from ..bridge.transcription_bridge import TranscriptionBridge
from ..models.events import NotificationEvent
from ..models.status import TranscriptionStatus
from ..models.transcription import TranscriptionResult
from ..storage.secrets import SecretStore, OPENAI_API_KEY
from ..transcription.base import AbstractTranscriptionBackend, TranscriptionError
from ..transcription.prompt import build_vocabulary_prompt
from .stats import StatsManager
from .status_machine import StatusMachine
from .vocabulary import VocabularyManager

logger = logging.getLogger(__name__)


class TranscriptionService:
    """Perform transcription of the recorded audio file.

    Results are stored in the shared store under ``transcribedText`` so the
    keyboard process can insert them. A failed request still ends in FINISHED
    with no text; only a missing credential or an unreadable recording ends
    in ERROR. The request itself runs on a worker thread with its own event
    loop, one attempt at a time.
    """

    def __init__(
        self,
        bridge: TranscriptionBridge,
        secrets: SecretStore,
        vocabulary: VocabularyManager,
        backend: AbstractTranscriptionBackend,
        stats: Optional[StatsManager] = None,
        status_machine: Optional[StatusMachine] = None,
    ):
        self.bridge = bridge
        self.secrets = secrets
        self.vocabulary = vocabulary
        self.backend = backend
        self.stats = stats
        self.status_machine = status_machine or StatusMachine()

        # Text of the last successful attempt, for display in the host app
        self.transcribed_text = ""
        self.last_error: Optional[str] = None
        self.last_result: Optional[TranscriptionResult] = None

        self._lock = threading.RLock()
        self._worker: Optional[threading.Thread] = None

    @property
    def status(self) -> TranscriptionStatus:
        return self.status_machine.status

    def has_api_key(self) -> bool:
        return bool(self.secrets.get(OPENAI_API_KEY))

    def transcribe(self, audio_path: Path) -> bool:
        """Submit the recording. Returns True when a request was started."""
        with self._lock:
            if self.status is not TranscriptionStatus.RECORDING:
                logger.warning(f"Ignoring transcription request while {self.status.value}")
                return False

            api_key = self.secrets.get(OPENAI_API_KEY)
            if not api_key:
                logger.error("No API key found in secret store")
                self.status_machine.transition(TranscriptionStatus.ERROR)
                return False

            self.status_machine.transition(TranscriptionStatus.TRANSCRIBING)

            try:
                audio = Path(audio_path).read_bytes()
            except OSError as e:
                logger.error(f"Could not read recording {audio_path}: {e}")
                self.status_machine.transition(TranscriptionStatus.ERROR)
                return False
            if not audio:
                logger.error(f"Recording is empty: {audio_path}")
                self.status_machine.transition(TranscriptionStatus.ERROR)
                return False

            prompt = build_vocabulary_prompt(self.vocabulary.list())
            self.last_error = None

            worker = threading.Thread(target=self._run_request, args=(audio, api_key, prompt), daemon=True)
            worker.name = "TranscriptionWorker"
            self._worker = worker
            worker.start()

        logger.info(f"Transcription started ({len(audio)} bytes, prompt={'yes' if prompt else 'no'})")
        return True

    def _run_request(self, audio: bytes, api_key: str, prompt: Optional[str]) -> None:
        """Internal method: one request on the worker thread."""
        start_time = time.time()
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

        try:
            try:
                text = loop.run_until_complete(self.backend.transcribe_audio(audio, api_key, prompt))
                self._record_success(text, prompt, time.time() - start_time)
            except TranscriptionError as e:
                self._record_failure(str(e), prompt, time.time() - start_time)
            except Exception as e:
                logger.error(f"Unhandled exception in transcription request: {e}", exc_info=True)
                self._record_failure(str(e), prompt, time.time() - start_time)
        finally:
            loop.close()
            self.status_machine.transition(TranscriptionStatus.FINISHED)

    def _record_success(self, text: str, prompt: Optional[str], elapsed: float) -> None:
        # Shared first, so the keyboard finds the text when it is woken up
        self.bridge.set_transcription(text)
        with self._lock:
            self.transcribed_text = text
            self.last_result = TranscriptionResult(
                text=text,
                success=True,
                processing_time=elapsed,
                service=self.backend.service_name,
                model=self.backend.model,
                prompt=prompt,
            )
        if self.stats:
            self.stats.add_words_from_text(text)
        logger.info(f"Transcription succeeded in {elapsed:.2f}s: {len(text)} characters")
        self.bridge.post_notification(NotificationEvent.TRANSCRIPTION_READY)

    def _record_failure(self, error: str, prompt: Optional[str], elapsed: float) -> None:
        with self._lock:
            self.last_error = error
            self.last_result = TranscriptionResult(
                text="",
                success=False,
                processing_time=elapsed,
                service=self.backend.service_name,
                model=self.backend.model,
                prompt=prompt,
                error=error,
            )
        logger.error(f"Transcription failed after {elapsed:.2f}s: {error}")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the in-flight request is done. Returns False on timeout."""
        worker = self._worker
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    def reset(self, clear_shared: bool = True) -> bool:
        """Go back to RECORDING for a re-record or retry, dropping the previous text."""
        with self._lock:
            if self.status is TranscriptionStatus.TRANSCRIBING:
                logger.warning("Cannot reset while a transcription is in flight")
                return False
            self.status_machine.transition(TranscriptionStatus.RECORDING)
            self.transcribed_text = ""
            self.last_error = None
            if clear_shared:
                self.bridge.clear_transcription()
        return True

    def clear_text(self) -> None:
        """Drop the text locally and from the shared store."""
        with self._lock:
            self.transcribed_text = ""
            self.bridge.clear_transcription()
