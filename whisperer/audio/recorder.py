"""Microphone recorder writing the single shared audio file."""

import wave
import logging
from datetime import datetime
from pathlib import Path
from threading import Thread, Event
from typing import Callable, Optional

import numpy as np
import pyaudio

from ..models.audio import AudioStats
from ..storage.shared_store import SharedStateStore

logger = logging.getLogger(__name__)

SILENCE_FLOOR_DB = -80.0
MICROPHONE_PERMISSION_KEY = "microphone_permission"
PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"


def compute_level(chunk: bytes) -> float:
    """Return the dBFS level of a 16-bit PCM chunk, clamped to [-80, 0]."""
    samples = np.frombuffer(chunk, dtype=np.int16).astype(np.float64)
    if samples.size == 0:
        return SILENCE_FLOOR_DB
    rms = float(np.sqrt(np.mean(samples ** 2)))
    if rms <= 0.0:
        return SILENCE_FLOOR_DB
    level = 20.0 * np.log10(rms / 32768.0)
    return float(min(0.0, max(SILENCE_FLOOR_DB, level)))


class Recorder:
    """Records the microphone into one overwritable WAV file.

    Use start() and stop() to operate the recorder. The PyAudio instance
    survives stop() so the next start() does not re-acquire the device;
    release() tears it down.
    """

    def __init__(
        self,
        audio_path: Path,
        store: SharedStateStore,
        permission_prompt: Optional[Callable[[], bool]] = None,
        sample_rate: int = 44100,
        chunk_size: int = 1024,
        channels: int = 1,
    ):
        """Initialize recorder.

        Args:
            audio_path: The single audio slot, overwritten by every recording
            store: Shared store holding the persisted microphone decision
            permission_prompt: Asked once when no decision is stored yet
            sample_rate: Audio sample rate
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
        """
        self.audio_path = Path(audio_path)
        self.store = store
        self.permission_prompt = permission_prompt
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = pyaudio.paInt16

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.total_chunks = 0
        self._level = SILENCE_FLOOR_DB

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None
        self._wave_file: Optional[wave.Wave_write] = None

    def request_microphone_permission(self) -> bool:
        """Return the stored decision, asking only if none was ever made."""
        decision = self.store.get_string(MICROPHONE_PERMISSION_KEY)
        if decision == PERMISSION_GRANTED:
            return True
        if decision == PERMISSION_DENIED:
            logger.warning("[Audio] Microphone access has been denied.")
            return False

        allowed = self.permission_prompt() if self.permission_prompt else True
        self.store.set(MICROPHONE_PERMISSION_KEY, PERMISSION_GRANTED if allowed else PERMISSION_DENIED)
        if not allowed:
            logger.warning("[Audio] Microphone access was denied.")
        return allowed

    def start(self) -> None:
        """Start recording into the audio slot in a background thread."""
        logger.info("[Audio] start() called")
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        # A failed start leaves nothing to submit
        self._discard_previous_recording()

        if not self.request_microphone_permission():
            return

        try:
            self._open_stream()
        except Exception as e:
            logger.error(f"[Audio] ERROR: Failed to open audio input: {e}")
            return

        try:
            self.audio_path.parent.mkdir(parents=True, exist_ok=True)
            self._wave_file = wave.open(str(self.audio_path), 'wb')
            self._wave_file.setnchannels(self.channels)
            self._wave_file.setsampwidth(self.pyaudio_instance.get_sample_size(self.format))
            self._wave_file.setframerate(self.sample_rate)
        except Exception as e:
            logger.error(f"[Audio] ERROR: Could not start recording: {e}")
            self._close_stream()
            return

        self.stop_event.clear()
        self.start_time = datetime.now()
        self.total_chunks = 0
        self._level = SILENCE_FLOOR_DB

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "RecorderThread"
        self.is_recording = True
        self.recording_thread.start()
        logger.info(f"[Audio] Recording started: {self.audio_path}")

    def _discard_previous_recording(self) -> None:
        try:
            self.audio_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"[Audio] Could not remove previous recording: {e}")

    def stop(self) -> None:
        """Stop recording and finalize the audio file, keeping the device reserved."""
        logger.info(f"[Audio] stop() called, isRecording: {self.is_recording}")
        if not self.is_recording:
            logger.warning("No recording in progress")
            return

        self.stop_event.set()
        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self._close_stream()
        if self._wave_file is not None:
            self._wave_file.close()
            self._wave_file = None

        self.is_recording = False
        self._level = SILENCE_FLOOR_DB
        logger.info(f"[Audio] Recording stopped. Total chunks: {self.total_chunks}")

    def release(self) -> None:
        """Stop any recording and give the audio device back."""
        if self.is_recording:
            self.stop()
        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
            logger.info("[Audio] Audio device released")

    def get_current_level(self) -> float:
        """Most recent level in dBFS; the floor when not capturing."""
        if not self.is_recording:
            return SILENCE_FLOOR_DB
        return self._level

    def get_recording_stats(self) -> AudioStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.start_time and self.is_recording:
            duration = (datetime.now() - self.start_time).total_seconds()

        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=self.total_chunks,
            current_level=self.get_current_level(),
        )

    def _open_stream(self) -> None:
        if self.pyaudio_instance is None:
            self.pyaudio_instance = pyaudio.PyAudio()
        self.stream = self.pyaudio_instance.open(
            format=self.format,
            channels=self.channels,
            rate=self.sample_rate,
            input=True,
            frames_per_buffer=self.chunk_size,
        )
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")

    def _close_stream(self) -> None:
        if self.stream is None:
            return
        try:
            self.stream.stop_stream()
            self.stream.close()
        except OSError as e:
            logger.warning(f"Error closing audio stream: {e}")
        self.stream = None

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        while not self.stop_event.is_set():
            try:
                chunk = self.stream.read(self.chunk_size, exception_on_overflow=False)
            except OSError as e:
                logger.error(f"[Audio] ERROR: Reading from microphone failed: {e}")
                break
            self._wave_file.writeframes(chunk)
            self._level = compute_level(chunk)
            self.total_chunks += 1
