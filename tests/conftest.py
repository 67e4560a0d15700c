"""Pytest configuration and fixtures for Whisperer tests."""

import pytest
import time
import asyncio
import tempfile
import threading
import logging
from pathlib import Path
from typing import Optional
from unittest.mock import Mock, patch

import numpy as np
from aiohttp import web

from whisperer.bridge.notifications import NotificationCenter
from whisperer.bridge.transcription_bridge import TranscriptionBridge
from whisperer.storage.secrets import SecretStore, OPENAI_API_KEY
from whisperer.storage.shared_store import SharedStateStore
from whisperer.transcription.base import AbstractTranscriptionBackend, TranscriptionError


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without external resources")
    config.addinivalue_line("markers", "integration: tests wiring several components together")


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data.

    tempfile keeps the path short enough for Unix socket names.
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def store(temp_data_dir):
    return SharedStateStore(temp_data_dir)


@pytest.fixture
def make_bridge(temp_data_dir):
    """Build bridges over the same group directory, one per simulated process."""
    created = []

    def factory() -> TranscriptionBridge:
        bridge = TranscriptionBridge(
            SharedStateStore(temp_data_dir),
            NotificationCenter(str(Path(temp_data_dir) / "notify")),
        )
        created.append(bridge)
        return bridge

    yield factory
    for bridge in created:
        bridge.notifications.close()


@pytest.fixture
def bridge(make_bridge):
    return make_bridge()


@pytest.fixture
def secrets(temp_data_dir):
    return SecretStore(str(Path(temp_data_dir) / "private" / "secrets.json"))


@pytest.fixture
def secrets_with_key(secrets):
    secrets.set(OPENAI_API_KEY, "sk-test")
    return secrets


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # Generate 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    audio_data = (wave_data * 32767 * 0.5).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def mock_pyaudio(sample_audio_chunk):
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        def read(num_frames, exception_on_overflow=True):
            # Pace reads like a real device: ~10ms per chunk
            time.sleep(0.01)
            return sample_audio_chunk

        mock_stream.read.side_effect = read
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_sample_size.return_value = 2

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


class FakeTranscriptionBackend(AbstractTranscriptionBackend):
    """Backend returning canned text or failing, recording every call."""

    service_name = "fake"
    model = "fake-model"

    def __init__(self, text: str = "hello world", error: Optional[str] = None, delay: float = 0.0):
        self.text = text
        self.error = error
        self.delay = delay
        self.calls = []

    async def transcribe_audio(self, audio: bytes, api_key: str, prompt: Optional[str] = None) -> str:
        self.calls.append({"audio": audio, "api_key": api_key, "prompt": prompt})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise TranscriptionError(self.error)
        return self.text


@pytest.fixture
def fake_backend():
    return FakeTranscriptionBackend()


@pytest.fixture
def make_backend():
    return FakeTranscriptionBackend


class StubTranscriptionServer:
    """aiohttp server on its own loop thread standing in for the transcription API."""

    def __init__(self):
        self.requests = []
        self.response_status = 200
        self.response_json = {"text": "hello world"}
        self.raw_body: Optional[bytes] = None
        self.delay = 0.0
        self.url = ""
        self.loop = asyncio.new_event_loop()
        self.thread = threading.Thread(target=self.loop.run_forever, daemon=True)
        self.runner: Optional[web.AppRunner] = None

    async def _handle(self, request: web.Request) -> web.Response:
        parts = []
        reader = await request.multipart()
        async for part in reader:
            parts.append((part.name, part.filename, bytes(await part.read())))
        self.requests.append({
            "authorization": request.headers.get("Authorization"),
            "accept": request.headers.get("Accept"),
            "content_type": request.headers.get("Content-Type"),
            "parts": parts,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raw_body is not None:
            return web.Response(status=self.response_status, body=self.raw_body, content_type="text/plain")
        return web.json_response(self.response_json, status=self.response_status)

    async def _start(self) -> None:
        app = web.Application()
        app.router.add_post("/v1/audio/transcriptions", self._handle)
        self.runner = web.AppRunner(app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, "127.0.0.1", 0)
        await site.start()
        port = self.runner.addresses[0][1]
        self.url = f"http://127.0.0.1:{port}/v1/audio/transcriptions"

    def start(self) -> None:
        self.thread.start()
        asyncio.run_coroutine_threadsafe(self._start(), self.loop).result(timeout=5)

    def stop(self) -> None:
        asyncio.run_coroutine_threadsafe(self.runner.cleanup(), self.loop).result(timeout=5)
        self.loop.call_soon_threadsafe(self.loop.stop)
        self.thread.join(timeout=2)
        self.loop.close()


@pytest.fixture
def transcription_server():
    server = StubTranscriptionServer()
    server.start()
    yield server
    server.stop()
