"""Unit tests for NotificationCenter."""

import socket
import threading
import pytest
from pathlib import Path

from whisperer.bridge.notifications import NotificationCenter
from whisperer.models.events import NotificationEvent

DELIVERY_TIMEOUT = 2.0


@pytest.fixture
def notify_dir(temp_data_dir):
    return str(Path(temp_data_dir) / "notify")


@pytest.fixture
def centers(notify_dir):
    created = []

    def factory():
        center = NotificationCenter(notify_dir)
        created.append(center)
        return center

    yield factory
    for center in created:
        center.close()


@pytest.mark.unit
class TestNotificationCenter:

    def test_post_without_observers_does_not_raise(self, centers):
        sender = centers()
        sender.post_notification(NotificationEvent.AUDIO_READY)
        assert not sender.is_listening

    def test_observer_in_other_instance_is_woken(self, centers):
        host, keyboard = centers(), centers()
        received = threading.Event()
        keyboard.add_observer(NotificationEvent.TRANSCRIPTION_READY, received.set)

        host.post_notification(NotificationEvent.TRANSCRIPTION_READY)

        assert received.wait(DELIVERY_TIMEOUT)

    def test_only_matching_event_is_dispatched(self, centers):
        host, keyboard = centers(), centers()
        ready = threading.Event()
        running = threading.Event()
        keyboard.add_observer(NotificationEvent.TRANSCRIPTION_READY, ready.set)
        keyboard.add_observer(NotificationEvent.APP_RUNNING, running.set)

        host.post_notification(NotificationEvent.APP_RUNNING)

        assert running.wait(DELIVERY_TIMEOUT)
        assert not ready.is_set()

    def test_later_registration_replaces_handler(self, centers):
        host, keyboard = centers(), centers()
        first = threading.Event()
        second = threading.Event()
        keyboard.add_observer(NotificationEvent.AUDIO_READY, first.set)
        keyboard.add_observer(NotificationEvent.AUDIO_READY, second.set)

        host.post_notification(NotificationEvent.AUDIO_READY)

        assert second.wait(DELIVERY_TIMEOUT)
        assert not first.is_set()

    def test_instances_do_not_share_handlers(self, centers):
        """Handlers are per process, even when two live in one interpreter."""
        host, keyboard = centers(), centers()
        host_called = threading.Event()
        keyboard_called = threading.Event()
        host.add_observer(NotificationEvent.APP_RUNNING, host_called.set)
        keyboard.add_observer(NotificationEvent.TRANSCRIPTION_READY, keyboard_called.set)

        host.post_notification(NotificationEvent.TRANSCRIPTION_READY)

        assert keyboard_called.wait(DELIVERY_TIMEOUT)
        assert not host_called.is_set()

    def test_poster_receives_its_own_notification(self, centers):
        center = centers()
        received = threading.Event()
        center.add_observer(NotificationEvent.APP_RUNNING, received.set)

        center.post_notification(NotificationEvent.APP_RUNNING)

        assert received.wait(DELIVERY_TIMEOUT)

    def test_failing_handler_keeps_listener_alive(self, centers):
        host, keyboard = centers(), centers()
        recovered = threading.Event()

        def broken():
            raise RuntimeError("boom")

        keyboard.add_observer(NotificationEvent.AUDIO_READY, broken)
        keyboard.add_observer(NotificationEvent.APP_RUNNING, recovered.set)

        host.post_notification(NotificationEvent.AUDIO_READY)
        host.post_notification(NotificationEvent.APP_RUNNING)

        assert recovered.wait(DELIVERY_TIMEOUT)

    def test_stale_endpoint_is_removed(self, centers, notify_dir):
        sender = centers()
        stale_path = Path(notify_dir) / "99999-deadbeef.sock"
        dead = socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM)
        dead.bind(str(stale_path))
        dead.close()
        assert stale_path.exists()

        sender.post_notification(NotificationEvent.APP_RUNNING)

        assert not stale_path.exists()

    def test_path_too_long_for_socket_is_not_fatal(self, temp_data_dir):
        deep_dir = Path(temp_data_dir) / ("x" * 120) / "notify"
        center = NotificationCenter(str(deep_dir))
        try:
            center.add_observer(NotificationEvent.APP_RUNNING, lambda: None)

            assert not center.is_listening
            assert center.has_observer(NotificationEvent.APP_RUNNING)
            center.post_notification(NotificationEvent.APP_RUNNING)
        finally:
            center.close()

    def test_close_removes_endpoint(self, centers):
        center = centers()
        center.add_observer(NotificationEvent.APP_RUNNING, lambda: None)
        assert center.socket_path.exists()

        center.close()

        assert not center.socket_path.exists()
        assert not center.has_observer(NotificationEvent.APP_RUNNING)

    def test_remove_observer(self, centers):
        host, keyboard = centers(), centers()
        removed = threading.Event()
        kept = threading.Event()
        keyboard.add_observer(NotificationEvent.AUDIO_READY, removed.set)
        keyboard.add_observer(NotificationEvent.APP_RUNNING, kept.set)
        keyboard.remove_observer(NotificationEvent.AUDIO_READY)

        host.post_notification(NotificationEvent.AUDIO_READY)
        host.post_notification(NotificationEvent.APP_RUNNING)

        assert kept.wait(DELIVERY_TIMEOUT)
        assert not removed.is_set()


@pytest.mark.unit
def test_wire_names_round_trip():
    assert NotificationEvent.from_wire("com.whisperer.audio.ready") is NotificationEvent.AUDIO_READY
    assert NotificationEvent.from_wire("com.example.other") is None
    assert NotificationEvent.TRANSCRIPTION_READY.topic_name == "transcription_ready"
