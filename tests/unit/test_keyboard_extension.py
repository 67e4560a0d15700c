"""Unit tests for KeyboardExtension."""

import time
import pytest

from whisperer.bridge.intents import HELP_URL, RECORD_URL
from whisperer.models.events import NotificationEvent
from whisperer.services.keyboard_extension import BufferTextProxy, KeyboardExtension


@pytest.fixture
def opened_urls():
    return []


@pytest.fixture
def text_proxy():
    return BufferTextProxy("Dear team, ")


@pytest.fixture
def keyboard(make_bridge, text_proxy, opened_urls):
    def open_url(url):
        opened_urls.append(url)
        return True

    extension = KeyboardExtension(make_bridge(), text_proxy, open_url)
    yield extension
    extension.close()


def wait_for(condition, timeout=2.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()


@pytest.mark.unit
class TestKeyboardExtension:

    def test_appear_inserts_and_clears(self, keyboard, bridge, text_proxy):
        bridge.set_transcription("see you tomorrow")

        keyboard.view_did_appear()

        assert text_proxy.text == "Dear team, see you tomorrow"
        assert bridge.get_transcription() is None

    def test_appear_without_text_does_nothing(self, keyboard, text_proxy):
        assert keyboard.insert_pending_transcription() is None
        assert text_proxy.text == "Dear team, "

    def test_text_is_inserted_once(self, keyboard, bridge, text_proxy):
        bridge.set_transcription("once")

        keyboard.view_did_appear()
        keyboard.view_did_appear()

        assert text_proxy.text == "Dear team, once"
        assert keyboard.inserted == ["once"]

    def test_notification_triggers_insert(self, keyboard, bridge, text_proxy):
        keyboard.view_did_load()

        bridge.set_transcription("from the host")
        bridge.post_notification(NotificationEvent.TRANSCRIPTION_READY)

        assert wait_for(lambda: text_proxy.text.endswith("from the host"))
        assert wait_for(lambda: bridge.get_transcription() is None)

    def test_host_activity_follows_signals(self, keyboard, bridge):
        keyboard.view_did_load()

        bridge.set_app_running(True)
        assert wait_for(lambda: keyboard.host_activity == "recording")

        bridge.post_notification(NotificationEvent.AUDIO_READY)
        assert wait_for(lambda: keyboard.host_activity == "transcribing")

    def test_record_and_help_open_host(self, keyboard, opened_urls):
        keyboard.handle_record_tap()
        keyboard.handle_help_tap()

        assert opened_urls == [RECORD_URL, HELP_URL]

    def test_return_and_backspace(self, keyboard, text_proxy):
        keyboard.handle_return_tap()
        assert text_proxy.text == "Dear team, \n"

        keyboard.handle_backspace_tap()
        keyboard.handle_backspace_tap()
        assert text_proxy.text == "Dear team,"
