"""Terminal stand-in for the keyboard extension."""

import time
import logging
from typing import Optional

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ..services.keyboard_extension import BufferTextProxy, KeyboardExtension
from .keyboard_input import KeyInputHandler, ENTER_KEYS, BACKSPACE_KEYS

logger = logging.getLogger(__name__)


class KeyboardScreen:
    """Shows the focused text buffer with record / return / backspace / help keys."""

    def __init__(self, keyboard: KeyboardExtension, text_proxy: BufferTextProxy,
                 console: Optional[Console] = None):
        self.keyboard = keyboard
        self.text_proxy = text_proxy
        self.console = console or Console()
        self.running = False

    def render(self) -> Panel:
        body = [Text(self.text_proxy.text + "▏")]
        if self.keyboard.host_activity:
            body.append(Text(f"host: {self.keyboard.host_activity}", style="dim"))
        return Panel(
            Group(*body),
            title="Whisperer Keyboard",
            subtitle=Text("[r] record  [enter] return  [backspace] delete  [?] help  [q] quit"),
        )

    def handle_key(self, key: str) -> bool:
        if key in ("q", "\x03"):
            self.running = False
            return False
        if key == "r":
            self.keyboard.handle_record_tap()
        elif key == "?":
            self.keyboard.handle_help_tap()
        elif key in ENTER_KEYS:
            self.keyboard.handle_return_tap()
        elif key in BACKSPACE_KEYS:
            self.keyboard.handle_backspace_tap()
        elif key == "a":
            # Re-check the store the way the extension does when it reappears
            self.keyboard.view_did_appear()
        return True

    def run(self) -> None:
        self.running = True
        self.keyboard.view_did_load()
        self.keyboard.view_did_appear()
        handler = KeyInputHandler(self.handle_key)
        handler.start()
        try:
            with Live(self.render(), console=self.console, refresh_per_second=10) as live:
                while self.running:
                    live.update(self.render())
                    time.sleep(0.1)
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        finally:
            self.running = False
            handler.stop()
