"""Terminal screen of the host app."""

import time
import logging
from typing import Optional

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.text import Text

from ..audio.recorder import SILENCE_FLOOR_DB
from ..models.status import TranscriptionStatus
from ..services.host_app import HostApp
from .keyboard_input import KeyInputHandler, ENTER_KEYS

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Tap Record on the Whisperer keyboard to open this app and start recording.\n"
    "Stop the recording here, then return to your app: the text is inserted there.\n"
    "Add custom vocabulary with `whisperer vocab add` to improve accuracy."
)

STATUS_STYLES = {
    TranscriptionStatus.RECORDING: "bold red",
    TranscriptionStatus.TRANSCRIBING: "bold yellow",
    TranscriptionStatus.FINISHED: "bold green",
    TranscriptionStatus.ERROR: "bold red",
}


def normalized_level(level: float) -> float:
    """Map a dBFS reading to 0..1 for the meter."""
    clamped = max(SILENCE_FLOOR_DB, min(0.0, level))
    return (clamped - SILENCE_FLOOR_DB) / -SILENCE_FLOOR_DB


class HostScreen:
    """Live view of the host app bound to its status."""

    def __init__(self, app: HostApp, console: Optional[Console] = None):
        self.app = app
        self.console = console or Console()
        self.running = False
        self.input_handler: Optional[KeyInputHandler] = None

    def render(self) -> Panel:
        app = self.app
        if app.show_help:
            return Panel(Text(HELP_TEXT), title="Help", subtitle=Text("[h] close"), border_style="blue")

        if not app.opened_via_url:
            lines = [Text("Whisperer Keyboard", style="bold blue"),
                     Text("Use the keyboard to record and transcribe audio")]
            if not app.transcription.has_api_key():
                lines.insert(0, Text("No API key set - run `whisperer key set`", style="bold red"))
            return Panel(Group(*lines), subtitle=Text("[h] help  [q] quit"), border_style="blue")

        status = app.status
        parts = [Text(status.value.upper(), style=STATUS_STYLES[status])]
        if status is TranscriptionStatus.RECORDING:
            parts.append(ProgressBar(total=1.0, completed=normalized_level(app.recorder.get_current_level())))
        if status is TranscriptionStatus.FINISHED:
            if app.transcription.transcribed_text:
                parts.append(Text("Return to the app to insert the transcribed text", style="dim"))
                parts.append(Panel(Text(app.transcription.transcribed_text), title="Transcription"))
            elif app.transcription.last_error:
                parts.append(Text(f"Nothing transcribed: {app.transcription.last_error}", style="red"))

        button = f"[space] {app.button_label}" if app.button_enabled else app.button_label
        subtitle = f"{button}  [c] clear  [h] help  [q] quit"
        return Panel(Group(*parts), title="Whisperer", subtitle=Text(subtitle), border_style="green")

    def handle_key(self, key: str) -> bool:
        if key in ("q", "Q", "\x03"):
            self.running = False
            return False
        if key == " " or key in ENTER_KEYS:
            if self.app.opened_via_url:
                self.app.handle_button_tap()
        elif key == "c":
            self.app.handle_clear_tap()
        elif key == "h":
            self.app.show_help = not self.app.show_help
        else:
            logger.debug(f"Unhandled key: {key!r}")
        return True

    def run(self) -> None:
        self.running = True
        self.app.on_foreground()
        self.input_handler = KeyInputHandler(self.handle_key)
        self.input_handler.start()
        try:
            with Live(self.render(), console=self.console, refresh_per_second=10) as live:
                while self.running:
                    live.update(self.render())
                    time.sleep(0.1)
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        finally:
            self.running = False
            self.input_handler.stop()
