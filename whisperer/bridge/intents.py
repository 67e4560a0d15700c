"""Custom URI scheme used by the keyboard to bring the host app forward."""

import sys
import logging
import subprocess
from enum import Enum
from typing import List, Optional
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

URL_SCHEME = "whisperer"
RECORD_URL = f"{URL_SCHEME}://"
HELP_URL = f"{URL_SCHEME}://help"


class OpenIntent(Enum):
    """What the host should do when opened through the URI scheme."""
    RECORD = "record"
    HELP = "help"


def parse_open_intent(url: str) -> Optional[OpenIntent]:
    """Map ``whisperer://`` to RECORD and ``whisperer://help`` to HELP.

    Any other scheme yields None. Unknown hosts on our scheme open and record,
    the same as the bare scheme.
    """
    parts = urlsplit(url)
    if parts.scheme.lower() != URL_SCHEME:
        logger.warning(f"Ignoring URL with foreign scheme: {url}")
        return None
    if parts.netloc.lower() == "help":
        return OpenIntent.HELP
    return OpenIntent.RECORD


class HostLauncher:
    """Opens the host app with a URL by starting ``whisperer host --url``."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path

    def build_command(self, url: str) -> List[str]:
        command = [sys.executable, "-m", "whisperer.main"]
        if self.config_path:
            command += ["--config", self.config_path]
        command += ["host", "--url", url]
        return command

    def __call__(self, url: str) -> bool:
        command = self.build_command(url)
        try:
            subprocess.Popen(command, start_new_session=True)
        except OSError as e:
            logger.error(f"[Keyboard] Failed to open URL {url}: {e}")
            return False
        logger.info(f"[Keyboard] Opened host app with: {url}")
        return True
