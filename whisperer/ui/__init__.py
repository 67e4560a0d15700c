"""Terminal screens for the host app and the keyboard."""

from .host_screen import HostScreen
from .keyboard_screen import KeyboardScreen

__all__ = [
    "HostScreen",
    "KeyboardScreen",
]
