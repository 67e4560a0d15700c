"""Audio capture module."""

from .recorder import Recorder, compute_level, SILENCE_FLOOR_DB

__all__ = [
    'Recorder',
    'compute_level',
    'SILENCE_FLOOR_DB',
]
