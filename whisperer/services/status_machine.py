"""Single source of truth for the transcription status."""

import logging
import threading
from typing import Callable

from pubsub import pub

from ..models.status import TranscriptionStatus

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    TranscriptionStatus.RECORDING: {
        TranscriptionStatus.RECORDING,
        TranscriptionStatus.TRANSCRIBING,
        TranscriptionStatus.ERROR,
    },
    TranscriptionStatus.TRANSCRIBING: {
        TranscriptionStatus.FINISHED,
        TranscriptionStatus.ERROR,
    },
    TranscriptionStatus.FINISHED: {TranscriptionStatus.RECORDING},
    TranscriptionStatus.ERROR: {TranscriptionStatus.RECORDING},
}


class InvalidStatusTransition(ValueError):
    """Raised for a status change the lifecycle does not allow."""


class StatusMachine:
    """Holds the current status and publishes every change on a pypubsub topic.

    Listeners are called with ``status`` and ``previous`` keyword arguments.
    """

    def __init__(self, topic: str = "transcription_status"):
        self.topic = topic
        self._status = TranscriptionStatus.RECORDING
        self._lock = threading.Lock()

    @property
    def status(self) -> TranscriptionStatus:
        return self._status

    def transition(self, new_status: TranscriptionStatus) -> None:
        with self._lock:
            previous = self._status
            if new_status not in ALLOWED_TRANSITIONS[previous]:
                raise InvalidStatusTransition(
                    f"Cannot go from {previous.value} to {new_status.value}")
            self._status = new_status

        logger.info(f"Status: {previous.value} -> {new_status.value}")
        pub.sendMessage(self.topic, status=new_status, previous=previous)

    def subscribe(self, listener: Callable[..., None]) -> None:
        pub.subscribe(listener, self.topic)

    def unsubscribe(self, listener: Callable[..., None]) -> None:
        pub.unsubscribe(listener, self.topic)
