"""Unit tests for StatusMachine."""

import pytest

from whisperer.models.status import TranscriptionStatus
from whisperer.services.status_machine import StatusMachine, InvalidStatusTransition

RECORDING = TranscriptionStatus.RECORDING
TRANSCRIBING = TranscriptionStatus.TRANSCRIBING
FINISHED = TranscriptionStatus.FINISHED
ERROR = TranscriptionStatus.ERROR


@pytest.mark.unit
class TestStatusMachine:

    def test_initial_status_is_recording(self):
        assert StatusMachine().status is RECORDING

    @pytest.mark.parametrize("path", [
        [TRANSCRIBING, FINISHED, RECORDING],
        [TRANSCRIBING, ERROR, RECORDING],
        [ERROR, RECORDING],
        [RECORDING],
    ])
    def test_allowed_paths(self, path):
        machine = StatusMachine()
        for status in path:
            machine.transition(status)
        assert machine.status is path[-1]

    @pytest.mark.parametrize("path, illegal", [
        ([], FINISHED),
        ([TRANSCRIBING], RECORDING),
        ([TRANSCRIBING], TRANSCRIBING),
        ([TRANSCRIBING, FINISHED], TRANSCRIBING),
        ([ERROR], FINISHED),
    ])
    def test_illegal_transitions_raise(self, path, illegal):
        machine = StatusMachine()
        for status in path:
            machine.transition(status)

        with pytest.raises(InvalidStatusTransition):
            machine.transition(illegal)

    def test_changes_are_published(self):
        machine = StatusMachine(topic="test_status_published")
        seen = []

        def listener(status, previous):
            seen.append((previous, status))

        machine.subscribe(listener)
        try:
            machine.transition(TRANSCRIBING)
            machine.transition(FINISHED)
        finally:
            machine.unsubscribe(listener)

        assert seen == [(RECORDING, TRANSCRIBING), (TRANSCRIBING, FINISHED)]

    def test_terminal_states(self):
        assert FINISHED.is_terminal and ERROR.is_terminal
        assert not RECORDING.is_terminal and not TRANSCRIBING.is_terminal
