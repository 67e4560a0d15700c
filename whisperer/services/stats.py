"""Local usage statistics kept in the shared store."""

import logging

from ..storage.shared_store import SharedStateStore

logger = logging.getLogger(__name__)

TRANSCRIPTION_COUNT_KEY = "stats_transcription_count"
WORD_COUNT_KEY = "stats_word_count"


def count_words(text: str) -> int:
    return len(text.split())


class StatsManager:
    """Counts transcription requests and transcribed words."""

    def __init__(self, store: SharedStateStore):
        self.store = store

    def increment_transcription_count(self) -> None:
        self.store.set(TRANSCRIPTION_COUNT_KEY, self.get_transcription_count() + 1)

    def get_transcription_count(self) -> int:
        return self.store.get_int(TRANSCRIPTION_COUNT_KEY)

    def add_words_from_text(self, text: str) -> None:
        self.store.set(WORD_COUNT_KEY, self.get_word_count() + count_words(text))

    def get_word_count(self) -> int:
        return self.store.get_int(WORD_COUNT_KEY)

    def reset_stats(self) -> None:
        self.store.remove(TRANSCRIPTION_COUNT_KEY)
        self.store.remove(WORD_COUNT_KEY)
        logger.info("Statistics reset")
