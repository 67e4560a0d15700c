"""User-curated vocabulary hints."""

import json
import logging
from typing import List

from ..storage.shared_store import SharedStateStore

logger = logging.getLogger(__name__)

CUSTOM_VOCABULARY_KEY = "custom_vocabulary"


class VocabularyManager:
    """Ordered, duplicate-free term list persisted on every change."""

    def __init__(self, store: SharedStateStore):
        self.store = store

    def _load(self) -> List[str]:
        raw = self.store.get_string(CUSTOM_VOCABULARY_KEY)
        if raw is None:
            return []
        try:
            terms = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Stored vocabulary is not valid JSON, ignoring it: {e}")
            return []
        if not isinstance(terms, list):
            return []
        return [term for term in terms if isinstance(term, str)]

    def _save(self, terms: List[str]) -> None:
        self.store.set(CUSTOM_VOCABULARY_KEY, json.dumps(terms))

    def list(self) -> List[str]:
        """Terms in insertion order, blank entries dropped."""
        return [term for term in self._load() if term.strip()]

    def add(self, word: str) -> bool:
        """Append ``word``; empty or already present words are ignored."""
        word = word.strip()
        if not word:
            return False
        terms = self._load()
        if word in terms:
            logger.debug(f"Vocabulary already contains: {word}")
            return False
        terms.append(word)
        self._save(terms)
        logger.info(f"Added vocabulary term: {word}")
        return True

    def remove(self, index: int) -> bool:
        """Remove the term at ``index``; out-of-range indexes are ignored."""
        terms = self.list()
        if not 0 <= index < len(terms):
            return False
        removed = terms.pop(index)
        self._save(terms)
        logger.info(f"Removed vocabulary term: {removed}")
        return True
