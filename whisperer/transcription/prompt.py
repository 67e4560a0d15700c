"""Vocabulary hint sent along with the audio."""

from typing import Optional, Sequence

PROMPT_PREFIX = "The following specialized terms are commonly used in this recording: "


def join_terms(terms: Sequence[str]) -> str:
    """Join terms as an English list: ``a``, ``a and b``, ``a, b, and c``."""
    if len(terms) == 1:
        return terms[0]
    if len(terms) == 2:
        return f"{terms[0]} and {terms[1]}"
    return f"{', '.join(terms[:-1])}, and {terms[-1]}"


def build_vocabulary_prompt(terms: Sequence[str]) -> Optional[str]:
    """Build the prompt sentence, or None when there is nothing to hint."""
    terms = [term for term in terms if term.strip()]
    if not terms:
        return None
    return f"{PROMPT_PREFIX}{join_terms(terms)}."
