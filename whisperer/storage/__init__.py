"""Persistence shared between processes, plus the private credential store."""

from .shared_store import SharedStateStore
from .secrets import SecretStore, OPENAI_API_KEY

__all__ = [
    "SharedStateStore",
    "SecretStore",
    "OPENAI_API_KEY",
]
