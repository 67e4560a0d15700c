"""Key/value store shared by the host and keyboard processes."""

import os
import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class SharedStateStore:
    """Per-key JSON files inside the shared group directory.

    Every key lives in its own file and is replaced atomically, so writes to
    one key never clobber another and the last writer of a key wins. Reads go
    to disk each time, so the other process's latest write is always visible.
    Callers serialize structured values themselves.
    """

    def __init__(self, group_directory: str):
        """Initialize store rooted at the shared group directory.

        Args:
            group_directory: Directory visible to both processes
        """
        self.group_directory = Path(group_directory)
        self.defaults_dir = self.group_directory / "defaults"
        self.defaults_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"SharedStateStore initialized at: {self.defaults_dir}")

    def _key_path(self, key: str) -> Path:
        if not key or "/" in key or key.startswith("."):
            raise ValueError(f"Invalid key name: {key!r}")
        return self.defaults_dir / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when the key is absent."""
        path = self._key_path(key)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable value for key '{key}', treating as absent: {e}")
            return None

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under ``key``."""
        path = self._key_path(key)
        payload = json.dumps(value)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.defaults_dir)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

        logger.debug(f"Stored key '{key}'")

    def remove(self, key: str) -> None:
        """Remove ``key``; removing an absent key is a no-op."""
        try:
            self._key_path(key).unlink()
            logger.debug(f"Removed key '{key}'")
        except FileNotFoundError:
            pass

    def get_string(self, key: str) -> Optional[str]:
        value = self.get(key)
        return value if isinstance(value, str) else None

    def get_bool(self, key: str) -> bool:
        return self.get(key) is True

    def get_int(self, key: str) -> int:
        value = self.get(key)
        # bool is an int subclass; a flag is not a counter
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return 0
