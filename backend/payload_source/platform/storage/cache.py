"""Cache stores for the sync state.

Values must be JSON-compatible (strings, numbers, lists, dicts).
"""

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

from payload_source.core.config import settings
from payload_source.core.logging import logger

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class MemoryCache:
    """Process-local cache; lost when the process exits."""

    def __init__(self):
        """Create an empty cache."""
        self._values: Dict[str, Any] = {}

    async def get(self, key: str) -> Optional[Any]:
        """Return the value for ``key`` or None."""
        return self._values.get(key)

    async def set(self, key: str, value: Any) -> None:
        """Store a round-tripped copy of ``value`` so later mutation cannot leak in."""
        self._values[key] = json.loads(json.dumps(value))


class FilesystemCache:
    """Cache that keeps one JSON file per key under a directory."""

    def __init__(self, base_path: Union[str, Path, None] = None):
        """Create the cache.

        Args:
            base_path: Directory for the cache files (defaults to CACHE_DIR/state)
        """
        self.base_path = Path(base_path or os.path.join(settings.CACHE_DIR, "state"))
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _resolve(self, key: str) -> Path:
        return self.base_path / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    async def get(self, key: str) -> Optional[Any]:
        """Return the value for ``key`` or None when absent or unreadable."""
        path = self._resolve(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)["value"]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable cache file {path}: {e}")
            return None

    async def set(self, key: str, value: Any) -> None:
        """Write ``value`` atomically (temp file + rename)."""
        path = self._resolve(key)
        tmp_path = path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({"key": key, "value": value}, f)
        os.replace(tmp_path, path)
