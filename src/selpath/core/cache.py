"""Thread-safe memo of compiled CSS selectors, with optional JSON persistence."""

import json
import logging
import os
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class CompiledCache:
    """Maps cache keys to compiled XPath strings.

    Entries are never evicted. Every operation takes the same re-entrant lock,
    so a get-or-compile sequence is atomic with respect to other threads.

    Attributes:
        hits: Number of lookups answered from the cache
        misses: Number of lookups that had to compile

    """

    def __init__(self, entries: dict[str, str] | None = None):
        """Initialize the cache.

        Args:
            entries: Optional starting contents. Defaults to an empty cache.

        """
        self._lock = threading.RLock()
        self._entries: dict[str, str] = dict(entries or {})
        self._initialized = bool(self._entries)
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, xpath: str) -> None:
        with self._lock:
            self._entries[key] = xpath
            self._initialized = True

    def get_or_compile(self, key: str, factory: Callable[[], str]) -> str:
        """Return the cached value for ``key``, compiling and storing it on a miss.

        Args:
            key: Cache key
            factory: Called with no arguments to produce the value on a miss

        Returns:
            The compiled XPath string.

        """
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self.hits += 1
                return cached
            self.misses += 1
            xpath = factory()
            self._entries[key] = xpath
            self._initialized = True
            return xpath

    def get_all(self) -> dict[str, str]:
        """Return a snapshot copy of every entry."""
        with self._lock:
            return dict(self._entries)

    def replace_all(self, entries: dict[str, str]) -> None:
        """Replace the whole cache with ``entries``."""
        with self._lock:
            self._entries = dict(entries)
            self._initialized = True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def is_initialized(self) -> bool:
        with self._lock:
            return self._initialized

    def initialize(self) -> None:
        with self._lock:
            self._initialized = True

    def reset(self) -> None:
        """Clear the cache and mark it uninitialized."""
        with self._lock:
            self.clear()
            self._initialized = False

    @property
    def stats(self) -> dict[str, int]:
        with self._lock:
            return {'hits': self.hits, 'misses': self.misses, 'size': len(self._entries)}

    def save(self, path: str) -> str:
        """Write the cache to a JSON file.

        Args:
            path: Destination file, parent directories are created as needed

        Returns:
            Path to the saved file.

        """
        entries = self.get_all()
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(entries, f, indent=2, ensure_ascii=False)

        logger.debug('Saved %d compiled selectors to %s', len(entries), path)
        return path

    def load(self, path: str) -> bool:
        """Merge entries from a JSON file written by ``save``.

        Args:
            path: File to read

        Returns:
            True if the file was read, False if it is missing or not a valid cache file.

        """
        if not os.path.exists(path):
            return False

        try:
            with open(path, encoding='utf-8') as f:
                data: Any = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning('Could not read cache file %s: %s', path, e)
            return False

        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            logger.warning('Ignoring cache file %s: expected an object of strings', path)
            return False

        with self._lock:
            self._entries.update({str(key): value for key, value in data.items()})
            self._initialized = True
        logger.debug('Loaded %d compiled selectors from %s', len(data), path)
        return True
