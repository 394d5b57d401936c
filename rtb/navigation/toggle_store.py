"""Persisted per-section open/closed flags.

PersistedToggleStore sits in front of a key-value StorageBackend and keeps an
in-memory mirror, so a read right after a write sees the new value without
another backend round trip. Backend failures never escape: reads fall back
to the caller's default, writes are logged and dropped.

Values are stored as the strings 'true' / 'false'.
"""

import logging
from typing import Dict, Optional

from .exceptions import StorageUnavailable

logger = logging.getLogger('rtb.navigation.toggle_store')

_TRUE = 'true'
_FALSE = 'false'


class StorageBackend:
    """Key-value storage contract: get(key) -> str | None, set(key, str)."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryBackend(StorageBackend):
    """Dict-backed storage. fail=True simulates an unavailable store."""

    def __init__(self, initial: Dict[str, str] = None, fail: bool = False):
        self.data = dict(initial or {})
        self.fail = fail

    def get(self, key: str) -> Optional[str]:
        if self.fail:
            raise StorageUnavailable(key, 'read', 'memory backend marked unavailable')
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail:
            raise StorageUnavailable(key, 'write', 'memory backend marked unavailable')
        self.data[key] = value


def parse_flag(raw: Optional[str]) -> Optional[bool]:
    """'true' -> True, 'false' -> False, anything else -> None."""
    if raw is None:
        return None
    value = raw.strip().lower()
    if value == _TRUE:
        return True
    if value == _FALSE:
        return False
    return None


class PersistedToggleStore:

    def __init__(self, backend: StorageBackend = None):
        self._backend = backend if backend is not None else MemoryBackend()
        self._mirror: Dict[str, bool] = {}

    def get(self, key: str, fallback: bool) -> bool:
        """Stored flag for key, or fallback when absent, unreadable or unavailable."""
        if key in self._mirror:
            return self._mirror[key]

        try:
            raw = self._backend.get(key)
        except StorageUnavailable as e:
            logger.warning(f'Toggle read fell back to {fallback}: {e}')
            return fallback

        value = parse_flag(raw)
        if value is None:
            if raw is not None:
                logger.warning(f'Ignoring unparseable toggle value {raw!r} for {key}')
            return fallback

        self._mirror[key] = value
        return value

    def set(self, key: str, value: bool) -> None:
        """Write through to the backend. The mirror is updated even if the write fails."""
        value = bool(value)
        self._mirror[key] = value
        try:
            self._backend.set(key, _TRUE if value else _FALSE)
        except StorageUnavailable as e:
            logger.warning(f'Toggle write dropped: {e}')
