"""Sidebar preference repository.

Per-user key-value rows backing PersistedToggleStore when
NAV_STORAGE_BACKEND=postgres.
"""

import logging
from typing import Dict, Optional

import psycopg2

from core.base_repository import BaseRepository
from navigation.exceptions import StorageUnavailable
from navigation.toggle_store import StorageBackend

logger = logging.getLogger('rtb.navigation.repository')


class PreferenceRepository(BaseRepository):

    def get_value(self, user_id: str, key: str) -> Optional[str]:
        row = self.query_one('''
            SELECT pref_value FROM sidebar_preferences
            WHERE user_id = %s AND pref_key = %s
        ''', (user_id, key))
        return row['pref_value'] if row else None

    def set_value(self, user_id: str, key: str, value: str) -> bool:
        """Insert or overwrite one preference row."""
        return self.execute('''
            INSERT INTO sidebar_preferences (user_id, pref_key, pref_value)
            VALUES (%s, %s, %s)
            ON CONFLICT (user_id, pref_key)
            DO UPDATE SET pref_value = EXCLUDED.pref_value, updated_at = CURRENT_TIMESTAMP
        ''', (user_id, key, value)) > 0

    def get_all(self, user_id: str) -> Dict[str, str]:
        rows = self.query_all('''
            SELECT pref_key, pref_value FROM sidebar_preferences
            WHERE user_id = %s
            ORDER BY pref_key
        ''', (user_id,))
        return {row['pref_key']: row['pref_value'] for row in rows}

    def delete_all(self, user_id: str) -> int:
        return self.execute('DELETE FROM sidebar_preferences WHERE user_id = %s', (user_id,))


class UserPreferenceBackend(StorageBackend):
    """StorageBackend scoped to one user. Database errors become StorageUnavailable."""

    def __init__(self, user_id: str, repository: PreferenceRepository = None):
        self.user_id = user_id
        self._repo = repository or PreferenceRepository()

    def get(self, key: str) -> Optional[str]:
        try:
            return self._repo.get_value(self.user_id, key)
        except psycopg2.Error as e:
            raise StorageUnavailable(key, 'read', str(e)) from e

    def set(self, key: str, value: str) -> None:
        try:
            self._repo.set_value(self.user_id, key, value)
        except psycopg2.Error as e:
            raise StorageUnavailable(key, 'write', str(e)) from e
