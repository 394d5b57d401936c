"""User Repository - read access to the profiles table."""
from typing import Optional, Dict, Any

from core.base_repository import BaseRepository


class UserRepository(BaseRepository):
    """Repository for profile lookups used by Flask-Login."""

    def get_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self.query_one('''
            SELECT id, email, name, username, position, role, department
            FROM profiles
            WHERE id = %s
        ''', (user_id,))