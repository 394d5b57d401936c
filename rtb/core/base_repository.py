"""Base Repository - pooled-connection plumbing for table repositories.

Subclasses write SQL only:
    class PreferenceRepository(BaseRepository):
        def get_value(self, user_id, key):
            return self.query_one('SELECT ... WHERE user_id = %s AND pref_key = %s', (user_id, key))
"""

from contextlib import contextmanager

from database import get_db, get_cursor, release_db, dict_from_row


class BaseRepository:

    @contextmanager
    def _cursor(self):
        conn = get_db()
        try:
            yield conn, get_cursor(conn)
        finally:
            release_db(conn)

    def query_one(self, sql, params=None):
        """First row as a dict, or None."""
        with self._cursor() as (_, cursor):
            cursor.execute(sql, params or ())
            return dict_from_row(cursor.fetchone())

    def query_all(self, sql, params=None):
        """All rows as a list of dicts."""
        with self._cursor() as (_, cursor):
            cursor.execute(sql, params or ())
            return [dict_from_row(row) for row in cursor.fetchall()]

    def execute(self, sql, params=None):
        """Run a write and commit it. Returns the affected row count."""
        with self._cursor() as (conn, cursor):
            try:
                cursor.execute(sql, params or ())
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            return cursor.rowcount
