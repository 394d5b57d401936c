"""Database schema initialization.

CREATE TABLE / CREATE INDEX statements for the tables the sidebar service
reads and writes. Called by database.init_db().
"""


def create_schema(conn, cursor):
    """Create the profile and sidebar preference tables.

    Args:
        conn: Database connection (for commit/rollback)
        cursor: Database cursor from get_cursor(conn)
    """
    # Profiles are owned by the auth backend; only the columns the sidebar reads.
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS profiles (
            id TEXT PRIMARY KEY,
            email TEXT NOT NULL UNIQUE,
            name TEXT,
            username TEXT,
            position TEXT,
            role TEXT,
            department TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # One row per (user, section storage key), value is 'true' / 'false'
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS sidebar_preferences (
            user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            pref_key TEXT NOT NULL,
            pref_value TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (user_id, pref_key)
        )
    ''')

    cursor.execute('''
        CREATE INDEX IF NOT EXISTS idx_sidebar_preferences_user
        ON sidebar_preferences(user_id)
    ''')

    conn.commit()
