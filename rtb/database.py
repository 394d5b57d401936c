"""RTB database module.

Connection pool and cursor helpers for the sidebar preference store.
Importing requires DATABASE_URL but does not connect: the pool is built by
the first get_db() call. app.py runs init_db() once at startup, since the
profiles table backs the login user loader whatever the sidebar storage is.
"""
import os
import time
import logging
import threading

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor


logger = logging.getLogger('rtb.database')

DATABASE_URL = os.environ.get('DATABASE_URL')

if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is required. Set it to your PostgreSQL connection string.")

POOL_MIN_CONN = int(os.environ.get('DB_POOL_MIN_CONN', '1'))
POOL_MAX_CONN = int(os.environ.get('DB_POOL_MAX_CONN', '4'))
POOL_GETCONN_TIMEOUT = int(os.environ.get('DB_POOL_TIMEOUT', '10'))
POOL_RETRY_INTERVAL = 0.05
CONNECT_RETRIES = 3
PING_CACHE_SECONDS = 5

_pool = None
_pool_lock = threading.Lock()
_last_ping_ok = 0.0


def _get_pool():
    global _pool
    with _pool_lock:
        if _pool is None:
            _pool = pool.ThreadedConnectionPool(
                POOL_MIN_CONN, POOL_MAX_CONN,
                dsn=DATABASE_URL,
                connect_timeout=5,
                keepalives=1,
                keepalives_idle=30,
            )
            logger.info(f'Preference pool ready ({POOL_MIN_CONN}-{POOL_MAX_CONN} connections)')
        return _pool


def _is_alive(conn) -> bool:
    try:
        with conn.cursor() as cur:
            cur.execute('SELECT 1')
        conn.rollback()
        return True
    except psycopg2.Error:
        return False


def _getconn_with_timeout(connections, timeout=None):
    """Borrow from the pool, waiting up to timeout seconds while it is exhausted.

    ThreadedConnectionPool.getconn() raises PoolError at once when every
    connection is out, so poll until one is handed back.
    """
    if timeout is None:
        timeout = POOL_GETCONN_TIMEOUT
    deadline = time.monotonic() + timeout

    while True:
        try:
            return connections.getconn()
        except pool.PoolError:
            if time.monotonic() >= deadline:
                raise psycopg2.OperationalError(
                    f'Connection pool exhausted, no connection freed within {timeout}s')
            time.sleep(POOL_RETRY_INTERVAL)


def get_db():
    """Borrow a live connection. Dead pooled connections are closed and replaced."""
    connections = _get_pool()
    for attempt in range(1, CONNECT_RETRIES + 1):
        conn = _getconn_with_timeout(connections)
        if _is_alive(conn):
            conn.autocommit = True
            return conn
        logger.warning(f'Dropping dead pooled connection (attempt {attempt}/{CONNECT_RETRIES})')
        connections.putconn(conn, close=True)

    raise psycopg2.OperationalError(f'No usable database connection after {CONNECT_RETRIES} attempts')


def release_db(conn):
    """Hand a connection back to the pool; broken ones are closed instead."""
    if conn is None or _pool is None:
        return
    try:
        if conn.closed:
            _pool.putconn(conn, close=True)
        else:
            conn.autocommit = False
            _pool.putconn(conn)
    except psycopg2.Error as e:
        logger.warning(f'Could not return connection to pool: {e}')


def get_cursor(conn):
    """Cursor yielding rows as dicts."""
    return conn.cursor(cursor_factory=RealDictCursor)


def ping_db() -> bool:
    """True when the database answers. A success is trusted for a few seconds."""
    global _last_ping_ok
    if time.time() - _last_ping_ok < PING_CACHE_SECONDS:
        return True

    try:
        conn = get_db()
    except psycopg2.Error as e:
        logger.warning(f'Database ping failed: {e}')
        _last_ping_ok = 0.0
        return False

    release_db(conn)
    _last_ping_ok = time.time()
    return True


def init_db():
    """Create the profiles and sidebar_preferences tables on first start."""
    conn = get_db()
    try:
        cursor = get_cursor(conn)
        cursor.execute("""
            SELECT EXISTS (
                SELECT FROM information_schema.tables
                WHERE table_schema = 'public' AND table_name = 'sidebar_preferences'
            )
        """)
        if cursor.fetchone()['exists']:
            logger.info('sidebar_preferences present, schema up to date')
            return

        from migrations.init_schema import create_schema
        create_schema(conn, cursor)
        conn.commit()
        logger.info('Sidebar schema created')
    finally:
        release_db(conn)


def dict_from_row(row):
    """Plain dict copy of a row; timestamps become ISO strings."""
    if row is None:
        return None
    return {
        key: value.isoformat() if hasattr(value, 'isoformat') else value
        for key, value in dict(row).items()
    }
