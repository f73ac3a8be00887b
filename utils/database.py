"""
Database configuration and connection management.
Provides environment-isolated SQLite connections and the claims schema.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Optional

from utils.config import config

logger = logging.getLogger(__name__)

CLAIMS_TABLE = "claims"


def create_claims_schema(conn: sqlite3.Connection) -> None:
    """Create the claims table if it does not exist yet."""
    conn.execute(f'''
        CREATE TABLE IF NOT EXISTS {CLAIMS_TABLE} (
            id TEXT PRIMARY KEY,
            requester_id TEXT NOT NULL,
            league_id TEXT,
            claimed_value INTEGER NOT NULL DEFAULT 0,
            claimed_date TEXT,
            proof_path TEXT NOT NULL,

            -- Verification annotation (overwritten on every attempt)
            verified BOOLEAN,
            tolerance_used INTEGER,
            extracted_km REAL,
            extracted_calories REAL,
            verification_notes TEXT,
            verified_at TIMESTAMP,

            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')
    conn.execute(f'CREATE INDEX IF NOT EXISTS idx_claims_requester ON {CLAIMS_TABLE}(requester_id)')
    conn.commit()


def get_db_connection(db_path: Optional[str] = None, timeout: float = 30.0) -> sqlite3.Connection:
    """
    Open a connection to the claims database, creating the schema on first use.

    Args:
        db_path: Explicit database path; defaults to the environment's database
        timeout: SQLite busy timeout in seconds

    Returns:
        Connection with Row factory enabled
    """
    path = db_path or config.get_database_path()
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    conn = sqlite3.connect(path, timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    create_claims_schema(conn)
    return conn


@contextmanager
def get_db_connection_context(db_path: Optional[str] = None, timeout: float = 30.0):
    """
    Context manager for database connections.

    Rolls back on error and always closes the connection.
    """
    conn = None
    try:
        conn = get_db_connection(db_path, timeout)
        yield conn
    except Exception:
        if conn:
            conn.rollback()
        raise
    finally:
        if conn:
            conn.close()


def cleanup_test_database(db_path: Optional[str] = None) -> None:
    """Remove the testing database file if it exists."""
    path = db_path or config.get_database_path()
    if os.path.exists(path):
        try:
            os.remove(path)
            logger.info(f"🗑️  Cleaned up test database: {os.path.basename(path)}")
        except OSError as e:
            logger.warning(f"⚠️  Could not remove test database {path}: {e}")
