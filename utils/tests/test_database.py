"""Unit tests for database module."""

import os
import shutil
import sqlite3
import tempfile
import unittest

from utils.database import (
    CLAIMS_TABLE,
    cleanup_test_database,
    create_claims_schema,
    get_db_connection,
    get_db_connection_context,
)


class TestDatabaseConnections(unittest.TestCase):
    """Test cases for connection helpers."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.temp_dir, 'nested', 'claims.db')

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_get_db_connection_creates_schema(self):
        conn = get_db_connection(self.db_path)
        try:
            tables = [row['name'] for row in conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table'")]
            self.assertIn(CLAIMS_TABLE, tables)
            self.assertIs(conn.row_factory, sqlite3.Row)
        finally:
            conn.close()

        self.assertTrue(os.path.exists(self.db_path))

    def test_schema_columns(self):
        with get_db_connection_context(self.db_path) as conn:
            columns = {row['name'] for row in conn.execute(f"PRAGMA table_info({CLAIMS_TABLE})")}

        self.assertTrue({
            'id', 'requester_id', 'league_id', 'claimed_value', 'claimed_date', 'proof_path',
            'verified', 'tolerance_used', 'extracted_km', 'extracted_calories',
            'verification_notes', 'verified_at', 'created_at',
        }.issubset(columns))

    def test_create_schema_is_idempotent(self):
        with get_db_connection_context(self.db_path) as conn:
            create_claims_schema(conn)
            create_claims_schema(conn)

    def test_context_rolls_back_on_error(self):
        with self.assertRaises(RuntimeError):
            with get_db_connection_context(self.db_path) as conn:
                conn.execute(f"INSERT INTO {CLAIMS_TABLE} (id, requester_id, proof_path) VALUES ('c1', 'u1', 'p')")
                raise RuntimeError("boom")

        with get_db_connection_context(self.db_path) as conn:
            count = conn.execute(f"SELECT COUNT(*) FROM {CLAIMS_TABLE}").fetchone()[0]
        self.assertEqual(count, 0)

    def test_context_commits(self):
        with get_db_connection_context(self.db_path) as conn:
            conn.execute(f"INSERT INTO {CLAIMS_TABLE} (id, requester_id, proof_path) VALUES ('c1', 'u1', 'p')")
            conn.commit()

        with get_db_connection_context(self.db_path) as conn:
            row = conn.execute(f"SELECT * FROM {CLAIMS_TABLE} WHERE id = 'c1'").fetchone()
        self.assertEqual(row['requester_id'], 'u1')
        self.assertEqual(row['claimed_value'], 0)

    def test_cleanup_test_database(self):
        get_db_connection(self.db_path).close()

        cleanup_test_database(self.db_path)

        self.assertFalse(os.path.exists(self.db_path))

    def test_cleanup_missing_database(self):
        cleanup_test_database(os.path.join(self.temp_dir, 'missing.db'))


if __name__ == '__main__':
    unittest.main()
