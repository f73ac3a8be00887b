"""
Database operations for claim records.
"""

import logging
from datetime import datetime
from typing import Optional, Dict, Any, Protocol

from utils.database import get_db_connection_context, CLAIMS_TABLE
from .error_handler import ClaimNotFoundError
from .logging_config import get_logger

VERIFICATION_FIELDS = ('verified', 'tolerance_used', 'extracted_km', 'extracted_calories', 'verification_notes')


class ClaimRecordStoreProtocol(Protocol):
    """Protocol for the durable claim record store."""
    def update_verification_fields(self, claim_id: str, fields: Dict[str, Any]) -> None:
        ...


class ClaimRecordRepository:
    """
    Repository for claim records stored in SQLite.

    The verification fields are overwritten as a whole on every attempt.
    """

    def __init__(self, db_path: Optional[str] = None, timeout: float = 30.0,
                 logger: Optional[logging.Logger] = None):
        """
        Args:
            db_path: Database path; defaults to the environment's database
            timeout: Database connection timeout in seconds
        """
        self.db_path = db_path
        self.timeout = timeout
        self.logger = logger or get_logger('repository')

    def _get_connection(self):
        return get_db_connection_context(self.db_path, self.timeout)

    def create_claim(self, claim_id: str, requester_id: str, proof_path: str,
                     claimed_value: int = 0, claimed_date: Optional[str] = None,
                     league_id: Optional[str] = None) -> None:
        """Insert a claim record (used by callers seeding the store and by tests)."""
        with self._get_connection() as conn:
            conn.execute(f'''
                INSERT INTO {CLAIMS_TABLE}
                (id, requester_id, league_id, claimed_value, claimed_date, proof_path)
                VALUES (?, ?, ?, ?, ?, ?)
            ''', (claim_id, requester_id, league_id, claimed_value, claimed_date, proof_path))
            conn.commit()

    def update_verification_fields(self, claim_id: str, fields: Dict[str, Any]) -> None:
        """
        Overwrite the verification fields of a claim record (fail-fast, no retries).

        Args:
            claim_id: Claim record id
            fields: Values for verified, tolerance_used, extracted_km,
                extracted_calories and verification_notes; missing keys are written as NULL

        Raises:
            ValueError: If fields contains unknown keys
            ClaimNotFoundError: If no record matches claim_id
            sqlite3.Error: If the database operation fails
        """
        unknown = set(fields) - set(VERIFICATION_FIELDS)
        if unknown:
            raise ValueError(f"Unknown verification fields: {', '.join(sorted(unknown))}")

        values = [fields.get(name) for name in VERIFICATION_FIELDS]
        assignments = ", ".join(f"{name} = ?" for name in VERIFICATION_FIELDS)

        with self._get_connection() as conn:
            cursor = conn.execute(
                f"UPDATE {CLAIMS_TABLE} SET {assignments}, verified_at = ? WHERE id = ?",
                (*values, datetime.now().isoformat(), claim_id)
            )
            if cursor.rowcount == 0:
                raise ClaimNotFoundError(f"Claim not found: {claim_id}")
            conn.commit()

    def get_by_id(self, claim_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a claim record by id.

        Returns:
            Dict of column values, or None when the claim does not exist
        """
        with self._get_connection() as conn:
            row = conn.execute(f"SELECT * FROM {CLAIMS_TABLE} WHERE id = ?", (claim_id,)).fetchone()

        if row is None:
            return None

        record = dict(row)
        if record.get('verified') is not None:
            record['verified'] = bool(record['verified'])
        return record
