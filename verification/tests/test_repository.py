"""
Tests for ClaimRecordRepository.
"""

import sqlite3

import pytest

from verification.error_handler import ClaimNotFoundError
from verification.repository import ClaimRecordRepository


@pytest.fixture
def seeded_repository(repository):
    repository.create_claim("claim-1", "user-1", "user-1/2026-01-10.png",
                            claimed_value=10000, claimed_date="2026-01-10", league_id="league-1")
    return repository


class TestCreateAndGet:

    def test_create_claim(self, seeded_repository):
        record = seeded_repository.get_by_id("claim-1")

        assert record['requester_id'] == "user-1"
        assert record['league_id'] == "league-1"
        assert record['claimed_value'] == 10000
        assert record['claimed_date'] == "2026-01-10"
        assert record['proof_path'] == "user-1/2026-01-10.png"
        assert record['verified'] is None
        assert record['verified_at'] is None

    def test_get_missing_claim(self, repository):
        assert repository.get_by_id("nope") is None

    def test_duplicate_id_rejected(self, seeded_repository):
        with pytest.raises(sqlite3.IntegrityError):
            seeded_repository.create_claim("claim-1", "user-2", "other.png")


class TestUpdateVerificationFields:

    def test_update(self, seeded_repository):
        seeded_repository.update_verification_fields("claim-1", {
            'verified': True,
            'tolerance_used': 300,
            'extracted_km': 7.4,
            'extracted_calories': 412,
            'verification_notes': "Verification succeeded.",
        })

        record = seeded_repository.get_by_id("claim-1")
        assert record['verified'] is True
        assert record['tolerance_used'] == 300
        assert record['extracted_km'] == 7.4
        assert record['extracted_calories'] == 412
        assert record['verification_notes'] == "Verification succeeded."
        assert record['verified_at'] is not None

    def test_update_overwrites_previous_attempt(self, seeded_repository):
        seeded_repository.update_verification_fields("claim-1", {
            'verified': True, 'tolerance_used': 300, 'extracted_km': 7.4,
            'extracted_calories': 412, 'verification_notes': "first",
        })
        seeded_repository.update_verification_fields("claim-1", {
            'verified': False, 'tolerance_used': 300, 'verification_notes': "second",
        })

        record = seeded_repository.get_by_id("claim-1")
        assert record['verified'] is False
        assert record['extracted_km'] is None
        assert record['extracted_calories'] is None
        assert record['verification_notes'] == "second"

    def test_unknown_claim(self, repository):
        with pytest.raises(ClaimNotFoundError):
            repository.update_verification_fields("nope", {'verified': False})

    def test_unknown_field(self, seeded_repository):
        with pytest.raises(ValueError, match="claimed_value"):
            seeded_repository.update_verification_fields("claim-1", {'claimed_value': 1})

    def test_claim_fields_untouched(self, seeded_repository):
        seeded_repository.update_verification_fields("claim-1", {'verified': False})

        record = seeded_repository.get_by_id("claim-1")
        assert record['claimed_value'] == 10000
        assert record['proof_path'] == "user-1/2026-01-10.png"


def test_default_path_comes_from_config(monkeypatch, tmp_path):
    db_file = tmp_path / "env_claims.db"
    monkeypatch.setenv('DATABASE_PATH', str(db_file))

    repository = ClaimRecordRepository()
    repository.create_claim("claim-9", "user-9", "a.png")

    assert db_file.exists()
    assert repository.get_by_id("claim-9")['requester_id'] == "user-9"
