"""
Unit tests for verification data models.
"""

import dataclasses

import pytest

from verification.models import ClaimContext, ExtractionResult, Outcome, Verdict


class TestClaimContext:

    def test_valid_claim(self):
        claim = ClaimContext(claimed_value=10000, proof_path="u/a.png", requester_id="u",
                             claimed_date="2026-01-10", league_id="l", claim_id="c")

        assert claim.is_auto_extract is False
        assert claim.claimed_date == "2026-01-10"

    def test_zero_means_auto_extract(self):
        assert ClaimContext(claimed_value=0, proof_path="u/a.png", requester_id="u").is_auto_extract is True

    @pytest.mark.parametrize("value", [-1, -0.5, "10000", None, True])
    def test_invalid_claimed_value(self, value):
        with pytest.raises(ValueError, match="claimed_value"):
            ClaimContext(claimed_value=value, proof_path="u/a.png", requester_id="u")

    @pytest.mark.parametrize("path", ["", "   "])
    def test_proof_path_required(self, path):
        with pytest.raises(ValueError, match="proof_path"):
            ClaimContext(claimed_value=1, proof_path=path, requester_id="u")

    @pytest.mark.parametrize("claimed_date", ["10/01/2026", "yesterday", "2026-13-01", "20260110", "2026-1-10"])
    def test_invalid_claimed_date(self, claimed_date):
        with pytest.raises(ValueError, match="claimed_date"):
            ClaimContext(claimed_value=1, proof_path="u/a.png", requester_id="u", claimed_date=claimed_date)

    def test_immutable(self):
        claim = ClaimContext(claimed_value=1, proof_path="u/a.png", requester_id="u")

        with pytest.raises(dataclasses.FrozenInstanceError):
            claim.claimed_value = 2


class TestExtractionResult:

    def test_empty(self):
        result = ExtractionResult.empty("raw")

        assert result.has_value is False
        assert result.raw_text == "raw"
        assert result.notes == ""

    def test_zero_is_a_value(self):
        assert ExtractionResult(value=0).has_value is True


class TestOutcome:

    def test_to_dict(self):
        outcome = Outcome(status=200, ok=True, code="success", message="ok", verified=True, tolerance=300,
                          difference=0, notes="ok")

        data = outcome.to_dict()

        assert data['status'] == 200
        assert data['verified'] is True
        assert data['extracted_value'] is None
        assert data['should_retry'] is False

    def test_verdict_is_frozen(self):
        verdict = Verdict(verified=True, tolerance=300, difference=0, notes="ok")

        with pytest.raises(dataclasses.FrozenInstanceError):
            verdict.verified = False
