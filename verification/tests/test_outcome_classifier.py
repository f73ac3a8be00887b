"""
Tests for outcome_classifier.py module.
"""

import asyncio

import pytest
from google.api_core import exceptions as google_exceptions

from verification.constants import OutcomeCodes, OutcomeMessages
from verification.error_handler import (
    ErrorCategory,
    ConfigurationError,
    ExtractionTimeoutError,
    MalformedExtractionError,
    ProofUnavailableError,
)
from verification.models import ExtractionResult, Verdict
from verification.outcome_classifier import OUTCOME_RULES, build_error_outcome, build_success_outcome

VERDICT_FIELDS = ('verified', 'tolerance', 'difference', 'notes', 'extracted_value', 'extracted_km',
                  'extracted_calories', 'extracted_date', 'confidence', 'extraction_notes')


class TestBuildSuccessOutcome:

    def test_verified(self):
        verdict = Verdict(verified=True, tolerance=300, difference=250, notes="Verification succeeded.",
                          extracted_km=7.4, extracted_calories=412)
        extraction = ExtractionResult(value=10250, distance_km=7.4, calories=412, date="2026-01-10",
                                      confidence="high", notes="Daily total.")

        outcome = build_success_outcome(verdict, extraction)

        assert outcome.status == 200
        assert outcome.ok is True
        assert outcome.code == "success"
        assert outcome.should_retry is False
        assert outcome.retry_after_seconds is None
        assert outcome.verified is True
        assert outcome.tolerance == 300
        assert outcome.difference == 250
        assert outcome.extracted_value == 10250
        assert outcome.extracted_date == "2026-01-10"
        assert outcome.confidence == "high"
        assert outcome.extraction_notes == "Daily total."
        assert outcome.message == outcome.notes == "Verification succeeded."

    def test_unverified_is_still_ok(self):
        verdict = Verdict(verified=False, tolerance=300, difference=None,
                          notes="Could not extract steps from screenshot.")

        outcome = build_success_outcome(verdict, ExtractionResult())

        assert outcome.status == 200
        assert outcome.ok is True
        assert outcome.code == "verification_failed"
        assert outcome.extraction_notes is None


class TestBuildErrorOutcome:

    @pytest.mark.parametrize("error,status,code,should_retry,retry_after", [
        (ProofUnavailableError("missing"), 404, "proof_unavailable", False, None),
        (google_exceptions.ResourceExhausted("quota"), 429, "rate_limited", True, 60),
        (ExtractionTimeoutError("slow"), 504, "timeout", True, None),
        (asyncio.TimeoutError(), 504, "timeout", True, None),
        (ConnectionError("refused"), 502, "service_unreachable", False, None),
        (MalformedExtractionError("bad json"), 502, "malformed_extraction", False, None),
        (ConfigurationError("GEMINI_API_KEY is not configured"), 500, "internal_error", False, None),
        (ValueError("boom"), 500, "internal_error", False, None),
    ])
    def test_classification_table(self, error, status, code, should_retry, retry_after):
        outcome = build_error_outcome(error)

        assert outcome.status == status
        assert outcome.ok is False
        assert outcome.code == code
        assert outcome.should_retry is should_retry
        assert outcome.retry_after_seconds == retry_after

    def test_failure_outcomes_carry_no_verdict(self):
        outcome = build_error_outcome(ExtractionTimeoutError("slow"))

        for field in VERDICT_FIELDS:
            assert getattr(outcome, field) is None

    def test_fixed_messages(self):
        assert build_error_outcome(Exception("429")).message == OutcomeMessages.RATE_LIMITED
        assert build_error_outcome(ExtractionTimeoutError("x")).message == OutcomeMessages.TIMEOUT

    def test_internal_error_uses_classified_message(self):
        outcome = build_error_outcome(ValueError("boom"), "claim verification")
        assert outcome.message == "Unknown error in claim verification: boom"

    def test_every_category_has_a_rule(self):
        assert set(OUTCOME_RULES) == set(ErrorCategory)

    def test_codes_are_known(self):
        known = {code.value for code in OutcomeCodes}
        assert all(rule.code.value in known for rule in OUTCOME_RULES.values())

    def test_to_dict(self):
        data = build_error_outcome(Exception("rate limit")).to_dict()

        assert data['status'] == 429
        assert data['code'] == "rate_limited"
        assert data['retry_after_seconds'] == 60
        assert data['verified'] is None
