"""
Outcome classification: maps the pipeline's terminal state to the
caller-facing Outcome envelope.
"""

from typing import NamedTuple, Optional

from .constants import ConfigDefaults, OutcomeCodes, OutcomeMessages
from .error_handler import ErrorCategory, VerificationError, classify_error
from .models import ExtractionResult, Outcome, Verdict


class OutcomeRule(NamedTuple):
    status: int
    code: OutcomeCodes
    should_retry: bool
    retry_after: Optional[int]
    message: Optional[str]  # None: use the classified error's message


OUTCOME_RULES = {
    ErrorCategory.PROOF_UNAVAILABLE: OutcomeRule(404, OutcomeCodes.PROOF_UNAVAILABLE, False, None,
                                                 OutcomeMessages.PROOF_UNAVAILABLE),
    ErrorCategory.RATE_LIMITED: OutcomeRule(429, OutcomeCodes.RATE_LIMITED, True,
                                            ConfigDefaults.RATE_LIMIT_RETRY_AFTER, OutcomeMessages.RATE_LIMITED),
    ErrorCategory.TIMEOUT_ERROR: OutcomeRule(504, OutcomeCodes.TIMEOUT, True, None, OutcomeMessages.TIMEOUT),
    ErrorCategory.SERVICE_UNREACHABLE: OutcomeRule(502, OutcomeCodes.SERVICE_UNREACHABLE, False, None,
                                                   OutcomeMessages.SERVICE_UNREACHABLE),
    ErrorCategory.MALFORMED_EXTRACTION: OutcomeRule(502, OutcomeCodes.MALFORMED_EXTRACTION, False, None,
                                                    OutcomeMessages.MALFORMED_EXTRACTION),
    ErrorCategory.CONFIGURATION_ERROR: OutcomeRule(500, OutcomeCodes.INTERNAL_ERROR, False, None, None),
    ErrorCategory.UNKNOWN_ERROR: OutcomeRule(500, OutcomeCodes.INTERNAL_ERROR, False, None, None),
}


def build_success_outcome(verdict: Verdict, extraction: ExtractionResult) -> Outcome:
    """A completed pipeline run, whatever the business verdict."""
    code = OutcomeCodes.SUCCESS if verdict.verified else OutcomeCodes.VERIFICATION_FAILED
    return Outcome(
        status=200,
        ok=True,
        code=code.value,
        message=verdict.notes,
        should_retry=False,
        retry_after_seconds=None,
        verified=verdict.verified,
        tolerance=verdict.tolerance,
        difference=verdict.difference,
        notes=verdict.notes,
        extracted_value=extraction.value,
        extracted_km=verdict.extracted_km,
        extracted_calories=verdict.extracted_calories,
        extracted_date=extraction.date,
        confidence=extraction.confidence,
        extraction_notes=extraction.notes or None,
    )


def build_error_outcome(error: BaseException, context: str = "verification") -> Outcome:
    """
    Classify a failure into an Outcome. Total: every exception maps to a rule.

    Args:
        error: The exception that ended the attempt
        context: Where the failure happened (used in internal error messages)
    """
    classified: VerificationError = classify_error(error, context)
    rule = OUTCOME_RULES.get(classified.category, OUTCOME_RULES[ErrorCategory.UNKNOWN_ERROR])
    retry_after = classified.retry_delay if classified.retry_delay is not None else rule.retry_after

    return Outcome(
        status=rule.status,
        ok=False,
        code=rule.code.value,
        message=rule.message or classified.message,
        should_retry=rule.should_retry,
        retry_after_seconds=retry_after if rule.should_retry else None,
    )
