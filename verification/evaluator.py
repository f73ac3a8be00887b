"""
Evaluation engine: decides whether an extraction corroborates a claim.

Pure and deterministic. No I/O.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List

from .constants import Confidence, ConfigDefaults, TolerancePolicy, VerdictMessages
from .models import ClaimContext, ExtractionResult, Number, Verdict


def compute_tolerance(claimed_value: Number) -> int:
    """Relative band with an absolute floor: max(round(claim * 3%), 300)."""
    # Exact half-up rounding: float products like 10050 * 0.03 land just below .5
    relative = (Decimal(str(claimed_value)) * Decimal(str(TolerancePolicy.RATIO))).quantize(
        Decimal(1), rounding=ROUND_HALF_UP)
    return max(int(relative), TolerancePolicy.FLOOR)


def _format_value(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def evaluate_auto_extract(extraction: ExtractionResult, unit_label: str) -> Verdict:
    """No claim to compare: accept any positive reading."""
    verified = extraction.value is not None and extraction.value > 0

    if verified:
        notes = VerdictMessages.AUTO_EXTRACTED.format(value=_format_value(extraction.value), unit=unit_label)
    else:
        notes = VerdictMessages.COULD_NOT_EXTRACT.format(unit=unit_label)

    return Verdict(
        verified=verified,
        tolerance=0,
        difference=0 if extraction.value is not None else None,
        notes=notes,
        extracted_km=extraction.distance_km,
        extracted_calories=extraction.calories,
    )


def evaluate_claim(claim: ClaimContext, extraction: ExtractionResult, unit_label: str) -> Verdict:
    """Compare the extraction against the claimed value within the tolerance band."""
    tolerance = compute_tolerance(claim.claimed_value)
    extracted = extraction.value
    difference = None if extracted is None else abs(extracted - claim.claimed_value)
    verified = extracted is not None and difference is not None and difference <= tolerance

    # Ordered by decreasing importance for the human reviewer
    notes: List[str] = []
    if extracted is None:
        notes.append(VerdictMessages.COULD_NOT_EXTRACT.format(unit=unit_label))

    if claim.claimed_date and extraction.date and extraction.date != claim.claimed_date:
        notes.append(VerdictMessages.DATE_MISMATCH.format(extracted=extraction.date, claimed=claim.claimed_date))

    if not verified and extracted is not None:
        notes.append(VerdictMessages.VALUE_MISMATCH.format(
            value=_format_value(extracted),
            unit=unit_label,
            claimed=_format_value(claim.claimed_value),
            difference=_format_value(difference),
            tolerance=tolerance,
        ))

    # Advisory only: a low-confidence match stays verified
    if extraction.confidence == Confidence.LOW.value:
        notes.append(VerdictMessages.LOW_CONFIDENCE)

    if extraction.notes:
        notes.append(VerdictMessages.AI_NOTES.format(notes=extraction.notes))

    if not notes:
        notes.append(VerdictMessages.SUCCEEDED if verified else VerdictMessages.FAILED)

    return Verdict(
        verified=verified,
        tolerance=tolerance,
        difference=difference,
        notes=" ".join(notes),
        extracted_km=extraction.distance_km,
        extracted_calories=extraction.calories,
    )


def evaluate(claim: ClaimContext, extraction: ExtractionResult,
             unit_label: str = ConfigDefaults.UNIT_LABEL) -> Verdict:
    """
    Compute the verdict for a claim and its validated extraction.

    The mode is chosen solely by the claimed value: 0 means auto-extract.

    Args:
        claim: The claim under verification
        extraction: Validated extraction (possibly empty)
        unit_label: Name of the primary metric used in notes

    Returns:
        Verdict with a non-empty notes trail
    """
    if claim.is_auto_extract:
        return evaluate_auto_extract(extraction, unit_label)
    return evaluate_claim(claim, extraction, unit_label)
