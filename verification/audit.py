"""
Best-effort persistence of verification results onto claim records.
"""

from typing import Optional

from .constants import AuditMessages, ConfigDefaults
from .logging_config import get_logger
from .models import ClaimContext, ExtractionResult, Verdict
from .repository import ClaimRecordStoreProtocol

logger = get_logger('audit')


def build_audit_notes(verdict: Verdict, extraction: ExtractionResult,
                      unit_label: str = ConfigDefaults.UNIT_LABEL) -> str:
    """Verdict notes followed by the extracted value and date, when present."""
    notes = [verdict.notes]
    if extraction.value is not None:
        notes.append(AuditMessages.EXTRACTED.format(value=extraction.value, unit=unit_label))
    if extraction.date:
        notes.append(AuditMessages.DATE.format(date=extraction.date))
    return " ".join(notes)


def persist_verification(store: Optional[ClaimRecordStoreProtocol],
                         claim: ClaimContext,
                         verdict: Verdict,
                         extraction: ExtractionResult,
                         unit_label: str = ConfigDefaults.UNIT_LABEL) -> bool:
    """
    Write the verdict onto the claim's record. Never raises.

    The verification decision has already been made when this runs, so a
    failed write is logged and dropped.

    Returns:
        True when the record was written, False when skipped or failed
    """
    if claim.claim_id is None:
        logger.debug("No claim id supplied, skipping persistence (dry run)")
        return False

    if store is None:
        logger.warning(f"⚠️ No claim store configured, verification for {claim.claim_id} not persisted")
        return False

    fields = {
        'verified': verdict.verified,
        'tolerance_used': verdict.tolerance,
        'extracted_km': verdict.extracted_km,
        'extracted_calories': verdict.extracted_calories,
        'verification_notes': build_audit_notes(verdict, extraction, unit_label),
    }

    try:
        store.update_verification_fields(claim.claim_id, fields)
    except Exception as e:
        logger.error(f"❌ Failed to persist verification for claim {claim.claim_id}: {e}")
        return False

    if claim.league_id:
        logger.info(f"💾 Verification persisted for claim {claim.claim_id} in league {claim.league_id}")
    else:
        logger.info(f"💾 Verification persisted for claim {claim.claim_id}")
    return True
