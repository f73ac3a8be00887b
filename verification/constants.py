"""
Constants and enums for the verification module.

Keeps the policy numbers, outcome codes and message templates in one place.
"""

from enum import Enum
from typing import Final


class OutcomeCodes(Enum):
    """Machine-readable outcome codes returned to callers."""
    SUCCESS = "success"
    VERIFICATION_FAILED = "verification_failed"
    PROOF_UNAVAILABLE = "proof_unavailable"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    SERVICE_UNREACHABLE = "service_unreachable"
    MALFORMED_EXTRACTION = "malformed_extraction"
    INTERNAL_ERROR = "internal_error"


class Confidence(Enum):
    """Extractor self-reported confidence levels."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def values(cls):
        return [member.value for member in cls]


class TolerancePolicy:
    """Claim-verification tolerance band."""
    RATIO: Final[float] = 0.03
    FLOOR: Final[int] = 300


class ConfigDefaults:
    """Default configuration values."""
    MODEL_NAME: Final[str] = "gemini-2.0-flash"
    VERIFY_TIMEOUT_MS: Final[int] = 30000
    PROOFS_BUCKET: Final[str] = "proofs"
    DOWNLOAD_TIMEOUT: Final[float] = 30.0
    MAX_PROOF_SIZE_MB: Final[float] = 20.0
    UNIT_LABEL: Final[str] = "steps"
    LOG_LEVEL: Final[str] = "INFO"
    METRICS_RECENT_OPERATIONS: Final[int] = 1000
    RATE_LIMIT_RETRY_AFTER: Final[int] = 60
    TEMPERATURE: Final[float] = 0.2
    TOP_P: Final[float] = 0.8


class MimeTypes:
    """Proof MIME type inference by file extension."""
    DEFAULT = "application/octet-stream"
    BY_EXTENSION = {
        '.png': 'image/png',
        '.jpg': 'image/jpeg',
        '.jpeg': 'image/jpeg',
        '.heic': 'image/heic',
    }


class ExtractionKeys:
    """Keys of the JSON object the extractor must return."""
    STEPS = "steps"
    KM = "km"
    CALORIES = "calories"
    DATE = "date"
    CONFIDENCE = "confidence"
    NOTES = "notes"

    ALL = (STEPS, KM, CALORIES, DATE, CONFIDENCE, NOTES)
    NUMERIC = (STEPS, KM, CALORIES)


class VerdictMessages:
    """Note templates for the verdict audit trail."""
    COULD_NOT_EXTRACT = "Could not extract {unit} from screenshot."
    AUTO_EXTRACTED = "Auto-extracted {value} {unit}."
    DATE_MISMATCH = "Screenshot date {extracted} differs from claimed date {claimed}."
    VALUE_MISMATCH = ("Extracted {value} {unit}, which differs from claimed {claimed} "
                      "by {difference} (tolerance: {tolerance}).")
    LOW_CONFIDENCE = "⚠️ Low confidence extraction. Manual review recommended."
    AI_NOTES = "AI notes: {notes}"
    SUCCEEDED = "Verification succeeded."
    FAILED = "Verification failed."


class OutcomeMessages:
    """Caller-facing messages for failure outcomes."""
    RATE_LIMITED = "AI service verification limit reached"
    TIMEOUT = "Verification timed out"
    SERVICE_UNREACHABLE = "Extraction service unreachable"
    PROOF_UNAVAILABLE = "Proof image could not be retrieved"
    MALFORMED_EXTRACTION = "Extraction response could not be read"


class AuditMessages:
    """Fragments appended to the persisted verification notes."""
    EXTRACTED = "Extracted: {value} {unit}"
    DATE = "Date: {date}"
