"""
Data models for the verification engine.
"""

import re
from dataclasses import dataclass, asdict
from datetime import date
from typing import Optional, Union, Dict, Any

Number = Union[int, float]

ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class ClaimContext:
    """A single verification attempt's input. Never mutated after construction."""
    claimed_value: Number  # 0 means auto-extract: there is no claim to check
    proof_path: str
    requester_id: str
    claimed_date: Optional[str] = None
    league_id: Optional[str] = None
    claim_id: Optional[str] = None
    filename_hint: Optional[str] = None

    def __post_init__(self):
        if not _is_number(self.claimed_value) or self.claimed_value < 0:
            raise ValueError(f"claimed_value must be a non-negative number, got {self.claimed_value!r}")
        if not self.proof_path or not self.proof_path.strip():
            raise ValueError("proof_path is required")
        if self.claimed_date is not None:
            try:
                if not ISO_DATE_RE.match(self.claimed_date):
                    raise ValueError("not YYYY-MM-DD")
                date.fromisoformat(self.claimed_date)
            except (TypeError, ValueError):
                raise ValueError(f"claimed_date must be an ISO date (YYYY-MM-DD), got {self.claimed_date!r}")

    @property
    def is_auto_extract(self) -> bool:
        return self.claimed_value == 0


@dataclass
class ExtractionResult:
    """
    The extraction service's validated reading of a proof.

    Every field may be absent. Absence means the extractor could not tell,
    which is different from an explicit zero reading.
    """
    value: Optional[Number] = None
    distance_km: Optional[Number] = None
    calories: Optional[Number] = None
    date: Optional[str] = None
    confidence: Optional[str] = None
    notes: str = ""
    raw_text: str = ""

    @classmethod
    def empty(cls, raw_text: str = "") -> 'ExtractionResult':
        """Build the "no extraction" result, keeping the raw response for audit."""
        return cls(raw_text=raw_text or "")

    @property
    def has_value(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class Verdict:
    """Evaluation result for one claim/extraction pair."""
    verified: bool
    tolerance: int
    difference: Optional[Number]
    notes: str
    extracted_km: Optional[Number] = None
    extracted_calories: Optional[Number] = None


@dataclass
class Outcome:
    """
    Caller-facing envelope, serialized directly as an API response body.

    Failure outcomes leave every verdict and extraction field as None.
    """
    status: int
    ok: bool
    code: str
    message: str
    should_retry: bool = False
    retry_after_seconds: Optional[int] = None

    # Verdict fields
    verified: Optional[bool] = None
    tolerance: Optional[int] = None
    difference: Optional[Number] = None
    notes: Optional[str] = None

    # Extraction fields
    extracted_value: Optional[Number] = None
    extracted_km: Optional[Number] = None
    extracted_calories: Optional[Number] = None
    extracted_date: Optional[str] = None
    confidence: Optional[str] = None
    extraction_notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the outcome to a JSON-ready dictionary."""
        return asdict(self)
