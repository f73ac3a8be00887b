"""
Response parsing for extraction service output.

The extractor returns free-form text that should contain one JSON object.
Parsing is validate-or-empty: anything that does not match the schema yields
an empty ExtractionResult instead of a partial one.
"""

import json
import re
from datetime import date, datetime
from typing import Any, Optional, Union

from .constants import Confidence, ExtractionKeys
from .date_utils import normalize_extracted_date
from .error_handler import MalformedExtractionError
from .logging_config import get_logger
from .models import ExtractionResult, Number

logger = get_logger('response_parser')

NUMERIC_STRING_RE = re.compile(r'^\d+(\.\d+)?$')
GROUPED_NUMERIC_RE = re.compile(r'^\d{1,3}(,\d{3})+(\.\d+)?$')


def extract_json_block(text: str) -> Optional[str]:
    """Return the outermost {...} span of ``text``, or None when there is none."""
    start = text.find('{')
    end = text.rfind('}')
    if start >= 0 and end > start:
        return text[start:end + 1]
    return None


class ExtractionResponseParser:
    """Validates extractor responses into ExtractionResult objects."""

    def __init__(self, reference_date: Union[date, datetime, None] = None):
        """
        Args:
            reference_date: "Now" used to resolve year-less dates (defaults to today)
        """
        self.reference_date = reference_date

    @staticmethod
    def coerce_number(key: str, value: Any) -> Optional[Number]:
        """Accept non-negative numbers or numeric-looking strings."""
        if value is None:
            return None
        if isinstance(value, bool):
            raise MalformedExtractionError(f"'{key}' must be a number, got boolean")

        if isinstance(value, str):
            text = value.strip()
            if GROUPED_NUMERIC_RE.match(text):
                text = text.replace(',', '')
            if not NUMERIC_STRING_RE.match(text):
                raise MalformedExtractionError(f"'{key}' is not numeric: {value!r}")
            value = float(text)

        if not isinstance(value, (int, float)):
            raise MalformedExtractionError(f"'{key}' must be a number, got {type(value).__name__}")
        if value != value or value in (float('inf'), float('-inf')):
            raise MalformedExtractionError(f"'{key}' is not a finite number")
        if value < 0:
            raise MalformedExtractionError(f"'{key}' cannot be negative: {value}")

        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    def coerce_date(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str):
            raise MalformedExtractionError(f"'date' must be a string, got {type(value).__name__}")
        if not value.strip():
            return None
        normalized = normalize_extracted_date(value, self.reference_date)
        if normalized is None:
            raise MalformedExtractionError(f"'date' is not a readable date: {value!r}")
        return normalized

    @staticmethod
    def coerce_confidence(value: Any) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str) or value.strip().lower() not in Confidence.values():
            raise MalformedExtractionError(f"'confidence' must be one of {Confidence.values()} or null, got {value!r}")
        return value.strip().lower()

    @staticmethod
    def coerce_notes(value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise MalformedExtractionError(f"'notes' must be a string, got {type(value).__name__}")
        return value.strip()

    def validate(self, payload: Any, raw_text: str) -> ExtractionResult:
        """
        Validate a decoded payload against the extraction schema.

        Raises:
            MalformedExtractionError: On any schema violation
        """
        if not isinstance(payload, dict):
            raise MalformedExtractionError(f"Expected a JSON object, got {type(payload).__name__}")

        unknown = set(payload) - set(ExtractionKeys.ALL)
        if unknown:
            raise MalformedExtractionError(f"Unknown fields: {', '.join(sorted(unknown))}")

        return ExtractionResult(
            value=self.coerce_number(ExtractionKeys.STEPS, payload.get(ExtractionKeys.STEPS)),
            distance_km=self.coerce_number(ExtractionKeys.KM, payload.get(ExtractionKeys.KM)),
            calories=self.coerce_number(ExtractionKeys.CALORIES, payload.get(ExtractionKeys.CALORIES)),
            date=self.coerce_date(payload.get(ExtractionKeys.DATE)),
            confidence=self.coerce_confidence(payload.get(ExtractionKeys.CONFIDENCE)),
            notes=self.coerce_notes(payload.get(ExtractionKeys.NOTES)),
            raw_text=raw_text,
        )

    def parse(self, raw_text: Optional[str]) -> ExtractionResult:
        """
        Parse raw extractor output. Never raises.

        Args:
            raw_text: Text returned by the extraction service

        Returns:
            Validated ExtractionResult, or an empty one when the response is
            missing or does not match the schema
        """
        if not raw_text or not raw_text.strip():
            logger.warning("⚠️ Extraction service returned an empty response")
            return ExtractionResult.empty(raw_text or "")

        try:
            json_text = extract_json_block(raw_text.strip())
            if json_text is None:
                raise MalformedExtractionError("No JSON object found in response")
            try:
                payload = json.loads(json_text)
            except (ValueError, RecursionError) as e:
                # RecursionError: nesting too deep for the decoder
                raise MalformedExtractionError(f"Invalid JSON: {e}") from e
            return self.validate(payload, raw_text)
        except MalformedExtractionError as e:
            logger.warning(f"⚠️ {e} (response preview: {raw_text[:200]!r})")
            return ExtractionResult.empty(raw_text)
