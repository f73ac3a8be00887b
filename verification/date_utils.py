"""
Date helpers for proof extraction.

Relative anchors for the extraction prompt and normalization of the partial
dates screenshots tend to show ("Sat, 22 Nov", "12/03").
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional, Dict, Union

MONTH_NAMES = {
    'january': 1, 'jan': 1,
    'february': 2, 'feb': 2,
    'march': 3, 'mar': 3,
    'april': 4, 'apr': 4,
    'may': 5,
    'june': 6, 'jun': 6,
    'july': 7, 'jul': 7,
    'august': 8, 'aug': 8,
    'september': 9, 'sep': 9, 'sept': 9,
    'october': 10, 'oct': 10,
    'november': 11, 'nov': 11,
    'december': 12, 'dec': 12,
}

ISO_DATE_RE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ]|$)')
MONTH_DAY_RE = re.compile(r'([a-z]+)\.?\s+(\d{1,2})\b', re.IGNORECASE)
DAY_MONTH_RE = re.compile(r'\b(\d{1,2})\s+([a-z]+)', re.IGNORECASE)
NUMERIC_RE = re.compile(r'\b(\d{1,2})[/\-.](\d{1,2})\b')
YEAR_RE = re.compile(r'\b(20\d{2})\b')


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def relative_date_anchors(now: Union[date, datetime]) -> Dict[str, str]:
    """
    Compute the absolute dates behind "today", "yesterday" and friends.

    Returns:
        Dict of ISO dates keyed by anchor name, plus the current year
    """
    today = _as_date(now)
    return {
        'today': today.isoformat(),
        'yesterday': (today - timedelta(days=1)).isoformat(),
        'two_days_ago': (today - timedelta(days=2)).isoformat(),
        'three_days_ago': (today - timedelta(days=3)).isoformat(),
        'current_year': str(today.year),
    }


def _infer_year(month: int, day: int, reference: date) -> Optional[date]:
    # A month/day that would land in the future belongs to last year
    for year in (reference.year, reference.year - 1):
        try:
            candidate = date(year, month, day)
        except ValueError:
            continue
        if candidate <= reference:
            return candidate
    return None


def normalize_extracted_date(value: Optional[str], reference: Union[date, datetime, None] = None) -> Optional[str]:
    """
    Normalize a possibly year-less date string to ISO format.

    Args:
        value: Date text as read from a screenshot
        reference: The "now" used to infer a missing year (defaults to today)

    Returns:
        ISO date string, or None when the text cannot be read as a date
    """
    if not value or not value.strip():
        return None

    reference_date = _as_date(reference) if reference is not None else date.today()
    cleaned = value.strip()

    iso_match = ISO_DATE_RE.match(cleaned)
    if iso_match:
        try:
            return date(int(iso_match.group(1)), int(iso_match.group(2)), int(iso_match.group(3))).isoformat()
        except ValueError:
            return None

    month = day = None

    for match in MONTH_DAY_RE.finditer(cleaned):
        name = match.group(1).lower()
        if name in MONTH_NAMES:
            month, day = MONTH_NAMES[name], int(match.group(2))
            break

    if month is None:
        for match in DAY_MONTH_RE.finditer(cleaned):
            name = match.group(2).lower()
            if name in MONTH_NAMES:
                day, month = int(match.group(1)), MONTH_NAMES[name]
                break

    if month is None:
        numeric = NUMERIC_RE.search(cleaned)
        if numeric:
            first, second = int(numeric.group(1)), int(numeric.group(2))
            if first > 12 and second <= 12:
                day, month = first, second
            else:
                # MM/DD, also the default for ambiguous input
                month, day = first, second

    if month is None or not 1 <= month <= 12 or not 1 <= day <= 31:
        return None

    explicit_year = YEAR_RE.search(cleaned)
    if explicit_year:
        try:
            return date(int(explicit_year.group(1)), month, day).isoformat()
        except ValueError:
            return None

    resolved = _infer_year(month, day, reference_date)
    return resolved.isoformat() if resolved else None
