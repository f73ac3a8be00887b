"""
Prompt generation for proof extraction.

Builds the deterministic instruction sent with every proof image. The only
input that varies between two calls for the same claim is the wall-clock
"now" used for the relative date anchors.
"""

from datetime import date, datetime
from typing import Optional, Union, List

from .constants import Confidence, ConfigDefaults, ExtractionKeys
from .date_utils import relative_date_anchors
from .models import ClaimContext

# ============================================================================
# RELATIVE DATE VOCABULARY
# ============================================================================

# (language, today, yesterday, two days ago)
RELATIVE_DATE_TERMS = [
    ("English", "Today", "Yesterday", "2 days ago"),
    ("Chinese", "今天", "昨天", "前天"),
    ("Spanish", "Hoy", "Ayer", "Anteayer"),
    ("German", "Heute", "Gestern", "Vorgestern"),
    ("Korean", "오늘", "어제", "그저께"),
    ("French", "Aujourd'hui", "Hier", "Avant-hier"),
    ("Japanese", "今日", "昨日", "一昨日"),
]


class ExtractionPromptGenerator:
    """
    Generates the instruction prompt for proof extraction.
    Centralized prompt management for every extraction call.
    """

    @staticmethod
    def build_date_anchor_section(now: Union[date, datetime]) -> List[str]:
        """Absolute dates behind relative labels, plus the partial-date rule."""
        anchors = relative_date_anchors(now)
        return [
            "DATE REFERENCE (resolve every relative or partial date against these):",
            f"- Today: {anchors['today']}",
            f"- Yesterday: {anchors['yesterday']}",
            f"- 2 days ago: {anchors['two_days_ago']}",
            f"- 3 days ago: {anchors['three_days_ago']}",
            f"- Current year: {anchors['current_year']}",
            f"- Dates shown without a year (e.g. \"Sat, 22 Nov\") belong to {anchors['current_year']}, "
            f"unless that would be after {anchors['today']}; then use the previous year.",
        ]

    @staticmethod
    def build_relative_vocabulary_section(now: Union[date, datetime]) -> List[str]:
        """Multilingual today/yesterday labels mapped to the same anchor dates."""
        anchors = relative_date_anchors(now)
        lines = ["RELATIVE DATE LABELS (screenshots may use any of these languages):"]
        for language, today, yesterday, two_days_ago in RELATIVE_DATE_TERMS:
            lines.append(
                f"- {language}: \"{today}\" = {anchors['today']}, "
                f"\"{yesterday}\" = {anchors['yesterday']}, "
                f"\"{two_days_ago}\" = {anchors['two_days_ago']}"
            )
        return lines

    @staticmethod
    def build_claim_section(claim: ClaimContext, unit_label: str) -> List[str]:
        """Auto-extract signaling or the user-asserted claim."""
        if claim.is_auto_extract:
            lines = [
                f"CLAIM: None. The user has not stated a {unit_label} count.",
                f"Report your own best reading of the {unit_label} shown in the screenshot.",
            ]
        else:
            lines = [
                f"CLAIM: The user states they recorded {claim.claimed_value} {unit_label}.",
                f"Use this value only to pick the right number when several appear on screen. "
                f"Do NOT simply confirm it: report what the screenshot actually shows.",
            ]

        if claim.claimed_date:
            lines.append(f"CLAIMED DATE: {claim.claimed_date}. Report the date the screenshot shows, even if different.")

        if claim.filename_hint:
            lines.append(
                f"FILENAME HINT: \"{claim.filename_hint}\". Filenames often embed the capture date; "
                f"use it only when the screenshot itself shows no explicit date."
            )
        return lines

    @staticmethod
    def build_confidence_section() -> List[str]:
        """Self-reported confidence policy."""
        return [
            "CONFIDENCE (field \"confidence\"):",
            f"- \"{Confidence.HIGH.value}\": the main metric is unambiguous AND the date is explicitly shown.",
            f"- \"{Confidence.MEDIUM.value}\": minor inference was needed (small text, inferred date, slight blur).",
            f"- \"{Confidence.LOW.value}\": any of: image rotated more than 15 degrees, several candidate totals, "
            f"a weekly or aggregate view instead of a single day, or you are less than 70% sure.",
            "- null: the image is unreadable or is not an activity screenshot.",
        ]

    @staticmethod
    def build_edge_case_section(unit_label: str) -> List[str]:
        """Rules for the readings screenshots get wrong most often."""
        return [
            "RULES:",
            f"- Report the actually recorded {unit_label}, never a displayed goal or target.",
            f"- For partial-day or \"so far today\" displays, report the partial value with confidence \"{Confidence.MEDIUM.value}\".",
            f"- If the screenshot explicitly shows 0 {unit_label}, report 0. Use null only when you cannot read a value.",
            "- Distance must be converted to kilometers; calories are kilocalories.",
            "- Never invent values: use null for anything not visible.",
        ]

    @staticmethod
    def build_output_format_section() -> List[str]:
        keys = ", ".join(f'"{key}"' for key in ExtractionKeys.ALL)
        return [
            "OUTPUT FORMAT:",
            f"Respond with exactly one JSON object with the keys {keys} and no other keys.",
            f"\"{ExtractionKeys.STEPS}\", \"{ExtractionKeys.KM}\" and \"{ExtractionKeys.CALORIES}\" are numbers or null, "
            f"\"{ExtractionKeys.DATE}\" is YYYY-MM-DD or null, \"{ExtractionKeys.CONFIDENCE}\" is "
            f"\"high\", \"medium\", \"low\" or null, \"{ExtractionKeys.NOTES}\" is a short explanation of your reading.",
            'Example: {"steps": 10250, "km": 7.4, "calories": 412, "date": "2026-01-10", '
            '"confidence": "high", "notes": "Daily total from the activity summary."}',
        ]

    @classmethod
    def build_extraction_prompt(cls,
                                claim: ClaimContext,
                                now: Optional[Union[date, datetime]] = None,
                                unit_label: str = ConfigDefaults.UNIT_LABEL) -> str:
        """
        Create the extraction prompt for one proof image.

        Args:
            claim: The claim being verified (claimed_value 0 means auto-extract)
            now: Wall-clock reference for relative dates (defaults to now)
            unit_label: Name of the primary metric

        Returns:
            Formatted instruction prompt
        """
        reference = now or datetime.now()

        prompt_parts = [
            f"TASK: Read the attached fitness-app screenshot and extract the daily {unit_label}, "
            f"distance in kilometers, calories and the date the data belongs to.",
            "",
            *cls.build_claim_section(claim, unit_label),
            "",
            *cls.build_date_anchor_section(reference),
            "",
            *cls.build_relative_vocabulary_section(reference),
            "",
            *cls.build_confidence_section(),
            "",
            *cls.build_edge_case_section(unit_label),
            "",
            *cls.build_output_format_section(),
        ]

        return "\n".join(prompt_parts)
