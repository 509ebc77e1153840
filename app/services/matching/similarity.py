"""String and feature similarity primitives."""

import math
import re
from datetime import datetime

from dateutil import parser as date_parser
from rapidfuzz.distance import Levenshtein

# Fills in missing date parts so partial dates compare consistently
_DEFAULT_DATE = datetime(2000, 1, 1)

# Transaction-type flags, tested independently against the lower-cased text
FEATURE_PATTERNS: dict[str, re.Pattern] = {
    "payment": re.compile(r"payment|paid|pay|remit"),
    "deposit": re.compile(r"deposit|credit|received"),
    "transfer": re.compile(r"transfer|move|xfer|wire"),
    "fee": re.compile(r"fee|charge|service charge|disc"),
    "tax": re.compile(r"tax|irs|revenue|treasury"),
    "utility": re.compile(r"utility|electric|water|gas|energy|power|dominion"),
    "insurance": re.compile(r"insurance|premium|policy|life|coverage"),
    "payroll": re.compile(r"payroll|salary|wage|employee|staff"),
    "rent": re.compile(r"rent|lease|property"),
    "loan": re.compile(r"loan|mortgage|debt|finance|financing"),
    "travel": re.compile(r"travel|booking|expedia|hotel|flight|airline"),
    "credit_card": re.compile(r"credit card|cc payment|visa|mastercard|amex|express"),
}

FEATURE_NAMES = tuple(FEATURE_PATTERNS)


def string_similarity(first: str | None, second: str | None) -> float:
    """Edit-distance similarity in 0..1.

    Both inputs are lower-cased and trimmed. Two empty strings are identical
    (1.0); an empty string against a non-empty one scores 0.0.
    """
    s1 = (first or "").lower().strip()
    s2 = (second or "").lower().strip()

    if s1 == s2:
        return 1.0
    if not s1 or not s2:
        return 0.0

    distance = Levenshtein.distance(s1, s2)
    return 1.0 - distance / max(len(s1), len(s2))


def extract_features(description: str | None) -> dict[str, bool]:
    """Map a description to the fixed set of transaction-type flags."""
    text = (description or "").lower()
    return {name: bool(text and pattern.search(text)) for name, pattern in FEATURE_PATTERNS.items()}


def compare_features(first: dict[str, bool], second: dict[str, bool]) -> float:
    """Jaccard similarity of two flag sets; 0.0 when neither has a flag set."""
    shared = 0
    total = 0
    for name in FEATURE_NAMES:
        a = first.get(name, False)
        b = second.get(name, False)
        if a and b:
            shared += 1
        if a or b:
            total += 1
    return shared / total if total else 0.0


def scaled_points(similarity: float, weight: int = 3) -> int:
    """Scale a 0..1 similarity to integer points, rounding halves up."""
    return int(math.floor(similarity * weight + 0.5))


def parse_date(value: str | None) -> datetime | None:
    """Parse free-form statement/ledger date text, or None if unparseable."""
    if not value or not value.strip():
        return None
    try:
        return date_parser.parse(value, default=_DEFAULT_DATE)
    except (ValueError, OverflowError):
        return None


def days_apart(first: str | None, second: str | None) -> float | None:
    """Absolute distance in days between two date strings.

    Returns None when either side cannot be parsed.
    """
    d1 = parse_date(first)
    d2 = parse_date(second)
    if d1 is None or d2 is None:
        return None
    if (d1.tzinfo is None) != (d2.tzinfo is None):
        d1 = d1.replace(tzinfo=None)
        d2 = d2.replace(tzinfo=None)
    return abs((d1 - d2).total_seconds()) / 86400
