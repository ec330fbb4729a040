"""Text normalization utilities."""
import math
from typing import Optional


def normalize_name(text: Optional[str]) -> str:
    """Normalize a display name into its identity key.

    Lowercase and trim only. Punctuation and parenthetical content are kept,
    so "P!nk" and "Pink" stay distinct artists.
    """
    if not text:
        return ""
    return text.lower().strip()


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's round() uses banker's rounding (round(1.5) == 2 but
    round(2.5) == 2), which would move signature buckets.
    """
    return int(math.floor(value + 0.5))


def release_year(release_date: Optional[str]) -> Optional[int]:
    """Extract the year from "YYYY", "YYYY-MM" or "YYYY-MM-DD".

    Placeholder dates such as "0000" carry no year and return None.
    """
    if not release_date or len(release_date) < 4:
        return None
    year = release_date[:4]
    if not year.isdigit():
        return None
    return int(year) or None
