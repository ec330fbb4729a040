"""Content signature for cross-source song identity.

Format: sha1("{title_norm}|{artist_id}|{bucketed duration}") as 40 hex chars.

Stored signatures are compared byte for byte, so the input layout and the
rounding rule must not change for a given bucket width. Durations that sit
on a rounding midpoint can land in different buckets even when they are
less than one bucket apart; the split-song report surfaces those pairs
instead of changing the rule.
"""
import hashlib
from typing import Optional, Union

from encore.utils.normalize import round_half_up

DEFAULT_BUCKET_SECONDS = 3


def bucket_duration(duration_sec: Optional[float], bucket_seconds: int = DEFAULT_BUCKET_SECONDS) -> int:
    """Round a duration to the nearest bucket. Missing or zero maps to 0."""
    if not duration_sec:
        return 0
    return round_half_up(duration_sec / bucket_seconds) * bucket_seconds


def song_signature(
    title_norm: str,
    artist_id: Union[int, str],
    duration_sec: Optional[float] = None,
    bucket_seconds: int = DEFAULT_BUCKET_SECONDS,
) -> str:
    """Build the dedup signature for a song."""
    rounded = bucket_duration(duration_sec, bucket_seconds)
    payload = f"{title_norm}|{artist_id}|{rounded}"
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()
