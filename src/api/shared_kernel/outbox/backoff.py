"""Retry backoff policy for outbound event delivery."""

from __future__ import annotations

BASE_DELAY_SECONDS = 30
MAX_DELAY_SECONDS = 3600


def compute_backoff_seconds(retry_count: int) -> int:
    """Return the delay before the next attempt for a given retry count.

    Exponential with base 30s, capped at one hour:
    ``min(30 * 2**retry_count, 3600)``.

    Args:
        retry_count: Number of failed attempts recorded so far

    Returns:
        Delay in seconds

    Raises:
        ValueError: If retry_count is negative
    """
    if retry_count < 0:
        raise ValueError(f"retry_count must be >= 0, got {retry_count}")

    # 2**7 * 30 already exceeds the cap; avoid building huge ints
    if retry_count >= 7:
        return MAX_DELAY_SECONDS

    return min(BASE_DELAY_SECONDS * (2**retry_count), MAX_DELAY_SECONDS)
