"""Band labels and remarks for composite scores."""
from __future__ import annotations

from typing import Tuple

from .rules import READING_SPEED_BUCKETS, SCORE_BANDS, STABILITY_BASE, STABILITY_WORD_COUNT


def score_band(score: float) -> Tuple[str, str]:
    """Map a 0-100 score to (band, remark)."""
    for minimum, band, remark in SCORE_BANDS:
        if score >= minimum:
            return band, remark
    _, band, remark = SCORE_BANDS[-1]
    return band, remark


def grade_reading_speed(wpm: float, word_count: int) -> Tuple[int, str]:
    """Score reading speed against fixed WPM buckets.

    Short phrases inflate WPM, so the rate is dampened until the phrase
    reaches ``STABILITY_WORD_COUNT`` words.

    Args:
        wpm: Raw words per minute
        word_count: Number of expected words

    Returns:
        (score, label)
    """
    stability = min(1.0, max(1, word_count) / STABILITY_WORD_COUNT)
    adjusted = wpm * (STABILITY_BASE + (1 - STABILITY_BASE) * stability)
    for minimum, score, label in READING_SPEED_BUCKETS:
        if adjusted >= minimum:
            return score, label
    _, score, label = READING_SPEED_BUCKETS[-1]
    return score, label
