"""Per-card scoring: pronunciation, fluency, speed and bands."""
from .aggregator import (
    average_score,
    fluency_score,
    pronunciation_score,
    score_attempt,
    score_reading,
    words_per_minute,
)
from .feedback import grade_reading_speed, score_band
from .math_facts import check_answer, math_remark, score_math_fact, solve_fact
from .rounding import clamp_score, round_half_up

__all__ = [
    "score_attempt",
    "score_reading",
    "score_math_fact",
    "solve_fact",
    "fluency_score",
    "words_per_minute",
    "pronunciation_score",
    "average_score",
    "grade_reading_speed",
    "score_band",
    "check_answer",
    "math_remark",
    "round_half_up",
    "clamp_score",
]
