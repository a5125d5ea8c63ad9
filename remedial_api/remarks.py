"""Rule-based narrative remarks for a remedial session."""
from __future__ import annotations

from typing import List, Optional, Sequence

WEAK_THRESHOLD = 75
STRONG_THRESHOLD = 85

DEFAULT_STUDENT_NAME = "The student"
DEFAULT_RECOMMENDATION = "keep a steady practice routine 2-3 times a week"

# (metric, weakness phrase, strength phrase, recommendation)
REMARK_RULES = (
    (
        "pronunciation",
        "pronouncing words clearly",
        "clear pronunciation",
        "practice saying the words out loud with short echo reading",
    ),
    (
        "accuracy",
        "getting words right",
        "good accuracy",
        "repeat the target word set three times a week",
    ),
    (
        "reading_speed",
        "reading pace",
        "fast reading pace",
        "add short timed reading drills twice a week",
    ),
)


def join_list(items: Sequence[str]) -> str:
    """Join phrases as "a and b" or "a, b, and c"."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} and {items[1]}"
    return f"{', '.join(items[:-1])}, and {items[-1]}"


def build_ai_remarks(
    pronunciation_avg: float,
    accuracy_avg: float,
    reading_speed_avg: float,
    student_name: Optional[str] = None,
) -> str:
    """Three sentences: weaknesses, strengths and next steps.

    Each average is checked against the same thresholds: below
    ``WEAK_THRESHOLD`` is a weakness, at or above ``STRONG_THRESHOLD`` a strength.
    """
    name = (student_name or "").strip() or DEFAULT_STUDENT_NAME
    values = {
        "pronunciation": pronunciation_avg,
        "accuracy": accuracy_avg,
        "reading_speed": reading_speed_avg,
    }

    weaknesses: List[str] = []
    strengths: List[str] = []
    recommendations: List[str] = []
    for metric, weakness, strength, recommendation in REMARK_RULES:
        value = values[metric]
        if value < WEAK_THRESHOLD:
            weaknesses.append(weakness)
            recommendations.append(recommendation)
        elif value >= STRONG_THRESHOLD:
            strengths.append(strength)

    if not recommendations:
        recommendations.append(DEFAULT_RECOMMENDATION)

    if weaknesses:
        weakness_line = f"{name} is having difficulty with {join_list(weaknesses)}."
    else:
        weakness_line = f"{name} shows no major weaknesses in this session."

    if strengths:
        strength_line = f"Strengths include {join_list(strengths)}."
    else:
        strength_line = "Strengths are still building as more data is collected."

    return f"{weakness_line} {strength_line} Recommended next steps: {join_list(recommendations)}."
