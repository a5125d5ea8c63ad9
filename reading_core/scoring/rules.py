"""Scoring weights, bands and reading-speed buckets."""
from __future__ import annotations

# Pronunciation composite weights (word accuracy, phoneme accuracy, confidence)
PRONUNCIATION_WEIGHTS = (0.5, 0.35, 0.15)

# Used when the recognizer reports no confidence
DEFAULT_CONFIDENCE = 0.8

# Reading speed: short phrases get a dampened WPM (stability factor reaches 1 at 10 words)
STABILITY_WORD_COUNT = 10
STABILITY_BASE = 0.65

# (min adjusted wpm, score, label), checked top to bottom
READING_SPEED_BUCKETS = [
    (90, 100, "Very Fast"),
    (75, 95, "Moderately Fast"),
    (60, 90, "Fast"),
    (45, 85, "Moderate"),
    (30, 80, "Slightly Slow"),
    (20, 75, "Slow"),
    (0, 70, "Very Slow"),
]

# (min score, band, remark); a boundary score belongs to the better band
SCORE_BANDS = [
    (90, "Excellent", "Excellent! Outstanding delivery and pacing."),
    (80, "Very Good", "Very Good! Just a little polish needed."),
    (70, "Good", "Good. Keep practicing for smoother speech."),
    (60, "Fair", "Fair. Focus on clarity and confidence."),
    (0, "Poor", "Let's build clarity and pace together."),
]

# Math facts: response latency tiers (ms)
MATH_FAST_RESPONSE_MS = 3000
MATH_GOOD_RESPONSE_MS = 6000

MATH_REMARK_FAST = "Excellent speed and accuracy!"
MATH_REMARK_GOOD = "Good job! Try to be faster next time."
MATH_REMARK_SLOW = "Correct! But a bit slow."
MATH_REMARK_WRONG = "Incorrect. Try again!"
