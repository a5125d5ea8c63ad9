"""Composite scoring of one card attempt.

Combines the alignment result with capture timing:

    pronunciation = 0.5 * word accuracy + 0.35 * phoneme accuracy + 0.15 * confidence
    fluency       = share of the speech span that was not counted as silence
    average       = mean of pronunciation, fluency and the reading-speed score

All outputs are integers in [0, 100] except word/phoneme accuracy, which are
kept as floats for reporting.
"""
from __future__ import annotations

import logging
from typing import Optional

from ..alignment.aligner import align_expected_to_recognized
from ..alignment.normalizer import normalize_text
from ..models.capture import CaptureTiming, RecognitionHypothesis
from ..models.expected_item import ExpectedItem
from ..models.slide_score import SlideScore
from .feedback import grade_reading_speed, score_band
from .math_facts import score_math_fact
from .rounding import clamp_score, round_half_up
from .rules import DEFAULT_CONFIDENCE, PRONUNCIATION_WEIGHTS

logger = logging.getLogger(__name__)


def fluency_score(timing: CaptureTiming) -> int:
    """Fluency in [0, 100]; exactly 100 only when no silence was counted."""
    pause_ratio = min(1.0, timing.cumulative_silence_ms / timing.total_speech_ms)
    score = clamp_score((1.0 - pause_ratio) * 100)
    if timing.cumulative_silence_ms > 0:
        score = min(score, 99)
    return score


def words_per_minute(word_count: int, total_speech_ms: float) -> int:
    minutes = max(1.0, total_speech_ms) / 60000.0
    return max(0, round_half_up(word_count / minutes))


def pronunciation_score(word_accuracy: float, phoneme_accuracy: float, confidence: Optional[float]) -> int:
    if confidence is None:
        confidence = DEFAULT_CONFIDENCE
    w_word, w_phoneme, w_conf = PRONUNCIATION_WEIGHTS
    return clamp_score(w_word * word_accuracy + w_phoneme * phoneme_accuracy + w_conf * confidence * 100)


def average_score(pronunciation: int, fluency: int, reading_speed: int) -> int:
    return clamp_score((pronunciation + fluency + reading_speed) / 3)


def score_reading(item: ExpectedItem, hypothesis: RecognitionHypothesis, timing: CaptureTiming) -> SlideScore:
    """Score a literacy (English or Filipino) attempt.

    Args:
        item: The card that was read
        hypothesis: Final recognized text
        timing: Timing captured by the signal monitor

    Returns:
        SlideScore
    """
    alignment = align_expected_to_recognized(item.text, hypothesis.text, item.profile)
    word_count = len(alignment.expected_words)

    fluency = fluency_score(timing)
    wpm = words_per_minute(word_count, timing.total_speech_ms)
    speed_score, speed_label = grade_reading_speed(wpm, word_count)
    pronunciation = pronunciation_score(alignment.word_accuracy, alignment.phoneme_accuracy, hypothesis.confidence)
    average = average_score(pronunciation, fluency, speed_score)
    band, remark = score_band(average)

    missed = {m.expected for m in alignment.matches if m.kind == "miss"}
    missed_highlights = tuple(
        sorted(word for word in item.highlights if normalize_text(word, item.profile) in missed)
    )

    return SlideScore(
        word_accuracy=alignment.word_accuracy,
        phoneme_accuracy=alignment.phoneme_accuracy,
        fluency_score=fluency,
        wpm=wpm,
        pronunciation_score=pronunciation,
        band=band,
        remark=remark,
        completeness_score=clamp_score(alignment.completeness),
        reading_speed_score=speed_score,
        reading_speed_label=speed_label,
        average_score=average,
        transcription=hypothesis.text.strip(),
        confidence=hypothesis.confidence,
        word_matches=alignment.matches,
        missed_highlights=missed_highlights,
    )


def score_attempt(item: ExpectedItem, hypothesis: RecognitionHypothesis, timing: CaptureTiming) -> SlideScore:
    """Score one finalized attempt, dispatching on the item's language profile."""
    if item.is_math:
        score = score_math_fact(item, hypothesis, timing)
    else:
        score = score_reading(item, hypothesis, timing)
    logger.debug("Scored card: average=%s band=%s", score.average_score, score.band)
    return score
