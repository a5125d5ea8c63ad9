"""Windowed word matching and phoneme comparison between expected and recognized text."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..models.expected_item import LanguageProfile
from ..models.slide_score import WordMatch
from .edit_distance import levenshtein
from .phonemes import phoneme_sequence
from .tokenizer import tokenize

# Recognized words within +-MATCH_WINDOW positions are candidates
MATCH_WINDOW = 2

# Similarity thresholds (percent)
EXACT_MATCH_THRESHOLD = 95.0
SOFT_MATCH_THRESHOLD = 60.0

# A soft match earns partial credit toward word accuracy
SOFT_MATCH_CREDIT = 0.6

# Recognized phoneme at i-1, i or i+1 may match the expected phoneme at i
PHONEME_POSITION_TOLERANCE = 1


def similarity(expected: str, candidate: str) -> float:
    """Character similarity of a candidate against the expected word, in [0, 100].

    100 only when the two strings are identical.
    """
    distance = levenshtein(expected, candidate)
    return max(0, len(expected) - distance) / max(1, len(expected)) * 100


def _window_candidates(recognized: Sequence[str], index: int) -> List[str]:
    lo = max(0, index - MATCH_WINDOW)
    hi = min(len(recognized), index + MATCH_WINDOW + 1)
    window = list(recognized[lo:hi])
    # the recognizer sometimes splits one written word ("naglalaro" -> "nag laro")
    joined = [first + second for first, second in zip(window, window[1:])]
    return window + joined


def match_words(expected: Sequence[str], recognized: Sequence[str]) -> List[WordMatch]:
    """Find the best recognized candidate for each expected word.

    Args:
        expected: Normalized expected tokens
        recognized: Normalized recognized tokens

    Returns:
        One WordMatch per expected word, in order
    """
    matches: List[WordMatch] = []
    for i, word in enumerate(expected):
        best: Optional[str] = None
        best_distance = None
        for candidate in _window_candidates(recognized, i):
            distance = levenshtein(word, candidate)
            if best_distance is None or distance < best_distance:
                best, best_distance = candidate, distance

        score = similarity(word, best) if best is not None else 0.0
        if score >= EXACT_MATCH_THRESHOLD:
            kind = "exact"
        elif score >= SOFT_MATCH_THRESHOLD:
            kind = "soft"
        else:
            kind = "miss"
        matches.append(WordMatch(expected=word, matched=best, similarity=score, kind=kind))
    return matches


def word_accuracy(matches: Sequence[WordMatch]) -> float:
    """Word accuracy in [0, 100]; 0 when nothing was expected."""
    if not matches:
        return 0.0
    exact = sum(1 for m in matches if m.kind == "exact")
    soft = sum(1 for m in matches if m.kind == "soft")
    return (exact + SOFT_MATCH_CREDIT * soft) / len(matches) * 100


def compare_phonemes(expected: Sequence[str], recognized: Sequence[str]) -> float:
    """Positional phoneme accuracy with a one-position tolerance, in [0, 100]."""
    if not expected:
        return 0.0
    hits = 0
    for i, phoneme in enumerate(expected):
        lo = max(0, i - PHONEME_POSITION_TOLERANCE)
        hi = i + PHONEME_POSITION_TOLERANCE + 1
        if phoneme in recognized[lo:hi]:
            hits += 1
    return hits / len(expected) * 100


def completeness(matches: Sequence[WordMatch]) -> float:
    """Share of expected words that were attempted at all (similarity above 0)."""
    if not matches:
        return 100.0
    omitted = sum(1 for m in matches if m.similarity == 0)
    return 100 - omitted / len(matches) * 100


@dataclass(frozen=True)
class AlignmentResult:
    """Everything the aggregator needs from comparing two texts."""
    expected_words: Tuple[str, ...]
    recognized_words: Tuple[str, ...]
    matches: Tuple[WordMatch, ...]
    word_accuracy: float
    phoneme_accuracy: float
    completeness: float


def align_expected_to_recognized(
    expected_text: str,
    recognized_text: str,
    profile: LanguageProfile = LanguageProfile.ENGLISH,
) -> AlignmentResult:
    """Tokenize both texts and compute word and phoneme agreement.

    Args:
        expected_text: The card text
        recognized_text: The recognizer transcript
        profile: Language profile

    Returns:
        AlignmentResult
    """
    expected = tokenize(expected_text, profile)
    recognized = tokenize(recognized_text, profile)
    matches = match_words(expected, recognized)
    return AlignmentResult(
        expected_words=tuple(expected),
        recognized_words=tuple(recognized),
        matches=tuple(matches),
        word_accuracy=word_accuracy(matches),
        phoneme_accuracy=compare_phonemes(
            phoneme_sequence(expected, profile), phoneme_sequence(recognized, profile)
        ),
        completeness=completeness(matches),
    )
