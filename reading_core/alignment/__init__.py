"""Alignment utilities for matching expected text to recognized speech."""
from .aligner import (
    AlignmentResult,
    align_expected_to_recognized,
    compare_phonemes,
    completeness,
    match_words,
    similarity,
    word_accuracy,
)
from .edit_distance import levenshtein
from .normalizer import normalize_text
from .phonemes import approximate_phonemes, phoneme_sequence
from .tokenizer import extract_answer, tokenize

__all__ = [
    "normalize_text",
    "tokenize",
    "extract_answer",
    "approximate_phonemes",
    "phoneme_sequence",
    "levenshtein",
    "similarity",
    "match_words",
    "word_accuracy",
    "compare_phonemes",
    "completeness",
    "AlignmentResult",
    "align_expected_to_recognized",
]
