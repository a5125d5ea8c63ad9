"""Text normalization utilities for matching spoken and expected text."""
from __future__ import annotations

import re

from ..models.expected_item import LanguageProfile

# Characters kept per profile; everything else is stripped
ENGLISH_STRIP = re.compile(r"[^a-z\s']")
FILIPINO_STRIP = re.compile(r"[^a-záéíóúñäëïöü\s']")
# Math keeps letters so spoken number words survive until tokenization
MATH_STRIP = re.compile(r"[^a-z0-9.+\-×*÷/=\s]")

_WHITESPACE = re.compile(r"\s+")
# "forty-two" is a number word, not a subtraction
_HYPHENATED_WORD = re.compile(r"(?<=[a-z])-(?=[a-z])")


def normalize_text(text: str, profile: LanguageProfile = LanguageProfile.ENGLISH) -> str:
    """Normalize text for comparison.

    Lowercases, strips characters that are not meaningful for the profile
    and collapses whitespace.

    Args:
        text: Raw expected or recognized text
        profile: Language profile

    Returns:
        Normalized text (possibly empty)
    """
    text = (text or "").lower()

    if profile is LanguageProfile.FILIPINO:
        text = FILIPINO_STRIP.sub("", text)
    elif profile is LanguageProfile.MATH:
        text = _HYPHENATED_WORD.sub(" ", text)
        text = MATH_STRIP.sub("", text)
    else:
        text = ENGLISH_STRIP.sub("", text)

    return _WHITESPACE.sub(" ", text).strip()
