"""Approximate phoneme segmentation from spelling.

No pronunciation dictionary is involved: known digraphs become one symbol,
vowel runs merge into one unit and consonant runs are kept verbatim. This is
coarse, but it is stable across English and Filipino spelling.
"""
from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List

from ..models.expected_item import LanguageProfile

ENGLISH_VOWELS: FrozenSet[str] = frozenset("aeiou")
FILIPINO_VOWELS: FrozenSet[str] = frozenset("aeiouáéíóú")

ENGLISH_DIGRAPHS: Dict[str, str] = {
    # consonant digraphs
    "th": "TH", "sh": "SH", "ch": "CH", "ph": "F", "gh": "G", "wh": "WH",
    "ck": "K", "ng": "NG", "nk": "NK",
    # vowel teams
    "ee": "EE", "oo": "OO", "ai": "AY", "ay": "AY", "ea": "EE", "oa": "OA",
    "ow": "OW", "ou": "OU", "oi": "OI", "oy": "OY", "aw": "AW", "au": "AW",
    # r-controlled
    "ar": "AR", "er": "ER", "ir": "ER", "ur": "ER", "or": "OR",
}

FILIPINO_DIGRAPHS: Dict[str, str] = {
    "ng": "NG", "ny": "NY", "ts": "TS", "dy": "DY", "sy": "SY", "ly": "LY",
    # borrowed spellings
    "th": "T", "sh": "S", "ch": "CH", "ph": "F", "gh": "G",
}

_VOWELS = {
    LanguageProfile.ENGLISH: ENGLISH_VOWELS,
    LanguageProfile.FILIPINO: FILIPINO_VOWELS,
}
_DIGRAPHS = {
    LanguageProfile.ENGLISH: ENGLISH_DIGRAPHS,
    LanguageProfile.FILIPINO: FILIPINO_DIGRAPHS,
}


def approximate_phonemes(word: str, profile: LanguageProfile = LanguageProfile.ENGLISH) -> List[str]:
    """Segment a normalized word into approximate phoneme units.

    Example (filipino): "naglalaro" -> ["N", "A", "GL", "A", "L", "A", "R", "O"]

    Args:
        word: Normalized word
        profile: Language profile; math tokens are returned as a single unit

    Returns:
        List of uppercase phoneme units
    """
    word = word.lower()
    if not word:
        return []
    if profile is LanguageProfile.MATH:
        return [word]

    vowels = _VOWELS[profile]
    digraphs = _DIGRAPHS[profile]
    units: List[str] = []
    consonants = ""

    i = 0
    while i < len(word):
        pair = word[i:i + 2]
        if pair in digraphs:
            if consonants:
                units.append(consonants)
                consonants = ""
            units.append(digraphs[pair])
            i += 2
            continue

        char = word[i]
        if char in vowels:
            if consonants:
                units.append(consonants)
                consonants = ""
            j = i + 1
            while j < len(word) and word[j] in vowels and word[j:j + 2] not in digraphs:
                j += 1
            units.append(word[i:j].upper())
            i = j
            continue

        if char.isalpha():
            consonants += char.upper()
        i += 1

    if consonants:
        units.append(consonants)
    return units


def phoneme_sequence(words: Iterable[str], profile: LanguageProfile = LanguageProfile.ENGLISH) -> List[str]:
    """Flatten the approximate phonemes of every word into one sequence."""
    sequence: List[str] = []
    for word in words:
        sequence.extend(approximate_phonemes(word, profile))
    return sequence
