"""Word tokenization for expected and recognized text."""
from __future__ import annotations

import re
from typing import List

from ..models.expected_item import LanguageProfile
from .normalizer import normalize_text

NUMBER_WORDS = {
    "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11,
    "twelve": 12, "thirteen": 13, "fourteen": 14, "fifteen": 15,
    "sixteen": 16, "seventeen": 17, "eighteen": 18, "nineteen": 19,
}
TENS_WORDS = {
    "twenty": 20, "thirty": 30, "forty": 40, "fifty": 50,
    "sixty": 60, "seventy": 70, "eighty": 80, "ninety": 90,
}
OPERATOR_WORDS = {
    "plus": "+", "add": "+",
    "minus": "-", "less": "-",
    "times": "×", "x": "×", "multiplied": "×",
    "divided": "÷", "over": "÷",
    "equals": "=", "equal": "=", "is": "=",
}
OPERATOR_SYMBOLS = {"+": "+", "-": "-", "×": "×", "*": "×", "÷": "÷", "/": "÷", "=": "="}

_MATH_TOKEN = re.compile(r"\d+(?:\.\d+)?|[+\-×*÷/=]|[a-z]+")


def tokenize(text: str, profile: LanguageProfile = LanguageProfile.ENGLISH) -> List[str]:
    """Split text into normalized word tokens.

    Example (math): "12+15" -> ["12", "+", "15"], "forty two" -> ["42"]

    Args:
        text: Raw expected or recognized text
        profile: Language profile

    Returns:
        List of tokens
    """
    normalized = normalize_text(text, profile)
    if not normalized:
        return []
    if profile is LanguageProfile.MATH:
        return _tokenize_math(normalized)
    return [token for token in normalized.split(" ") if token.strip("'")]


def _tokenize_math(normalized: str) -> List[str]:
    tokens: List[str] = []
    pending_tens = None

    def flush_tens() -> None:
        nonlocal pending_tens
        if pending_tens is not None:
            tokens.append(str(pending_tens))
            pending_tens = None

    for raw in _MATH_TOKEN.findall(normalized):
        if raw in TENS_WORDS:
            flush_tens()
            pending_tens = TENS_WORDS[raw]
        elif raw in NUMBER_WORDS:
            value = NUMBER_WORDS[raw]
            if pending_tens is not None and 0 < value < 10:
                tokens.append(str(pending_tens + value))
                pending_tens = None
            else:
                flush_tens()
                tokens.append(str(value))
        elif raw in OPERATOR_SYMBOLS:
            flush_tens()
            tokens.append(OPERATOR_SYMBOLS[raw])
        elif raw in OPERATOR_WORDS:
            flush_tens()
            tokens.append(OPERATOR_WORDS[raw])
        elif raw[0].isdigit():
            flush_tens()
            tokens.append(raw)
        # filler words ("by", "the", "answer") are dropped
    flush_tens()
    return tokens


def extract_answer(tokens: List[str]) -> str:
    """Return the spoken answer: everything after the last "=" if one was said."""
    if "=" in tokens:
        last = len(tokens) - 1 - tokens[::-1].index("=")
        tokens = tokens[last + 1:]
    return "".join(tokens)
