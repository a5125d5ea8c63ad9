"""Binary scoring of spoken number-fact answers."""
from __future__ import annotations

import operator
from fractions import Fraction
from typing import Optional

from ..alignment.tokenizer import extract_answer, tokenize
from ..errors import InputError
from ..models.capture import CaptureTiming, RecognitionHypothesis
from ..models.expected_item import ExpectedItem, LanguageProfile
from ..models.slide_score import SlideScore
from .feedback import score_band
from .rules import (
    MATH_FAST_RESPONSE_MS,
    MATH_GOOD_RESPONSE_MS,
    MATH_REMARK_FAST,
    MATH_REMARK_GOOD,
    MATH_REMARK_SLOW,
    MATH_REMARK_WRONG,
)


MISSING_ANSWER = "Math flashcard answer is missing."

_OPERATIONS = {
    "+": operator.add,
    "-": operator.sub,
    "×": operator.mul,
    "÷": operator.truediv,
}


def solve_fact(text: str) -> str:
    """Work out the answer to a number fact such as "5 + 3" or "12 ÷ 4 =".

    × and ÷ bind tighter than + and -. Anything after "=" is ignored.

    Raises:
        InputError: If the text is not a fact that can be evaluated
    """
    tokens = tokenize(text, LanguageProfile.MATH)
    if "=" in tokens:
        tokens = tokens[:tokens.index("=")]
    if len(tokens) % 2 == 0:
        raise InputError(MISSING_ANSWER)

    operands, operators = tokens[::2], tokens[1::2]
    if any(op not in _OPERATIONS for op in operators):
        raise InputError(MISSING_ANSWER)
    try:
        values = [Fraction(value) for value in operands]
    except ValueError as exc:
        raise InputError(MISSING_ANSWER) from exc

    terms = [values[0]]
    additive = []
    for op, value in zip(operators, values[1:]):
        if op in ("+", "-"):
            additive.append(op)
            terms.append(value)
        elif op == "÷" and value == 0:
            raise InputError(MISSING_ANSWER)
        else:
            terms[-1] = _OPERATIONS[op](terms[-1], value)

    result = terms[0]
    for op, value in zip(additive, terms[1:]):
        result = _OPERATIONS[op](result, value)

    if result.denominator == 1:
        return str(result.numerator)
    return str(float(result))


def check_answer(expected_answer: str, spoken: str) -> bool:
    """Exact comparison of the spoken answer with the expected one.

    "eight", "8" and "five plus three equals eight" all answer "8".
    """
    expected = "".join(tokenize(expected_answer, LanguageProfile.MATH))
    given = extract_answer(tokenize(spoken, LanguageProfile.MATH))
    return bool(expected) and given == expected


def math_remark(correct: bool, latency_ms: Optional[float]) -> str:
    if not correct:
        return MATH_REMARK_WRONG
    if latency_ms is None or latency_ms < MATH_FAST_RESPONSE_MS:
        return MATH_REMARK_FAST
    if latency_ms < MATH_GOOD_RESPONSE_MS:
        return MATH_REMARK_GOOD
    return MATH_REMARK_SLOW


def score_math_fact(item: ExpectedItem, hypothesis: RecognitionHypothesis, timing: CaptureTiming) -> SlideScore:
    """Score a math card: 100 for the right answer, 0 otherwise.

    Latency is reported and drives the remark but does not change the score.
    """
    correct = check_answer(item.answer or "", hypothesis.text)
    score = 100 if correct else 0
    latency = timing.response_latency_ms
    band, _ = score_band(score)

    return SlideScore(
        word_accuracy=float(score),
        phoneme_accuracy=float(score),
        fluency_score=score,
        wpm=0,
        pronunciation_score=score,
        band=band,
        remark=math_remark(correct, latency),
        completeness_score=score,
        reading_speed_score=score,
        reading_speed_label="",
        average_score=score,
        transcription=hypothesis.text.strip(),
        confidence=hypothesis.confidence,
        response_latency_ms=latency,
    )
