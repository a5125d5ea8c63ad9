"""Data model for the phrase a student is asked to read."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, Mapping, Optional, Union

from ..errors import InputError


class LanguageProfile(str, Enum):
    ENGLISH = "english"
    FILIPINO = "filipino"
    MATH = "math"


# Fixed subject ids used by the scheduling side
SUBJECT_IDS = {
    1: LanguageProfile.ENGLISH,
    2: LanguageProfile.FILIPINO,
    3: LanguageProfile.MATH,
}


def profile_for_subject(subject: Union[str, int, None]) -> LanguageProfile:
    """Resolve a subject id or name ("English", "fil", "Mathematics") to a profile.

    Unknown subjects fall back to English.
    """
    if subject is None:
        return LanguageProfile.ENGLISH
    if isinstance(subject, int) or str(subject).strip().isdigit():
        return SUBJECT_IDS.get(int(subject), LanguageProfile.ENGLISH)

    name = str(subject).strip().lower()
    if name.startswith("fil"):
        return LanguageProfile.FILIPINO
    if name.startswith("math"):
        return LanguageProfile.MATH
    return LanguageProfile.ENGLISH


@dataclass(frozen=True)
class ExpectedItem:
    """One flashcard: the target phrase and how to judge it.

    Attributes:
        text: Target phrase, word or number fact ("5 + 3")
        highlights: Focus words shown emphasized on the card
        profile: Language profile driving normalization and scoring
        answer: Expected answer, math profile only
    """
    text: str
    highlights: FrozenSet[str] = field(default_factory=frozenset)
    profile: LanguageProfile = LanguageProfile.ENGLISH
    answer: Optional[str] = None

    def __post_init__(self):
        if self.profile is LanguageProfile.MATH and not (self.answer or "").strip():
            from ..scoring.math_facts import solve_fact

            object.__setattr__(self, "answer", solve_fact(self.text))

    @property
    def is_math(self) -> bool:
        return self.profile is LanguageProfile.MATH

    @classmethod
    def from_card(cls, card: Mapping[str, Any], profile: LanguageProfile) -> "ExpectedItem":
        """Build an item from a material deck card.

        Literacy cards carry ``sentence`` (or ``text``) and ``highlights``;
        math cards carry ``question`` and ``correctAnswer`` (or ``answer``).
        A math card without an answer is solved from its question.

        Raises:
            InputError: If the card has no text, or a math card has no
                answer and its question cannot be solved
        """
        text = str(card.get("sentence") or card.get("question") or card.get("text") or "").strip()
        if not text:
            raise InputError("Flashcard text is missing.")

        highlights = frozenset(
            str(word).strip().lower() for word in card.get("highlights") or [] if str(word).strip()
        )

        answer = None
        if profile is LanguageProfile.MATH:
            raw_answer = card.get("correctAnswer", card.get("answer"))
            if raw_answer is not None and str(raw_answer).strip():
                answer = str(raw_answer).strip()

        return cls(text=text, highlights=highlights, profile=profile, answer=answer)
