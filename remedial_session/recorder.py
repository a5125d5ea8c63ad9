"""Accumulates per-card scores across a remedial session and submits them."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from reading_core.capture.controller import CaptureController
from reading_core.errors import InputError
from reading_core.models import ExpectedItem, SlideScore, profile_for_subject
from reading_core.scoring.rounding import round_half_up

logger = logging.getLogger(__name__)

ControllerFactory = Callable[..., CaptureController]
Submitter = Callable[[Dict[str, Any]], Dict[str, Any]]


@dataclass(frozen=True)
class SessionIdentifiers:
    student_id: str
    approved_schedule_id: int
    subject_id: int
    grade_id: int
    phonemic_id: Optional[int] = None
    material_id: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "studentId": self.student_id,
            "approvedScheduleId": self.approved_schedule_id,
            "subjectId": self.subject_id,
            "gradeId": self.grade_id,
            "phonemicId": self.phonemic_id,
            "materialId": self.material_id,
        }


def slide_payload(index: int, item: ExpectedItem, score: SlideScore) -> Dict[str, Any]:
    """Wire format of one card result."""
    return {
        "flashcardIndex": index,
        "expectedText": item.text,
        "pronunciationScore": score.pronunciation_score,
        "accuracyScore": round_half_up(score.word_accuracy),
        "fluencyScore": score.fluency_score,
        "completenessScore": score.completeness_score,
        "readingSpeedWpm": score.wpm,
        "slideAverage": score.average_score,
        "transcription": score.transcription,
    }


def build_deck(cards: Sequence[Mapping[str, Any]], subject: Union[str, int, None]) -> List[ExpectedItem]:
    """Turn material deck cards into ExpectedItems scored for ``subject``."""
    profile = profile_for_subject(subject)
    return [ExpectedItem.from_card(card, profile) for card in cards]


class SessionDraft:
    """Latest score per card index for one student and schedule."""

    def __init__(self, identifiers: SessionIdentifiers):
        self.identifiers = identifiers
        self._scores: Dict[int, Tuple[ExpectedItem, SlideScore]] = {}

    def __len__(self) -> int:
        return len(self._scores)

    @property
    def is_empty(self) -> bool:
        return not self._scores

    def record(self, index: int, item: ExpectedItem, score: SlideScore) -> None:
        # a re-attempt replaces the earlier score for the same card
        self._scores[index] = (item, score)

    def score_for(self, index: int) -> Optional[SlideScore]:
        entry = self._scores.get(index)
        return entry[1] if entry else None

    def entries(self) -> List[Tuple[int, ExpectedItem, SlideScore]]:
        return [(index, item, score) for index, (item, score) in sorted(self._scores.items())]

    def to_payload(
        self,
        completed: bool = False,
        teacher_feedback: Optional[str] = None,
        student_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = self.identifiers.to_payload()
        payload.update({
            "completed": completed,
            "teacherFeedback": teacher_feedback,
            "studentName": student_name,
            "slides": [slide_payload(index, item, score) for index, item, score in self.entries()],
        })
        return payload


class SessionRecorder:
    """Walks a deck of cards with one capture controller per card.

    Args:
        cards: The deck, in display order
        identifiers: Student and schedule the session belongs to
        controller_factory: ``factory(item, on_scored=callback)`` returning an IDLE controller
        submitter: Sends a payload to the service, e.g. ``SessionApiClient.submit_session``
    """

    def __init__(
        self,
        cards: Sequence[ExpectedItem],
        identifiers: SessionIdentifiers,
        controller_factory: ControllerFactory,
        submitter: Submitter,
    ):
        if not cards:
            raise InputError("A session needs at least one flashcard.")
        self.cards = list(cards)
        self.identifiers = identifiers
        self._controller_factory = controller_factory
        self._submitter = submitter

        self.index = 0
        self.draft = SessionDraft(identifiers)
        self.last_payload: Optional[Dict[str, Any]] = None
        self.controller = self._arm()

    @classmethod
    def from_material(
        cls,
        cards: Sequence[Mapping[str, Any]],
        identifiers: SessionIdentifiers,
        controller_factory: ControllerFactory,
        submitter: Submitter,
        subject: Union[str, int, None] = None,
    ) -> "SessionRecorder":
        """Build a recorder straight from material deck cards.

        ``subject`` (an id or a name such as "Filipino") picks the language
        profile; the identifiers' subject id is used when it is omitted.
        """
        if subject is None:
            subject = identifiers.subject_id
        return cls(build_deck(cards, subject), identifiers, controller_factory, submitter)

    @property
    def current_card(self) -> ExpectedItem:
        return self.cards[self.index]

    @property
    def current_score(self) -> Optional[SlideScore]:
        """Latest recorded score for the card on screen, if it was read."""
        return self.draft.score_for(self.index)

    @property
    def is_last_card(self) -> bool:
        return self.index == len(self.cards) - 1

    def _arm(self) -> CaptureController:
        index = self.index
        return self._controller_factory(
            self.cards[index], on_scored=lambda score: self.record(index, score)
        )

    def record(self, index: int, score: SlideScore) -> None:
        self.draft.record(index, self.cards[index], score)
        logger.debug("Recorded card %d: average=%s", index, score.average_score)

    async def _move_to(self, index: int) -> bool:
        if index == self.index:
            return False
        await self.controller.reset()
        self.index = index
        self.controller = self._arm()
        return True

    async def next_card(self) -> bool:
        """Advance one card; stays put on the last card."""
        return await self._move_to(min(self.index + 1, len(self.cards) - 1))

    async def previous_card(self) -> bool:
        """Go back one card; stays put on the first card."""
        return await self._move_to(max(0, self.index - 1))

    async def stop(
        self,
        completed: bool = False,
        teacher_feedback: Optional[str] = None,
        student_name: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """End the session and submit every recorded card.

        Local state is cleared and the deck rewound to the first card whether
        or not the submission succeeds; the submitted payload stays in
        ``last_payload`` so a failed submission can be retried.

        Returns:
            The service response, or None when no card was scored
        """
        try:
            if self.draft.is_empty:
                logger.info("Session stopped with no scored cards; nothing submitted")
                return None

            payload = self.draft.to_payload(
                completed=completed, teacher_feedback=teacher_feedback, student_name=student_name
            )
            self.last_payload = payload
            logger.info(
                "Submitting session | student=%s schedule=%s cards=%d",
                self.identifiers.student_id, self.identifiers.approved_schedule_id, len(self.draft),
            )
            return await asyncio.to_thread(self._submitter, payload)
        finally:
            await self.controller.reset()
            self.draft = SessionDraft(self.identifiers)
            self.index = 0
            self.controller = self._arm()
