"""Request payload validation for remedial session submissions."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from reading_core.errors import InputError

MISSING_IDENTIFIERS = "Missing required identifiers."
MISSING_SLIDES = "At least one slide performance is required."
MISSING_FEEDBACK = "Teacher feedback is required."
INCOMPLETE_SLIDE = "Slide performance data is incomplete."
INVALID_BODY = "Request body must be a JSON object."

SLIDE_METRICS = (
    ("pronunciation_score", "pronunciationScore"),
    ("accuracy_score", "accuracyScore"),
    ("fluency_score", "fluencyScore"),
    ("completeness_score", "completenessScore"),
    ("reading_speed_wpm", "readingSpeedWpm"),
    ("slide_average", "slideAverage"),
)


@dataclass(frozen=True)
class SlideEntry:
    flashcard_index: int
    pronunciation_score: float
    accuracy_score: float
    fluency_score: float
    completeness_score: float
    reading_speed_wpm: float
    slide_average: float
    expected_text: Optional[str] = None
    transcription: Optional[str] = None


@dataclass(frozen=True)
class SessionSubmission:
    student_id: str
    approved_schedule_id: int
    subject_id: int
    grade_id: int
    slides: List[SlideEntry]
    phonemic_id: Optional[int] = None
    material_id: Optional[int] = None
    completed: bool = False
    teacher_feedback: Optional[str] = None
    student_name: Optional[str] = None
    mastery_threshold: Optional[float] = None


def to_number(value: Any) -> Optional[float]:
    """Finite float from a number or numeric string, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def to_id(value: Any) -> Optional[int]:
    number = to_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_slide(raw: Any) -> SlideEntry:
    if not isinstance(raw, Mapping):
        raise InputError(INCOMPLETE_SLIDE)

    index = to_id(raw.get("flashcardIndex"))
    if index is None:
        raise InputError(INCOMPLETE_SLIDE)

    metrics = {}
    for field_name, key in SLIDE_METRICS:
        value = to_number(raw.get(key))
        if value is None:
            raise InputError(INCOMPLETE_SLIDE)
        metrics[field_name] = value

    return SlideEntry(
        flashcard_index=index,
        expected_text=to_text(raw.get("expectedText")),
        transcription=to_text(raw.get("transcription")),
        **metrics,
    )


def parse_submission(payload: Any) -> SessionSubmission:
    """Validate a submission body before any storage access.

    Args:
        payload: Decoded JSON body

    Returns:
        SessionSubmission

    Raises:
        InputError: With a message safe to show to the teacher
    """
    if not isinstance(payload, Mapping):
        raise InputError(INVALID_BODY)

    student_id = to_text(payload.get("studentId"))
    schedule_id = to_id(payload.get("approvedScheduleId"))
    subject_id = to_id(payload.get("subjectId"))
    grade_id = to_id(payload.get("gradeId"))
    if student_id is None or schedule_id is None or subject_id is None or grade_id is None:
        raise InputError(MISSING_IDENTIFIERS)

    raw_slides = payload.get("slides")
    if not isinstance(raw_slides, list) or not raw_slides:
        raise InputError(MISSING_SLIDES)

    completed = bool(payload.get("completed"))
    teacher_feedback = to_text(payload.get("teacherFeedback"))
    if completed and not teacher_feedback:
        raise InputError(MISSING_FEEDBACK)

    slides = [parse_slide(raw) for raw in raw_slides]

    return SessionSubmission(
        student_id=student_id,
        approved_schedule_id=schedule_id,
        subject_id=subject_id,
        grade_id=grade_id,
        slides=slides,
        phonemic_id=to_id(payload.get("phonemicId")),
        material_id=to_id(payload.get("materialId")),
        completed=completed,
        teacher_feedback=teacher_feedback,
        student_name=to_text(payload.get("studentName")),
        mastery_threshold=to_number(payload.get("masteryThreshold")),
    )
