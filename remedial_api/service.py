"""Transactional persistence of remedial sessions.

One submission writes, in a single transaction:

1. the session row (found or created by student + approved schedule)
2. the full slide set, replacing whatever was stored before
3. the shared performance ledger (activity, performance record, remark)
4. the mastery record, when the session clears the threshold

A retry of the same submission leaves the same final state.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from reading_core.errors import NotFoundError, PersistenceError

from .extensions import db
from .models import (
    Activity,
    ApprovedSchedule,
    PerformanceRecord,
    PhonemicHistory,
    PhonemicLevel,
    RemedialSession,
    Remark,
    SlidePerformance,
    Subject,
    average,
)
from .remarks import build_ai_remarks
from .validator import SessionSubmission

logger = logging.getLogger(__name__)

DEFAULT_MASTERY_THRESHOLD = 80
DEFAULT_SUBJECT_NAME = "Remedial"
ACTIVITY_TYPE = "remedial"

SCHEDULE_NOT_FOUND = "Approved schedule not found."
SERVER_ERROR = "Server error."


@dataclass(frozen=True)
class SessionResult:
    session_id: int
    overall_average: float
    ai_remarks: str
    completed: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "overallAverage": self.overall_average,
            "aiRemarks": self.ai_remarks,
            "completed": self.completed,
        }


def save_session(
    submission: SessionSubmission,
    default_threshold: float = DEFAULT_MASTERY_THRESHOLD,
) -> SessionResult:
    """Persist a validated submission.

    Args:
        submission: Output of ``parse_submission``
        default_threshold: Mastery threshold when the request carries none

    Returns:
        SessionResult

    Raises:
        NotFoundError: Unknown approved schedule (nothing written)
        PersistenceError: Any storage failure (everything rolled back)
    """
    threshold = submission.mastery_threshold
    if threshold is None:
        threshold = default_threshold
    completed_at = datetime.utcnow() if submission.completed else None

    try:
        schedule = _find_schedule(submission.approved_schedule_id)

        session = _find_or_create_session(submission)
        session.replace_slides(submission.slides)

        ai_remarks = build_ai_remarks(
            pronunciation_avg=average(s.pronunciation_score for s in submission.slides),
            accuracy_avg=average(s.accuracy_score for s in submission.slides),
            reading_speed_avg=average(s.reading_speed_wpm for s in submission.slides),
            student_name=submission.student_name,
        )
        session.ai_remarks = ai_remarks
        session.completed_at = completed_at
        session.subject_id = submission.subject_id
        session.grade_id = submission.grade_id
        session.phonemic_id = submission.phonemic_id
        session.material_id = submission.material_id

        record = _upsert_ledger(submission, session, schedule, completed_at)
        if submission.teacher_feedback:
            _upsert_remark(record, ai_remarks, submission.teacher_feedback)

        if submission.completed and submission.phonemic_id is not None and session.overall_average >= threshold:
            _record_mastery(submission)

        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception(
            "Remedial session save failed | student=%s schedule=%s",
            submission.student_id, submission.approved_schedule_id,
        )
        raise PersistenceError(SERVER_ERROR) from exc
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        "Saved remedial session %s | student=%s slides=%d average=%s completed=%s",
        session.session_id, submission.student_id, len(submission.slides),
        session.overall_average, submission.completed,
    )
    return SessionResult(
        session_id=session.session_id,
        overall_average=session.overall_average,
        ai_remarks=ai_remarks,
        completed=submission.completed,
    )


def _find_schedule(schedule_id: int) -> ApprovedSchedule:
    schedule = db.session.get(ApprovedSchedule, schedule_id)
    if schedule is None:
        raise NotFoundError(SCHEDULE_NOT_FOUND)
    return schedule


def _find_or_create_session(submission: SessionSubmission) -> RemedialSession:
    session = RemedialSession.query.filter_by(
        student_id=submission.student_id,
        approved_schedule_id=submission.approved_schedule_id,
    ).first()
    if session is None:
        session = RemedialSession(
            student_id=submission.student_id,
            approved_schedule_id=submission.approved_schedule_id,
        )
        db.session.add(session)
        db.session.flush()
    return session


def _subject_name(subject_id: int) -> str:
    subject = db.session.get(Subject, subject_id)
    if subject is None or not (subject.subject_name or "").strip():
        return DEFAULT_SUBJECT_NAME
    return subject.subject_name.strip()


def _phonemic_level_name(phonemic_id: Optional[int]) -> Optional[str]:
    if phonemic_id is None:
        return None
    level = db.session.get(PhonemicLevel, phonemic_id)
    return level.level_name if level is not None else None


def _upsert_ledger(
    submission: SessionSubmission,
    session: RemedialSession,
    schedule: ApprovedSchedule,
    completed_at: Optional[datetime],
) -> PerformanceRecord:
    subject_name = _subject_name(submission.subject_id)

    activity = Activity.query.filter_by(
        type=ACTIVITY_TYPE,
        subject=subject_name,
        title=schedule.title,
        date=schedule.schedule_date,
    ).first()
    if activity is None:
        activity = Activity(
            type=ACTIVITY_TYPE,
            subject=subject_name,
            title=schedule.title,
            description=f"Remedial flashcards session for {subject_name}.",
            date=schedule.schedule_date,
        )
        db.session.add(activity)
        db.session.flush()

    record = PerformanceRecord.query.filter_by(
        student_id=submission.student_id, activity_id=activity.activity_id
    ).first()
    if record is None:
        record = PerformanceRecord(student_id=submission.student_id, activity_id=activity.activity_id)
        db.session.add(record)

    record.score = session.overall_average
    record.total_items = len(submission.slides)
    record.grade = None
    record.completed_at = completed_at
    record.record_metadata = json.dumps({
        "approvedScheduleId": submission.approved_schedule_id,
        "subjectId": submission.subject_id,
        "gradeId": submission.grade_id,
        "phonemicId": submission.phonemic_id,
        "phonemicLevel": _phonemic_level_name(submission.phonemic_id),
        "materialId": submission.material_id,
        "sessionId": session.session_id,
    })
    db.session.flush()
    return record


def _upsert_remark(record: PerformanceRecord, ai_remarks: str, teacher_notes: str) -> None:
    remark = Remark.query.filter_by(performance_record_id=record.record_id).first()
    if remark is None:
        remark = Remark(performance_record_id=record.record_id)
        db.session.add(remark)
    remark.content = ai_remarks
    remark.teacher_notes = teacher_notes


def _record_mastery(submission: SessionSubmission) -> None:
    existing = PhonemicHistory.query.filter_by(
        student_id=submission.student_id,
        subject_id=submission.subject_id,
        phonemic_id=submission.phonemic_id,
    ).first()
    if existing is not None:
        return
    db.session.add(PhonemicHistory(
        student_id=submission.student_id,
        subject_id=submission.subject_id,
        phonemic_id=submission.phonemic_id,
        achieved_at=datetime.utcnow(),
    ))
    logger.info(
        "Mastery recorded | student=%s subject=%s phonemic=%s",
        submission.student_id, submission.subject_id, submission.phonemic_id,
    )


def get_session_progress(student_id: str, approved_schedule_id: int) -> Dict[str, Any]:
    """Stored session and its slides ordered by card index, if any."""
    session = RemedialSession.query.filter_by(
        student_id=student_id, approved_schedule_id=approved_schedule_id
    ).first()
    if session is None:
        return {"found": False}
    return {
        "found": True,
        "session": session.to_dict(),
        "slides": [slide.to_dict() for slide in session.slides],
    }


def get_session_status(
    approved_schedule_id: int,
    subject_id: int,
    student_ids: Iterable[str],
    phonemic_id: Optional[int] = None,
) -> Dict[str, Dict[str, bool]]:
    """Progress flags per student for one schedule.

    ``hasProgress`` means slides are stored; ``completed`` additionally
    requires the session to be marked complete.
    """
    ids: List[str] = [str(sid) for sid in student_ids if str(sid).strip()]
    if not ids:
        return {}

    query = RemedialSession.query.filter(
        RemedialSession.approved_schedule_id == approved_schedule_id,
        RemedialSession.subject_id == subject_id,
        RemedialSession.student_id.in_(ids),
    )
    if phonemic_id is not None:
        query = query.filter(RemedialSession.phonemic_id == phonemic_id)
    sessions = query.all()

    session_ids = [s.session_id for s in sessions]
    with_slides = set()
    if session_ids:
        rows = (
            db.session.query(SlidePerformance.session_id)
            .filter(SlidePerformance.session_id.in_(session_ids))
            .distinct()
            .all()
        )
        with_slides = {row[0] for row in rows}

    status = {sid: {"completed": False, "hasProgress": False} for sid in ids}
    for session in sessions:
        has_progress = session.session_id in with_slides
        status[session.student_id] = {
            "completed": has_progress and session.completed_at is not None,
            "hasProgress": has_progress,
        }
    return status
