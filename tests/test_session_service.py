import json

import pytest
from sqlalchemy.exc import OperationalError

from reading_core.errors import InputError, NotFoundError, PersistenceError
from remedial_api import service
from remedial_api.extensions import db
from remedial_api.models import (
    Activity,
    PerformanceRecord,
    PhonemicHistory,
    RemedialSession,
    Remark,
    SlidePerformance,
)
from remedial_api.remarks import build_ai_remarks, join_list
from remedial_api.service import get_session_progress, get_session_status, save_session
from remedial_api.validator import parse_submission


def save(payload):
    return save_session(parse_submission(payload))


def test_save_creates_session_slides_and_ledger(seeded, payload_factory):
    result = save(payload_factory())

    session = db.session.get(RemedialSession, result.session_id)
    assert session.overall_average == 85
    assert result.overall_average == 85
    assert [s.flashcard_index for s in session.slides] == [0, 1]
    assert session.completed_at is None

    activity = Activity.query.one()
    assert activity.type == "remedial"
    assert activity.subject == "Filipino"
    assert activity.title == "Week 3 Remedial"
    assert activity.description == "Remedial flashcards session for Filipino."

    record = PerformanceRecord.query.one()
    assert record.score == 85
    assert record.total_items == 2
    metadata = json.loads(record.record_metadata)
    assert metadata["sessionId"] == result.session_id
    assert metadata["phonemicLevel"] == "Pantig"


def test_resubmission_replaces_slides(seeded, payload_factory, slide_factory):
    first = save(payload_factory())
    second = save(payload_factory(slides=[slide_factory(0, 60), slide_factory(1, 70), slide_factory(2, 81)]))

    assert first.session_id == second.session_id
    assert RemedialSession.query.count() == 1
    assert SlidePerformance.query.count() == 3
    assert second.overall_average == 70
    assert PerformanceRecord.query.one().total_items == 3


def test_identical_resubmission_is_idempotent(seeded, payload_factory):
    first = save(payload_factory())
    second = save(payload_factory())

    assert first == second
    assert SlidePerformance.query.count() == 2
    assert Activity.query.count() == 1
    assert PerformanceRecord.query.count() == 1


def test_round_trip_returns_submitted_slides(seeded, payload_factory, slide_factory):
    slides = [slide_factory(1, 90), slide_factory(0, 70, transcription="ang bata")]
    save(payload_factory(slides=slides))

    progress = get_session_progress("S-100", 7)

    assert progress["found"] is True
    assert progress["session"]["overallAverage"] == 80
    returned = progress["slides"]
    assert [s["flashcardIndex"] for s in returned] == [0, 1]
    assert returned[0]["transcription"] == "ang bata"
    assert returned[1]["slideAverage"] == 90


def test_progress_for_unknown_session(app):
    assert get_session_progress("nobody", 1) == {"found": False}


def test_unknown_schedule_writes_nothing(seeded, payload_factory):
    with pytest.raises(NotFoundError):
        save(payload_factory(approvedScheduleId=999))
    assert RemedialSession.query.count() == 0


def test_mastery_recorded_once(seeded, payload_factory, slide_factory):
    passing = payload_factory(
        slides=[slide_factory(0, 90), slide_factory(1, 90)], completed=True, teacherFeedback="Great work."
    )
    save(passing)
    save(passing)

    assert PhonemicHistory.query.count() == 1
    history = PhonemicHistory.query.one()
    assert (history.student_id, history.subject_id, history.phonemic_id) == ("S-100", 2, 4)


def test_no_mastery_below_threshold_or_when_incomplete(seeded, payload_factory, slide_factory):
    save(payload_factory(slides=[slide_factory(0, 79)], completed=True, teacherFeedback="Keep going."))
    save(payload_factory(slides=[slide_factory(0, 95)], completed=False))

    assert PhonemicHistory.query.count() == 0


def test_request_threshold_overrides_default(seeded, payload_factory, slide_factory):
    save(payload_factory(
        slides=[slide_factory(0, 70)], completed=True, teacherFeedback="Ok.", masteryThreshold=70,
    ))
    assert PhonemicHistory.query.count() == 1


def test_completed_session_stores_teacher_remark(seeded, payload_factory):
    result = save(payload_factory(completed=True, teacherFeedback="Needs more practice on ng."))

    session = db.session.get(RemedialSession, result.session_id)
    assert session.completed_at is not None
    remark = Remark.query.one()
    assert remark.teacher_notes == "Needs more practice on ng."
    assert remark.content == result.ai_remarks


def test_failure_rolls_back_every_write(seeded, payload_factory, slide_factory, monkeypatch):
    save(payload_factory())

    def broken_ledger(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(service, "_upsert_ledger", broken_ledger)
    with pytest.raises(PersistenceError):
        save(payload_factory(slides=[slide_factory(0, 10)]))

    assert SlidePerformance.query.count() == 2
    assert RemedialSession.query.one().overall_average == 85


def test_failed_first_submission_leaves_no_session(seeded, payload_factory, monkeypatch):
    def broken_ledger(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(service, "_upsert_ledger", broken_ledger)
    with pytest.raises(PersistenceError):
        save(payload_factory())

    assert RemedialSession.query.count() == 0


def test_status_by_student(seeded, payload_factory):
    save(payload_factory(studentId="S-1", completed=True, teacherFeedback="Done."))
    save(payload_factory(studentId="S-2"))

    status = get_session_status(7, 2, ["S-1", "S-2", "S-3"])

    assert status == {
        "S-1": {"completed": True, "hasProgress": True},
        "S-2": {"completed": False, "hasProgress": True},
        "S-3": {"completed": False, "hasProgress": False},
    }
    assert get_session_status(7, 2, []) == {}
    assert get_session_status(7, 2, ["S-1"], phonemic_id=99)["S-1"]["hasProgress"] is False


def test_validation_messages(payload_factory, slide_factory):
    with pytest.raises(InputError, match="Missing required identifiers."):
        parse_submission(payload_factory(studentId=""))
    with pytest.raises(InputError, match="At least one slide performance is required."):
        parse_submission(payload_factory(slides=[]))
    with pytest.raises(InputError, match="Teacher feedback is required."):
        parse_submission(payload_factory(completed=True))
    with pytest.raises(InputError, match="Slide performance data is incomplete."):
        parse_submission(payload_factory(slides=[slide_factory(0, fluencyScore=None)]))
    with pytest.raises(InputError, match="Slide performance data is incomplete."):
        parse_submission(payload_factory(slides=[slide_factory(0, slideAverage="n/a")]))


def test_ai_remarks_weaknesses_and_strengths():
    text = build_ai_remarks(pronunciation_avg=70, accuracy_avg=90, reading_speed_avg=50, student_name="Ana")

    assert text.startswith("Ana is having difficulty with pronouncing words clearly and reading pace.")
    assert "Strengths include good accuracy." in text
    assert "short echo reading" in text
    assert "timed reading drills" in text


def test_ai_remarks_default_recommendation():
    text = build_ai_remarks(80, 80, 80)

    assert text == (
        "The student shows no major weaknesses in this session. "
        "Strengths are still building as more data is collected. "
        "Recommended next steps: keep a steady practice routine 2-3 times a week."
    )


def test_join_list():
    assert join_list(["a"]) == "a"
    assert join_list(["a", "b"]) == "a and b"
    assert join_list(["a", "b", "c"]) == "a, b, and c"
