from datetime import datetime

from reading_core.scoring.rounding import round_half_up

from .extensions import db


# LOOKUP TABLES (owned by the scheduling side, read-only here)

class ApprovedSchedule(db.Model):
    __tablename__ = "approved_remedial_schedule"

    request_id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    schedule_date = db.Column(db.Date, nullable=False)
    subject_id = db.Column(db.Integer, nullable=True)
    grade_id = db.Column(db.Integer, nullable=True)


class Subject(db.Model):
    __tablename__ = "subject"

    subject_id = db.Column(db.Integer, primary_key=True)
    subject_name = db.Column(db.String(100), nullable=False)


class PhonemicLevel(db.Model):
    __tablename__ = "phonemic_level"

    phonemic_id = db.Column(db.Integer, primary_key=True)
    subject_id = db.Column(db.Integer, nullable=True)
    level_name = db.Column(db.String(100), nullable=False)


# REMEDIAL SESSION TABLES

class SlidePerformance(db.Model):
    __tablename__ = "student_remedial_flashcard_performance"

    performance_id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(
        db.Integer, db.ForeignKey("student_remedial_session.session_id", ondelete="CASCADE"), nullable=False
    )
    flashcard_index = db.Column(db.Integer, nullable=False)
    expected_text = db.Column(db.Text, nullable=True)
    pronunciation_score = db.Column(db.Float, nullable=False)
    accuracy_score = db.Column(db.Float, nullable=False)
    fluency_score = db.Column(db.Float, nullable=False)
    completeness_score = db.Column(db.Float, nullable=False)
    reading_speed_wpm = db.Column(db.Float, nullable=False)
    slide_average = db.Column(db.Float, nullable=False)
    transcription = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "flashcardIndex": self.flashcard_index,
            "expectedText": self.expected_text,
            "pronunciationScore": self.pronunciation_score,
            "accuracyScore": self.accuracy_score,
            "fluencyScore": self.fluency_score,
            "completenessScore": self.completeness_score,
            "readingSpeedWpm": self.reading_speed_wpm,
            "slideAverage": self.slide_average,
            "transcription": self.transcription,
        }


class RemedialSession(db.Model):
    __tablename__ = "student_remedial_session"
    __table_args__ = (
        db.UniqueConstraint("student_id", "approved_schedule_id", name="uq_session_student_schedule"),
    )

    session_id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.String(64), nullable=False, index=True)
    approved_schedule_id = db.Column(db.Integer, nullable=False)
    subject_id = db.Column(db.Integer, nullable=True)
    grade_id = db.Column(db.Integer, nullable=True)
    phonemic_id = db.Column(db.Integer, nullable=True)
    material_id = db.Column(db.Integer, nullable=True)
    overall_average = db.Column(db.Float, nullable=True)
    ai_remarks = db.Column(db.Text, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    slides = db.relationship(
        "SlidePerformance",
        order_by="SlidePerformance.flashcard_index",
        lazy="select",
        passive_deletes=True,
    )

    def replace_slides(self, entries):
        """Swap the whole slide set for ``entries`` and recompute the overall average.

        This is the only place either value is written, so the stored average
        always matches the stored slides.
        """
        SlidePerformance.query.filter_by(session_id=self.session_id).delete(synchronize_session="fetch")
        db.session.add_all(
            SlidePerformance(
                session_id=self.session_id,
                flashcard_index=entry.flashcard_index,
                expected_text=entry.expected_text,
                pronunciation_score=entry.pronunciation_score,
                accuracy_score=entry.accuracy_score,
                fluency_score=entry.fluency_score,
                completeness_score=entry.completeness_score,
                reading_speed_wpm=entry.reading_speed_wpm,
                slide_average=entry.slide_average,
                transcription=entry.transcription,
            )
            for entry in entries
        )
        self.overall_average = average(entry.slide_average for entry in entries)
        db.session.flush()
        db.session.expire(self, ["slides"])

    def to_dict(self):
        return {
            "sessionId": self.session_id,
            "overallAverage": self.overall_average,
            "aiRemarks": self.ai_remarks,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }


class PhonemicHistory(db.Model):
    __tablename__ = "student_phonemic_history"
    __table_args__ = (
        db.UniqueConstraint("student_id", "subject_id", "phonemic_id", name="uq_phonemic_history"),
    )

    history_id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.String(64), nullable=False)
    subject_id = db.Column(db.Integer, nullable=False)
    phonemic_id = db.Column(db.Integer, nullable=False)
    achieved_at = db.Column(db.DateTime, default=datetime.utcnow)


# PERFORMANCE LEDGER (shared with other activity types)

class Activity(db.Model):
    __tablename__ = "activities"

    activity_id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(50), nullable=False)
    subject = db.Column(db.String(100), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    date = db.Column(db.Date, nullable=False)


class PerformanceRecord(db.Model):
    __tablename__ = "performance_records"
    __table_args__ = (
        db.UniqueConstraint("student_id", "activity_id", name="uq_performance_student_activity"),
    )

    record_id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.String(64), nullable=False)
    activity_id = db.Column(db.Integer, db.ForeignKey("activities.activity_id"), nullable=False)
    score = db.Column(db.Float, nullable=True)
    total_items = db.Column(db.Integer, nullable=True)
    grade = db.Column(db.String(20), nullable=True)
    # "metadata" is reserved on declarative models
    record_metadata = db.Column("metadata", db.Text, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)


class Remark(db.Model):
    __tablename__ = "remarks"

    remark_id = db.Column(db.Integer, primary_key=True)
    performance_record_id = db.Column(
        db.Integer, db.ForeignKey("performance_records.record_id"), nullable=False, unique=True
    )
    content = db.Column(db.Text, nullable=True)
    teacher_notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


def average(values):
    """Half-up rounded mean; 0 for no values."""
    values = list(values)
    return round_half_up(sum(values) / max(1, len(values)))
