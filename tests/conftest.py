import asyncio
import sys
from datetime import date
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from reading_core.models import RecognitionHypothesis  # noqa: E402
from remedial_api import create_app  # noqa: E402
from remedial_api.config import TestConfig  # noqa: E402
from remedial_api.extensions import db  # noqa: E402
from remedial_api.models import ApprovedSchedule, PhonemicLevel, Subject  # noqa: E402


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeSpeechStream:
    def __init__(self, fail_on_starts=(), start_delay=0):
        self.fail_on_starts = set(fail_on_starts)
        self.start_delay = start_delay
        self.starts = 0
        self.stops = 0
        self.active = False
        self.on_update = None
        self.on_ended = None

    async def start(self, on_update, on_ended):
        self.starts += 1
        if self.starts in self.fail_on_starts:
            raise RuntimeError("speech service unavailable")
        if self.start_delay:
            await asyncio.sleep(self.start_delay)
        self.on_update, self.on_ended = on_update, on_ended
        self.active = True

    async def stop(self):
        self.stops += 1
        self.active = False

    def say(self, text, confidence=None, is_final=False):
        self.on_update(RecognitionHypothesis(text=text, confidence=confidence, is_final=is_final))

    async def end(self):
        self.active = False
        await self.on_ended()


class FakeFrameSource:
    def __init__(self, frames=(), fail_on_open=None):
        self.frames = list(frames)
        self.fail_on_open = fail_on_open
        self.opened = 0
        self.closed = 0

    @property
    def is_open(self):
        return self.opened > self.closed

    def open(self):
        if self.fail_on_open is not None:
            raise self.fail_on_open
        self.opened += 1

    def read_frame(self):
        return self.frames.pop(0) if self.frames else None

    def close(self):
        if self.is_open:
            self.closed += 1


@pytest.fixture
def clock():
    return FakeClock(1000.0)


@pytest.fixture
def recognizer():
    return FakeSpeechStream()


@pytest.fixture
def source():
    return FakeFrameSource()


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seeded(app):
    db.session.add_all([
        ApprovedSchedule(request_id=7, title="Week 3 Remedial", schedule_date=date(2026, 10, 12), subject_id=2, grade_id=3),
        Subject(subject_id=1, subject_name="English"),
        Subject(subject_id=2, subject_name="Filipino"),
        PhonemicLevel(phonemic_id=4, subject_id=2, level_name="Pantig"),
    ])
    db.session.commit()
    return app


def make_slide(index, average=80, **overrides):
    slide = {
        "flashcardIndex": index,
        "expectedText": f"card {index}",
        "pronunciationScore": average,
        "accuracyScore": average,
        "fluencyScore": average,
        "completenessScore": 100,
        "readingSpeedWpm": 90,
        "slideAverage": average,
        "transcription": f"card {index}",
    }
    slide.update(overrides)
    return slide


def make_payload(slides=None, **overrides):
    payload = {
        "studentId": "S-100",
        "approvedScheduleId": 7,
        "subjectId": 2,
        "gradeId": 3,
        "phonemicId": 4,
        "materialId": 11,
        "slides": slides if slides is not None else [make_slide(0, 80), make_slide(1, 90)],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def slide_factory():
    return make_slide


@pytest.fixture
def payload_factory():
    return make_payload


@pytest.fixture
def speech_stream_factory():
    return FakeSpeechStream


@pytest.fixture
def frame_source_factory():
    return FakeFrameSource
