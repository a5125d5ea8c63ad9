"""Capture-and-scoring engine for remedial oral reading assessment."""
from .errors import (
    DeviceError,
    EmptyResultError,
    InputError,
    NotFoundError,
    PersistenceError,
    RemedialError,
)
from .models import (
    CaptureTiming,
    ExpectedItem,
    LanguageProfile,
    RecognitionHypothesis,
    SlideScore,
    WordMatch,
)

__all__ = [
    "RemedialError",
    "InputError",
    "NotFoundError",
    "DeviceError",
    "EmptyResultError",
    "PersistenceError",
    "LanguageProfile",
    "ExpectedItem",
    "RecognitionHypothesis",
    "CaptureTiming",
    "WordMatch",
    "SlideScore",
]
