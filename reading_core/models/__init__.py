"""Value types passed between the capture engine components."""
from .capture import CaptureTiming, RecognitionHypothesis
from .expected_item import ExpectedItem, LanguageProfile, profile_for_subject
from .slide_score import SlideScore, WordMatch

__all__ = [
    "LanguageProfile",
    "ExpectedItem",
    "profile_for_subject",
    "RecognitionHypothesis",
    "CaptureTiming",
    "WordMatch",
    "SlideScore",
]
