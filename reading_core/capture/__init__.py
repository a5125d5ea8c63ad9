"""Capture state machine tying the microphone, recognizer and scorer together."""
from .controller import CaptureController
from .recognizer import SpeechStream
from .states import CaptureState

__all__ = ["CaptureController", "CaptureState", "SpeechStream"]
