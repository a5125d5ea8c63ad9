"""Capture attempt states and controller tunables."""
from __future__ import annotations

from enum import Enum


class CaptureState(Enum):
    IDLE = "idle"
    LISTENING = "listening"
    FINALIZING = "finalizing"
    SCORED = "scored"
    ERROR = "error"


# Pause before restarting a recognizer that ended on its own
RESTART_DEBOUNCE_S = 0.25

# Listening stops automatically after this long
MAX_LISTEN_S = 45.0

NOTHING_HEARD = "No speech detected. Please try again."
DEVICE_UNAVAILABLE = "Microphone or speech recognition is unavailable. Please check permissions and try again."
