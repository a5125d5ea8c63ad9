"""Data models owned by a single capture attempt."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RecognitionHypothesis:
    """Latest recognized text for the attempt.

    Attributes:
        text: Accumulated transcript
        confidence: Recognizer confidence in [0, 1], or None if not reported
        is_final: True when the recognizer marked the segment final
    """
    text: str
    confidence: Optional[float] = None
    is_final: bool = False

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass
class CaptureTiming:
    """Timing of one capture attempt, in milliseconds on the controller clock.

    Mutated by the signal monitor while listening; the controller stamps
    ``speech_end`` when it finalizes.
    """
    attempt_started_at: Optional[float] = None
    speech_start: Optional[float] = None
    speech_end: Optional[float] = None
    cumulative_silence_ms: float = 0.0
    # monitor run state
    last_voice_at: Optional[float] = None
    silence_started_at: Optional[float] = None

    @property
    def total_speech_ms(self) -> float:
        """Elapsed speech duration, never below 1 ms.

        Speech start falls back to the attempt start when no voiced frame
        was ever observed.
        """
        start = self.speech_start if self.speech_start is not None else self.attempt_started_at
        if start is None or self.speech_end is None:
            return 1.0
        return max(1.0, self.speech_end - start)

    @property
    def response_latency_ms(self) -> Optional[float]:
        if self.attempt_started_at is None or self.speech_end is None:
            return None
        return max(0.0, self.speech_end - self.attempt_started_at)
