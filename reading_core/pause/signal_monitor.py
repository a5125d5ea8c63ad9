"""Voice/silence detection from frame energy.

The monitor only measures timing; it never looks at what was said. Each frame
is reduced to a dB level, classified as voice or silence, and the shared
CaptureTiming is updated in place.
"""
from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Callable, Optional

import numpy as np

from ..models.capture import CaptureTiming
from .rules import (
    DB_EPSILON,
    FRAME_INTERVAL_S,
    FRAME_SIZE,
    SILENCE_RUN_MS,
    VOICE_DB_THRESHOLD,
)
from .sources import FrameSource, WavFileSource

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def frame_decibels(samples: np.ndarray) -> float:
    """Level of a frame in dBFS: ``20 * log10(rms + eps)``.

    Integer PCM frames are scaled to [-1, 1] first.
    """
    frame = np.asarray(samples)
    if frame.size == 0:
        return 20.0 * math.log10(DB_EPSILON)
    if np.issubdtype(frame.dtype, np.integer):
        frame = frame.astype(np.float64) / float(np.iinfo(frame.dtype).max)
    rms = float(np.sqrt(np.mean(np.square(frame, dtype=np.float64))))
    return 20.0 * math.log10(rms + DB_EPSILON)


class AudioSignalMonitor:
    """Tracks speech start and cumulative silence for one capture attempt.

    Args:
        timing: CaptureTiming to update in place
        clock: Returns the current instant in milliseconds
        threshold_db: Frames above this level are voice
        silence_run_ms: Minimum silence after voice that counts as a pause
    """

    def __init__(
        self,
        timing: CaptureTiming,
        clock: Optional[Callable[[], float]] = None,
        threshold_db: float = VOICE_DB_THRESHOLD,
        silence_run_ms: float = SILENCE_RUN_MS,
    ):
        self.timing = timing
        self.clock = clock or monotonic_ms
        self.threshold_db = threshold_db
        self.silence_run_ms = silence_run_ms
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def process_frame(self, samples: np.ndarray, now: Optional[float] = None) -> bool:
        """Classify one frame and update timing.

        Returns:
            True if the frame was voice
        """
        now = self.clock() if now is None else now
        timing = self.timing

        if frame_decibels(samples) > self.threshold_db:
            timing.last_voice_at = now
            if timing.speech_start is None:
                timing.speech_start = now
            timing.silence_started_at = None
            return True

        if timing.silence_started_at is None:
            timing.silence_started_at = now
        elif timing.last_voice_at is not None and now - timing.silence_started_at > self.silence_run_ms:
            # count the run once; the next voice frame starts a new one
            timing.cumulative_silence_ms += now - timing.silence_started_at
            timing.last_voice_at = None
        return False

    async def run(self, source: FrameSource, interval: float = FRAME_INTERVAL_S) -> None:
        """Poll ``source`` once per tick until ``stop()``; closes the source on exit."""
        self._running = True
        try:
            while self._running:
                frame = source.read_frame()
                if frame is not None and len(frame):
                    self.process_frame(frame)
                await asyncio.sleep(interval)
        finally:
            self._running = False
            source.close()

    def stop(self) -> None:
        self._running = False


def measure_recording(path: str, frame_size: int = FRAME_SIZE) -> CaptureTiming:
    """Replay a recording through the monitor using sample positions as the clock.

    Args:
        path: WAV file path
        frame_size: Samples per frame

    Returns:
        CaptureTiming with the attempt starting at 0 ms and ending at the file end
    """
    source = WavFileSource(path, frame_size=frame_size)
    source.open()
    try:
        timing = CaptureTiming(attempt_started_at=0.0)
        monitor = AudioSignalMonitor(timing)
        sample_rate = float(source.sample_rate)
        while True:
            frame = source.read_frame()
            if frame is None:
                break
            monitor.process_frame(frame, now=source.position / sample_rate * 1000.0)
        timing.speech_end = source.position / sample_rate * 1000.0
    finally:
        source.close()

    logger.debug(
        "Measured %s: speech_start=%s silence=%.0fms",
        path, timing.speech_start, timing.cumulative_silence_ms,
    )
    return timing
