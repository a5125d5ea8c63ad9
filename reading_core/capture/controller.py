"""Capture controller: one attempt at reading one card.

    IDLE --start--> LISTENING --stop/deadline--> FINALIZING --> SCORED
                        |                            |
                        +--device failure--> ERROR   +--nothing heard--> IDLE

Recognizers end sessions on their own after short pauses, so while
LISTENING an unexpected end is followed by a debounced restart. Two flags
guard every callback: ``manual_stop_requested`` (the student pressed stop)
and ``finalized`` (scoring has begun; late callbacks are ignored).
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Callable, Optional

from ..errors import DeviceError, EmptyResultError
from ..models.capture import CaptureTiming, RecognitionHypothesis
from ..models.expected_item import ExpectedItem
from ..models.slide_score import SlideScore
from ..pause.rules import FRAME_INTERVAL_S
from ..pause.signal_monitor import AudioSignalMonitor, monotonic_ms
from ..pause.sources import FrameSource
from ..scoring.aggregator import score_attempt
from .recognizer import SpeechStream
from .states import (
    DEVICE_UNAVAILABLE,
    MAX_LISTEN_S,
    NOTHING_HEARD,
    RESTART_DEBOUNCE_S,
    CaptureState,
)

logger = logging.getLogger(__name__)

ScoreCallback = Callable[[SlideScore], None]
Scorer = Callable[[ExpectedItem, RecognitionHypothesis, CaptureTiming], SlideScore]


class CaptureController:
    """Drives a single card from IDLE to SCORED.

    Args:
        item: Card being read
        recognizer: Platform speech stream
        source: Microphone frame source for the signal monitor
        on_scored: Called with the SlideScore once scoring succeeds
        clock: Returns the current instant in milliseconds
        restart_delay: Debounce before restarting an ended recognizer (seconds)
        max_listen: Automatic stop after this many seconds; None disables it
        frame_interval: Signal monitor polling interval (seconds)
        scorer: Scoring function, ``score_attempt`` by default
    """

    def __init__(
        self,
        item: ExpectedItem,
        recognizer: SpeechStream,
        source: FrameSource,
        *,
        on_scored: Optional[ScoreCallback] = None,
        clock: Optional[Callable[[], float]] = None,
        restart_delay: float = RESTART_DEBOUNCE_S,
        max_listen: Optional[float] = MAX_LISTEN_S,
        frame_interval: float = FRAME_INTERVAL_S,
        scorer: Scorer = score_attempt,
    ):
        self.item = item
        self.on_scored = on_scored
        self._recognizer = recognizer
        self._source = source
        self._clock = clock or monotonic_ms
        self._restart_delay = restart_delay
        self._max_listen = max_listen
        self._frame_interval = frame_interval
        self._scorer = scorer

        self.attempt_id = ""
        self.state = CaptureState.IDLE
        self.monitor: Optional[AudioSignalMonitor] = None
        self._monitor_task: Optional[asyncio.Task] = None
        self._deadline_task: Optional[asyncio.Task] = None
        self._recognizer_active = False
        self._clear()

    def _clear(self) -> None:
        self.manual_stop_requested = False
        self.finalized = False
        self.restarts = 0
        self.hypothesis: Optional[RecognitionHypothesis] = None
        self.timing = CaptureTiming()
        self.score: Optional[SlideScore] = None
        self.feedback = ""
        self.error: Optional[Exception] = None

    def _transition(self, new_state: CaptureState, reason: str) -> None:
        logger.info(
            "[CAPTURE %s] Transition %s -> %s | reason=%s",
            self.attempt_id, self.state.name, new_state.name, reason,
        )
        self.state = new_state

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """Open the microphone, start the monitor and the recognizer.

        Returns:
            True if listening began; False if not IDLE or the devices failed
        """
        if self.state is not CaptureState.IDLE:
            logger.info("[CAPTURE %s] Start ignored in state %s", self.attempt_id, self.state.name)
            return False

        self._clear()
        self.attempt_id = uuid.uuid4().hex[:8]
        self.timing = CaptureTiming(attempt_started_at=self._clock())
        self.monitor = AudioSignalMonitor(self.timing, clock=self._clock)

        try:
            self._source.open()
            self._monitor_task = asyncio.create_task(self.monitor.run(self._source, self._frame_interval))
            self._transition(CaptureState.LISTENING, "start")
            started = await self._start_stream()
        except Exception as exc:  # platform microphone / speech failures
            await self._fail(exc, "start_failed")
            return False

        if not started:
            return False
        if self._max_listen:
            self._deadline_task = asyncio.create_task(self._deadline(self._max_listen))
        return True

    async def manual_stop(self) -> Optional[SlideScore]:
        """Student pressed stop: finalize and score what was heard."""
        if self.state is not CaptureState.LISTENING or self.finalized:
            return self.score
        self.manual_stop_requested = True
        return await self._finalize("manual_stop")

    async def reset(self) -> None:
        """Release everything and return to IDLE with empty buffers."""
        if self.state in (CaptureState.LISTENING, CaptureState.FINALIZING):
            self.finalized = True
            await self._release()
        self._clear()
        if self.state is not CaptureState.IDLE:
            self._transition(CaptureState.IDLE, "reset")

    async def close(self) -> None:
        await self.reset()

    # ------------------------------------------------------------------
    # Recognizer callbacks
    # ------------------------------------------------------------------

    def on_recognition_update(self, hypothesis: RecognitionHypothesis) -> None:
        if self.finalized or self.state is not CaptureState.LISTENING:
            return
        if hypothesis.is_blank:
            return

        confidence = hypothesis.confidence
        previous = self.hypothesis
        if previous is not None and previous.confidence is not None:
            if confidence is None or previous.confidence > confidence:
                confidence = previous.confidence
        self.hypothesis = RecognitionHypothesis(
            text=hypothesis.text, confidence=confidence, is_final=hypothesis.is_final
        )

    async def on_recognition_ended(self) -> None:
        if self.finalized:
            return
        if self.manual_stop_requested:
            await self._finalize("manual_stop")
            return
        if self.state is not CaptureState.LISTENING:
            return

        self._recognizer_active = False
        await asyncio.sleep(self._restart_delay)

        # the student may have stopped during the debounce
        if self.finalized or self.state is not CaptureState.LISTENING:
            return
        if self.manual_stop_requested:
            await self._finalize("manual_stop")
            return

        self.restarts += 1
        logger.info("[CAPTURE %s] Recognizer ended early, restart #%d", self.attempt_id, self.restarts)
        try:
            await self._start_stream()
        except Exception as exc:  # platform speech failures
            await self._fail(exc, "restart_failed")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _superseded(self, attempt_id: str) -> bool:
        return self.finalized or self.state is not CaptureState.LISTENING or self.attempt_id != attempt_id

    async def _start_stream(self) -> bool:
        """Start the speech stream for the current attempt.

        Starting can take a while on real platforms. If the attempt was
        stopped, reset or replaced in the meantime, the stream that just came
        up is stopped again and False is returned.
        """
        attempt_id = self.attempt_id
        try:
            await self._recognizer.start(self.on_recognition_update, self.on_recognition_ended)
        except Exception:
            if self._superseded(attempt_id):
                logger.warning(
                    "[CAPTURE %s] Speech stream failed after the attempt ended", attempt_id, exc_info=True
                )
                return False
            raise

        if self._superseded(attempt_id):
            logger.info("[CAPTURE %s] Attempt ended while the speech stream was starting", attempt_id)
            try:
                await self._recognizer.stop()
            except Exception:  # nothing left to release
                logger.warning("[CAPTURE %s] Speech stream did not stop cleanly", attempt_id, exc_info=True)
            return False

        self._recognizer_active = True
        return True

    async def _deadline(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
        if self.state is CaptureState.LISTENING and not self.finalized:
            await self._finalize("max_duration")

    async def _finalize(self, reason: str) -> Optional[SlideScore]:
        if self.finalized:
            return self.score
        self.finalized = True
        self._transition(CaptureState.FINALIZING, reason)

        await self._release()
        self.timing.speech_end = self._clock()

        hypothesis = self.hypothesis
        if hypothesis is None or hypothesis.is_blank:
            self._clear()
            self.error = EmptyResultError(NOTHING_HEARD)
            self.feedback = NOTHING_HEARD
            self._transition(CaptureState.IDLE, "nothing_heard")
            return None

        self.score = self._scorer(self.item, hypothesis, self.timing)
        self.feedback = self.score.remark
        self._transition(CaptureState.SCORED, reason)
        if self.on_scored is not None:
            self.on_scored(self.score)
        return self.score

    async def _fail(self, exc: Exception, reason: str) -> None:
        logger.warning("[CAPTURE %s] %s: %s", self.attempt_id, reason, exc)
        self.finalized = True
        await self._release()
        self.error = exc if isinstance(exc, DeviceError) else DeviceError(DEVICE_UNAVAILABLE)
        self.feedback = self.error.message
        self._transition(CaptureState.ERROR, reason)

    async def _release(self) -> None:
        """Stop the recognizer, the monitor and the microphone; safe to repeat."""
        deadline, self._deadline_task = self._deadline_task, None
        if deadline is not None and deadline is not asyncio.current_task():
            deadline.cancel()

        try:
            if self._recognizer_active:
                self._recognizer_active = False
                await self._recognizer.stop()
        except Exception:  # keep releasing the microphone
            logger.warning("[CAPTURE %s] Speech stream did not stop cleanly", self.attempt_id, exc_info=True)
        finally:
            await self._stop_monitor()

    async def _stop_monitor(self) -> None:
        if self.monitor is not None:
            self.monitor.stop()
        task, self._monitor_task = self._monitor_task, None
        try:
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
            elif task is not None and not task.cancelled() and task.exception() is not None:
                logger.warning(
                    "[CAPTURE %s] Signal monitor failed", self.attempt_id, exc_info=task.exception()
                )
        finally:
            self._source.close()
