"""Interface of the platform speech-to-text stream."""
from __future__ import annotations

from typing import Awaitable, Callable, Protocol

from ..models.capture import RecognitionHypothesis

UpdateCallback = Callable[[RecognitionHypothesis], None]
EndedCallback = Callable[[], Awaitable[None]]


class SpeechStream(Protocol):
    """Continuous recognizer session.

    ``start`` begins (or restarts) recognition and reports every interim or
    final transcript through ``on_update``. When the platform ends the session
    on its own, for example after a pause, it awaits ``on_ended``.
    ``stop`` ends the session and must be safe to call more than once.
    """

    async def start(self, on_update: UpdateCallback, on_ended: EndedCallback) -> None: ...

    async def stop(self) -> None: ...
