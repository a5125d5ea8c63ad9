"""Frame sources feeding the audio signal monitor."""
from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Tuple

import numpy as np

from ..errors import DeviceError
from .rules import DEFAULT_SAMPLE_RATE, FRAME_SIZE

logger = logging.getLogger(__name__)

MICROPHONE_UNAVAILABLE = "Microphone is not available. Check permissions and try again."


class FrameSource(Protocol):
    """Anything the monitor can poll for frames of mono samples."""

    def open(self) -> None: ...

    def read_frame(self) -> Optional[np.ndarray]: ...

    def close(self) -> None: ...


def read_audio_mono(path: str) -> Tuple[np.ndarray, int]:
    """Read a recording as mono float32 in [-1, 1] plus its sample rate."""
    import soundfile as sf

    y, sr = sf.read(path, dtype="float32", always_2d=False)
    y = np.asarray(y)
    if y.ndim == 2:
        y = y.mean(axis=1)
    return y.astype(np.float32), int(sr)


class WavFileSource:
    """Replays a recorded WAV file frame by frame."""

    def __init__(self, path: str, frame_size: int = FRAME_SIZE):
        self.path = path
        self.frame_size = frame_size
        self.sample_rate = 0
        self._samples: Optional[np.ndarray] = None
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    @property
    def is_open(self) -> bool:
        return self._samples is not None

    def open(self) -> None:
        try:
            self._samples, self.sample_rate = read_audio_mono(self.path)
        except (OSError, RuntimeError) as exc:
            raise DeviceError(f"Could not read recording {self.path}.") from exc
        self._position = 0

    def read_frame(self) -> Optional[np.ndarray]:
        if self._samples is None or self._position >= len(self._samples):
            return None
        frame = self._samples[self._position:self._position + self.frame_size]
        self._position += len(frame)
        return frame

    def close(self) -> None:
        self._samples = None


class MicrophoneSource:
    """Live microphone input through ``sounddevice``.

    ``sounddevice`` needs PortAudio, so it is imported on ``open()`` rather
    than at module import time.
    """

    def __init__(
        self,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        frame_size: int = FRAME_SIZE,
        device: Any = None,
    ):
        self.sample_rate = sample_rate
        self.frame_size = frame_size
        self.device = device
        self._stream = None

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def open(self) -> None:
        if self._stream is not None:
            return
        try:
            import sounddevice as sd
        except (ImportError, OSError) as exc:  # OSError: PortAudio library missing
            raise DeviceError(MICROPHONE_UNAVAILABLE) from exc

        try:
            stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=1,
                dtype="float32",
                blocksize=self.frame_size,
                device=self.device,
            )
        except sd.PortAudioError as exc:
            raise DeviceError(MICROPHONE_UNAVAILABLE) from exc
        try:
            stream.start()
        except sd.PortAudioError as exc:
            stream.close()
            raise DeviceError(MICROPHONE_UNAVAILABLE) from exc
        self._stream = stream
        logger.debug("Microphone opened at %s Hz", self.sample_rate)

    def read_frame(self) -> Optional[np.ndarray]:
        if self._stream is None:
            return None
        available = self._stream.read_available
        if available <= 0:
            return None
        data, overflowed = self._stream.read(min(available, self.frame_size))
        if overflowed:
            logger.debug("Microphone input overflowed")
        return np.asarray(data)[:, 0]

    def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()
        logger.debug("Microphone closed")
