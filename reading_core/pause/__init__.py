"""Voice/silence timing from the live input level."""
from .signal_monitor import AudioSignalMonitor, frame_decibels, measure_recording
from .sources import FrameSource, MicrophoneSource, WavFileSource, read_audio_mono

__all__ = [
    "AudioSignalMonitor",
    "frame_decibels",
    "measure_recording",
    "FrameSource",
    "MicrophoneSource",
    "WavFileSource",
    "read_audio_mono",
]
