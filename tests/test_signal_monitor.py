import asyncio
import sys
from unittest.mock import MagicMock

import numpy as np
import pytest
import soundfile as sf

from reading_core.errors import DeviceError
from reading_core.models import CaptureTiming
from reading_core.pause import (
    AudioSignalMonitor,
    MicrophoneSource,
    WavFileSource,
    frame_decibels,
    measure_recording,
)

VOICE = np.full(2048, 0.1, dtype=np.float32)
SILENCE = np.zeros(2048, dtype=np.float32)


def test_frame_decibels():
    assert frame_decibels(VOICE) == pytest.approx(-20.0, abs=0.01)
    assert frame_decibels(SILENCE) < -200
    full_scale = np.full(512, np.iinfo(np.int16).max, dtype=np.int16)
    assert frame_decibels(full_scale) == pytest.approx(0.0, abs=0.01)


def test_silence_run_counts_once_after_voice():
    timing = CaptureTiming()
    monitor = AudioSignalMonitor(timing)

    assert monitor.process_frame(VOICE, now=0) is True
    monitor.process_frame(SILENCE, now=100)  # run starts
    monitor.process_frame(SILENCE, now=250)  # 150 ms, not yet a pause
    monitor.process_frame(SILENCE, now=350)  # 250 ms, counted
    monitor.process_frame(SILENCE, now=500)  # same run, not counted again

    assert timing.speech_start == 0
    assert timing.cumulative_silence_ms == 250
    assert timing.last_voice_at is None

    monitor.process_frame(VOICE, now=600)
    assert timing.silence_started_at is None
    assert timing.speech_start == 0


def test_leading_silence_is_not_a_pause():
    timing = CaptureTiming()
    monitor = AudioSignalMonitor(timing)
    for now in (0, 300, 600):
        monitor.process_frame(SILENCE, now=now)
    assert timing.cumulative_silence_ms == 0
    assert timing.speech_start is None


@pytest.mark.asyncio
async def test_run_polls_until_stopped_and_closes_source(frame_source_factory):
    source = frame_source_factory(frames=[VOICE, SILENCE])
    source.open()
    timing = CaptureTiming()
    monitor = AudioSignalMonitor(timing, clock=lambda: 42.0)

    task = asyncio.create_task(monitor.run(source, interval=0))
    await asyncio.sleep(0.01)
    monitor.stop()
    await task

    assert timing.speech_start == 42.0
    assert not source.is_open
    assert not monitor.running


def test_measure_recording(tmp_path):
    sr = 16000
    tone = (0.3 * np.sin(2 * np.pi * 220 * np.arange(sr // 2) / sr)).astype(np.float32)
    audio = np.concatenate([tone, np.zeros(sr // 2, dtype=np.float32), tone])
    path = tmp_path / "reading.wav"
    sf.write(str(path), audio, sr)

    timing = measure_recording(str(path))

    assert timing.speech_start == pytest.approx(2048 / sr * 1000)
    assert timing.cumulative_silence_ms > 0
    assert timing.speech_end == pytest.approx(1500.0)


def test_wav_source_frames(tmp_path):
    path = tmp_path / "short.wav"
    sf.write(str(path), np.zeros(3000, dtype=np.float32), 8000)
    source = WavFileSource(str(path), frame_size=2048)
    source.open()

    assert len(source.read_frame()) == 2048
    assert len(source.read_frame()) == 952
    assert source.read_frame() is None
    source.close()
    assert not source.is_open


def fake_sounddevice(monkeypatch):
    sd = MagicMock()
    sd.PortAudioError = type("PortAudioError", (Exception,), {})
    monkeypatch.setitem(sys.modules, "sounddevice", sd)
    return sd


def test_microphone_open_and_close(monkeypatch):
    sd = fake_sounddevice(monkeypatch)
    stream = sd.InputStream.return_value

    source = MicrophoneSource(sample_rate=16000, frame_size=1024)
    source.open()
    assert source.is_open
    sd.InputStream.assert_called_once_with(
        samplerate=16000, channels=1, dtype="float32", blocksize=1024, device=None
    )

    source.close()
    assert not source.is_open
    stream.stop.assert_called_once()
    stream.close.assert_called_once()


def test_microphone_start_failure_closes_stream(monkeypatch):
    sd = fake_sounddevice(monkeypatch)
    stream = sd.InputStream.return_value
    stream.start.side_effect = sd.PortAudioError("device busy")

    source = MicrophoneSource()
    with pytest.raises(DeviceError):
        source.open()

    stream.close.assert_called_once()
    assert not source.is_open
