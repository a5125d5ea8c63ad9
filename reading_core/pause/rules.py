"""Voice activity thresholds for the audio signal monitor."""
from __future__ import annotations

# Frames louder than this are voice (dBFS of frame RMS)
VOICE_DB_THRESHOLD = -50.0

# Added to RMS before log10 so digital silence stays finite
DB_EPSILON = 1e-12

# A silence run must last this long after voice to count as a pause
SILENCE_RUN_MS = 200.0

# Samples per analysed frame
FRAME_SIZE = 2048

# Polling interval of the monitor loop (one rendering frame)
FRAME_INTERVAL_S = 1.0 / 60.0

# Microphone defaults
DEFAULT_SAMPLE_RATE = 16000
