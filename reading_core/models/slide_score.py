"""Data models for per-card scoring results."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class WordMatch:
    """Best recognized candidate for one expected word.

    Attributes:
        expected: The expected (normalized) word
        matched: Best recognized candidate, or None if nothing was heard nearby
        similarity: Character similarity in [0, 100]
        kind: "exact" | "soft" | "miss"
    """
    expected: str
    matched: Optional[str]
    similarity: float
    kind: str  # "exact" | "soft" | "miss"

    @property
    def error_type(self) -> str:
        if self.similarity == 0:
            return "Omitted"
        if self.similarity < 85:
            return "Mispronounced"
        return "None"


@dataclass(frozen=True)
class SlideScore:
    """Composite score for one card attempt."""
    word_accuracy: float
    phoneme_accuracy: float
    fluency_score: int
    wpm: int
    pronunciation_score: int
    band: str
    remark: str
    completeness_score: int = 0
    reading_speed_score: int = 0
    reading_speed_label: str = ""
    average_score: int = 0
    transcription: str = ""
    confidence: Optional[float] = None
    word_matches: Tuple[WordMatch, ...] = field(default_factory=tuple)
    missed_highlights: Tuple[str, ...] = field(default_factory=tuple)
    response_latency_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["word_matches"] = [
            {**asdict(match), "error_type": match.error_type} for match in self.word_matches
        ]
        data["missed_highlights"] = list(self.missed_highlights)
        return data
