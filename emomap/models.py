"""
Pydantic data models: emotion samples, cue parameters and API IO.
"""
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

# Fixed label order; row order in the heat-map and tie-break order for cues.
EMOTIONS: Tuple[str, ...] = (
    "neutral",
    "happy",
    "sad",
    "angry",
    "fearful",
    "disgusted",
    "surprised",
)

# DeepFace names -> ours
DEEPFACE_LABELS: Dict[str, str] = {
    "neutral": "neutral",
    "happy": "happy",
    "sad": "sad",
    "angry": "angry",
    "fear": "fearful",
    "disgust": "disgusted",
    "surprise": "surprised",
}


def _clamp01(v) -> float:
    try:
        f = float(v)
    except (TypeError, ValueError):
        return 0.0
    if f != f:  # NaN
        return 0.0
    return min(1.0, max(0.0, f))


class Sample(BaseModel):
    """One normalized reading of all seven intensities."""
    model_config = ConfigDict(frozen=True)

    neutral: float = Field(0.0, ge=0.0, le=1.0)
    happy: float = Field(0.0, ge=0.0, le=1.0)
    sad: float = Field(0.0, ge=0.0, le=1.0)
    angry: float = Field(0.0, ge=0.0, le=1.0)
    fearful: float = Field(0.0, ge=0.0, le=1.0)
    disgusted: float = Field(0.0, ge=0.0, le=1.0)
    surprised: float = Field(0.0, ge=0.0, le=1.0)

    @classmethod
    def zeros(cls) -> "Sample":
        return cls()

    @classmethod
    def from_expressions(cls, expressions: Optional[Mapping[str, float]]) -> "Sample":
        """Build a sample from a label->intensity mapping; absent labels become 0."""
        expressions = expressions or {}
        return cls(**{name: _clamp01(expressions.get(name) or 0.0) for name in EMOTIONS})

    def value(self, label: str) -> float:
        return float(getattr(self, label, 0.0)) if label in EMOTIONS else 0.0

    def items(self) -> Iterator[Tuple[str, float]]:
        for name in EMOTIONS:
            yield name, getattr(self, name)

    def as_dict(self) -> Dict[str, float]:
        return dict(self.items())


class CueParams(BaseModel):
    label: str
    intensity: float
    frequency: float
    amplitude: float


# API models

class HistoryResponse(BaseModel):
    interval_ms: int
    labels: List[str] = Field(default_factory=lambda: list(EMOTIONS))
    samples: List[Sample] = Field(default_factory=list)

class SessionStatus(BaseModel):
    running: bool
    started_at: float | None = None
    samples: int = 0
    audio_unlocked: bool = False
    camera_ok: bool | None = None
