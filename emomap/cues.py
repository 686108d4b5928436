"""
Audio cues keyed to the dominant emotion of each sample.
"""
from __future__ import annotations
from typing import Optional, Tuple
import logging

from emomap.models import EMOTIONS, CueParams, Sample
from emomap.state import SessionState

logger = logging.getLogger(__name__)

CUE_THRESHOLD = 0.2
DEFAULT_FREQ = 440.0

# Base frequency per emotion (Hz)
EMOTION_FREQS = {
    "neutral": 220.0,
    "happy": 880.0,
    "sad": 260.0,
    "angry": 440.0,
    "fearful": 600.0,
    "disgusted": 320.0,
    "surprised": 700.0,
}


def select_dominant(sample: Sample, threshold: float = CUE_THRESHOLD) -> Optional[Tuple[str, float]]:
    """
    Pick the strongest emotion of a sample.

    Labels are scanned in EMOTIONS order and only a strictly greater value
    replaces the current best, so ties go to the earlier label. Returns None
    when nothing exceeds `threshold`.
    """
    best_name: Optional[str] = None
    best_val = 0.0
    for name in EMOTIONS:
        v = sample.value(name)
        if v > best_val:
            best_val = v
            best_name = name
    if best_name is None or not best_val > threshold:
        return None
    return best_name, best_val


def cue_params(label: str, intensity: float) -> CueParams:
    base = EMOTION_FREQS.get(label, DEFAULT_FREQ)
    return CueParams(
        label=label,
        intensity=intensity,
        frequency=base * (0.8 + intensity * 0.4),
        amplitude=0.05 + intensity * 0.25,
    )


class CueEmitter:
    """Plays one tone per sample for the dominant emotion once audio is unlocked."""
    def __init__(self, state: SessionState, mixer, threshold: float = CUE_THRESHOLD):
        self.state = state
        self.mixer = mixer
        self.threshold = float(threshold)

    def emit(self, sample: Sample) -> Optional[CueParams]:
        if not self.state.audio_unlocked:
            return None
        best = select_dominant(sample, self.threshold)
        if best is None:
            return None
        params = cue_params(*best)
        logger.debug(f"[cue] {params.label} i={params.intensity:.2f} f={params.frequency:.1f}Hz a={params.amplitude:.3f}")
        self.mixer.play(params.frequency, params.amplitude)
        return params
