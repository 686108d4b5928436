"""
Configuration for the emotion heat-map.
"""
from pydantic import BaseModel
import os

class Settings(BaseModel):
    """
    Runtime settings with environment-variable overrides.
    """
    SAMPLE_INTERVAL_MS: int = int(os.getenv("SAMPLE_INTERVAL_MS", "200"))
    COL_WIDTH: int = int(os.getenv("COL_WIDTH", "6"))
    CUE_THRESHOLD: float = float(os.getenv("CUE_THRESHOLD", "0.2"))

    CAMERA_INDEX: int = int(os.getenv("CAMERA_INDEX", "0"))
    DETECTOR_BACKEND: str = (os.getenv("DETECTOR_BACKEND", "opencv") or "opencv")
    AUDIO_SAMPLE_RATE: int = int(os.getenv("AUDIO_SAMPLE_RATE", "44100"))

    VIEWPORT_WIDTH: int = int(os.getenv("VIEWPORT_WIDTH", "1280"))
    VIEWPORT_HEIGHT: int = int(os.getenv("VIEWPORT_HEIGHT", "720"))
    FRAME_RATE: float = float(os.getenv("FRAME_RATE", "60"))
    WINDOW_NAME: str = os.getenv("WINDOW_NAME", "Emotion Heat-Map (click for sound, q to quit)")

    def __init__(self, **data):
        super().__init__(**data)
        # Keep the sampling timer and column geometry sane
        object.__setattr__(self, "SAMPLE_INTERVAL_MS", max(10, int(self.SAMPLE_INTERVAL_MS)))
        object.__setattr__(self, "COL_WIDTH", max(1, int(self.COL_WIDTH)))
        object.__setattr__(self, "CUE_THRESHOLD", min(1.0, max(0.0, float(self.CUE_THRESHOLD))))
        backend = ((self.DETECTOR_BACKEND or "").strip().split() or ["opencv"])[0].lower()
        object.__setattr__(self, "DETECTOR_BACKEND", backend)

    @property
    def sample_interval(self) -> float:
        """Sampling period in seconds."""
        return self.SAMPLE_INTERVAL_MS / 1000.0
