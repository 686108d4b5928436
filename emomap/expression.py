"""
Facial-expression source backed by DeepFace.
"""
# emomap/expression.py
from __future__ import annotations
from typing import Dict, Optional, Protocol
import logging

import numpy as np

from emomap.config import Settings
from emomap.models import DEEPFACE_LABELS

logger = logging.getLogger(__name__)


class ExpressionSource(Protocol):
    def detect(self, frame) -> Optional[Dict[str, float]]:
        """Return label -> intensity in [0,1], or None when no face is found."""
        ...


def _import_deepface():
    try:
        # Lazy import so tests can monkeypatch sys.modules['deepface']
        from deepface import DeepFace
    except Exception as e:
        raise RuntimeError("DeepFace import failed. Ensure deepface/tensorflow stack is installed.") from e
    return DeepFace


def normalize_expressions(raw: Dict) -> Dict[str, float]:
    """Map DeepFace emotion percentages (0..100) onto our labels (0..1)."""
    out: Dict[str, float] = {}
    for key, val in (raw or {}).items():
        label = DEEPFACE_LABELS.get(str(key).lower())
        if label is None:
            continue
        try:
            f = float(val) / 100.0
        except (TypeError, ValueError):
            continue
        out[label] = min(1.0, max(0.0, f))
    return out


class DeepFaceExpressionSource:
    """Single-face expression reader. Raises on detector failure; callers decide what that means."""
    def __init__(self, settings: Settings):
        self.s = settings
        self._df = _import_deepface()

    def warmup(self) -> None:
        """Run one inference on a blank frame so model weights load before the first tick."""
        blank = np.zeros((64, 64, 3), dtype=np.uint8)
        try:
            self._df.analyze(blank, actions=["emotion"], enforce_detection=False,
                             detector_backend=self.s.DETECTOR_BACKEND)
            logger.debug("[expression] models loaded")
        except Exception:
            logger.exception("[expression] warmup failed; first samples may be slow")

    def detect(self, frame) -> Optional[Dict[str, float]]:
        if frame is None:
            return None
        result = self._df.analyze(
            frame,
            actions=["emotion"],
            enforce_detection=False,
            detector_backend=self.s.DETECTOR_BACKEND,
        )
        # DeepFace returns list[dict] or dict depending on version; normalize to list
        result = result if isinstance(result, list) else [result]
        if not result:
            return None
        r0 = result[0] or {}
        # With enforce_detection=False the whole frame comes back with zero confidence
        conf = r0.get("face_confidence")
        if conf is not None:
            try:
                if float(conf) <= 0.0:
                    return None
            except (TypeError, ValueError):
                pass
        probs = r0.get("emotion")
        if not isinstance(probs, dict) or not probs:
            return None
        return normalize_expressions(probs)
