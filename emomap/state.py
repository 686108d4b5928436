"""
Session state shared by the sampling loop, the cue emitter and the renderer.
"""
from __future__ import annotations
import logging
import threading
import time
from typing import List, Optional, Tuple

from emomap.models import Sample

logger = logging.getLogger(__name__)


class SessionState:
    """Append-only sample history plus the one-time audio unlock flag."""
    def __init__(self):
        self._history: List[Sample] = []
        self._lock = threading.Lock()
        self.audio_unlocked = False
        self.camera_ok: Optional[bool] = None
        self.started_at: Optional[float] = None

    def append(self, sample: Sample) -> int:
        """Append one sample; returns the new history length."""
        with self._lock:
            self._history.append(sample)
            return len(self._history)

    def snapshot(self) -> Tuple[Sample, ...]:
        """Consistent copy of the history prefix seen so far."""
        with self._lock:
            return tuple(self._history)

    def __len__(self) -> int:
        with self._lock:
            return len(self._history)

    def unlock_audio(self) -> bool:
        """Set the audio flag. Returns True only for the call that unlocked it."""
        with self._lock:
            if self.audio_unlocked:
                return False
            self.audio_unlocked = True
        logger.debug("[state] audio unlocked")
        return True

    def mark_started(self) -> None:
        if self.started_at is None:
            self.started_at = time.time()
