# emomap/sampler.py
"""
Fixed-rate expression sampling.

Every SAMPLE_INTERVAL_MS one frame is read for expressions, normalized into a
Sample, appended to the session history and handed to the cue emitter.
Any failure along the way (no face, detector error, bad frame) yields an
all-zero sample; sampling never stops because of it.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Mapping, Optional

import cv2

from emomap.config import Settings
from emomap.cues import CueEmitter
from emomap.expression import ExpressionSource
from emomap.models import Sample
from emomap.state import SessionState

logger = logging.getLogger(__name__)


def build_sample(detection: Optional[Mapping[str, float]]) -> Sample:
    if detection is None:
        return Sample.zeros()
    return Sample.from_expressions(detection)


class Sampler:
    """One tick = one detection attempt, one appended sample, one cue attempt."""
    def __init__(self, state: SessionState, source: ExpressionSource,
                 emitter: Optional[CueEmitter] = None):
        self.state = state
        self.source = source
        self.emitter = emitter

    def read(self, frame) -> Sample:
        """Detect on a frame and normalize; failures become zeros."""
        if frame is None:
            return Sample.zeros()
        try:
            detection = self.source.detect(frame)
        except Exception:
            logger.debug("[sampler] detection failed; using zeros", exc_info=True)
            detection = None
        return build_sample(detection)

    def tick(self, frame) -> Sample:
        sample = self.read(frame)
        n = self.state.append(sample)
        logger.debug(f"[sampler] tick={n} {sample.as_dict()}")
        if self.emitter is not None:
            try:
                self.emitter.emit(sample)
            except Exception:
                logger.exception("[sampler] cue emission failed")
        return sample


class SamplingLoop:
    """Background camera reader that ticks the sampler at a fixed interval."""
    def __init__(self, settings: Settings, sampler: Sampler, camera_index: Optional[int] = None):
        self.s = settings
        self.sampler = sampler
        self.camera_index = settings.CAMERA_INDEX if camera_index is None else camera_index
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        # thread whose stop() join timed out; must exit before a restart
        self._retired: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ---- lifecycle ----
    def start(self, timeout: Optional[float] = 2.0) -> bool:
        """
        Start a new sampling thread with its own stop event.

        Returns False (and starts nothing) while a previously stopped thread
        is still finishing its last tick after `timeout` seconds.
        """
        if self.running:
            return True
        old = self._retired
        if old is not None and old.is_alive():
            old.join(timeout)
            if old.is_alive():
                logger.warning("[sampler] previous loop still finishing; restart refused")
                return False
        self._retired = None
        stop_event = threading.Event()
        self._stop_event = stop_event
        self.sampler.state.mark_started()
        self._thread = threading.Thread(target=self.run, kwargs={"stop_event": stop_event}, daemon=True)
        self._thread.start()
        return True

    def stop(self, timeout: Optional[float] = 2.0):
        self._stop_event.set()
        t, self._thread = self._thread, None
        if t is not None and t is not threading.current_thread():
            t.join(timeout)
            if t.is_alive():
                self._retired = t

    # ---- loop ----
    def run(self, max_ticks: Optional[int] = None,
            stop_event: Optional[threading.Event] = None) -> None:
        """Acquire the camera once, then tick until stopped (or after `max_ticks`)."""
        if stop_event is None:
            stop_event = self._stop_event
        state = self.sampler.state
        cap = cv2.VideoCapture(self.camera_index)
        if not cap.isOpened():
            logger.error(f"[sampler] could not open camera index {self.camera_index}; sampling disabled")
            state.camera_ok = False
            return
        state.camera_ok = True
        logger.debug(f"[sampler] camera {self.camera_index} open interval={self.s.SAMPLE_INTERVAL_MS}ms")

        interval = self.s.sample_interval
        ticks = 0
        next_t = time.time()
        try:
            while not stop_event.is_set():
                ok, frame = cap.read()
                now = time.time()
                if now >= next_t:
                    self.sampler.tick(frame if ok else None)
                    ticks += 1
                    if max_ticks is not None and ticks >= max_ticks:
                        break
                    next_t = max(next_t + interval, now)
                time.sleep(0.005)
        finally:
            cap.release()
            logger.debug(f"[sampler] stopped after {ticks} ticks")
