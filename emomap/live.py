# emomap/live.py
"""
Live (real-time) heat-map.

Wires the pieces into one session:
- SamplingLoop (background thread): webcam frame -> DeepFace -> Sample -> history + cue
- HeatmapCanvas (main thread): redraws the visible columns from the history on every display frame
- ToneMixer: beeps for the dominant emotion, enabled by a first mouse click

run_live_heatmap opens an OpenCV window; the HTTP API drives the same LiveSession headless.
"""

from __future__ import annotations

import logging
from typing import Optional

import cv2

from emomap.audio import ToneMixer
from emomap.config import Settings
from emomap.cues import CueEmitter
from emomap.expression import DeepFaceExpressionSource, ExpressionSource
from emomap.models import SessionStatus
from emomap.render import HeatmapCanvas
from emomap.sampler import Sampler, SamplingLoop
from emomap.state import SessionState

logger = logging.getLogger(__name__)


class LiveSession:
    """Sampling loop, cue emitter and audio output sharing one SessionState."""
    def __init__(self, settings: Settings,
                 source: Optional[ExpressionSource] = None,
                 mixer: Optional[ToneMixer] = None,
                 camera_index: Optional[int] = None):
        self.s = settings
        self.state = SessionState()
        self.mixer = mixer if mixer is not None else ToneMixer(settings.AUDIO_SAMPLE_RATE)
        self._source = source
        self._camera_index = camera_index
        self.emitter = CueEmitter(self.state, self.mixer, threshold=settings.CUE_THRESHOLD)
        self.loop: Optional[SamplingLoop] = None

    def _ensure_loop(self) -> SamplingLoop:
        if self.loop is None:
            if self._source is None:
                src = DeepFaceExpressionSource(self.s)
                src.warmup()
                self._source = src
            sampler = Sampler(self.state, self._source, self.emitter)
            self.loop = SamplingLoop(self.s, sampler, camera_index=self._camera_index)
        return self.loop

    # ---- lifecycle ----
    @property
    def running(self) -> bool:
        return self.loop is not None and self.loop.running

    def start(self) -> bool:
        """Start sampling. False if the previous loop has not finished its last tick yet."""
        loop = self._ensure_loop()
        if not loop.start():
            return False
        if self.state.audio_unlocked and not self.mixer.started:
            self._start_audio()
        logger.debug("[live] session started")
        return True

    def stop(self):
        if self.loop is not None:
            self.loop.stop()
        self.mixer.close()
        logger.debug(f"[live] session stopped samples={len(self.state)}")

    def unlock_audio(self) -> bool:
        """One-time audio unlock (first user gesture). Returns True on the unlocking call."""
        if not self.state.unlock_audio():
            return False
        self._start_audio()
        return True

    def _start_audio(self) -> None:
        try:
            self.mixer.start()
            logger.info("[audio] audio initialized")
        except Exception:
            logger.exception("[audio] audio init error")

    def status(self) -> SessionStatus:
        return SessionStatus(
            running=self.running,
            started_at=self.state.started_at,
            samples=len(self.state),
            audio_unlocked=self.state.audio_unlocked,
            camera_ok=self.state.camera_ok,
        )


def _window_size(name: str, fallback: tuple[int, int]) -> tuple[int, int]:
    try:
        _, _, w, h = cv2.getWindowImageRect(name)
    except Exception:
        return fallback
    if w <= 0 or h <= 0:
        return fallback
    return int(w), int(h)


def run_live_heatmap(settings: Settings, camera_index: Optional[int] = None,
                     session: Optional[LiveSession] = None) -> LiveSession:
    """
    Open webcam sampling and show the scrolling emotion heat-map in a window.

    Left click unlocks audio cues. Press 'q' to quit.
    Returns the finished session so callers can inspect its history.
    """
    session = session or LiveSession(settings, camera_index=camera_index)
    name = settings.WINDOW_NAME
    viewport = (settings.VIEWPORT_WIDTH, settings.VIEWPORT_HEIGHT)
    canvas = HeatmapCanvas(viewport[0], viewport[1], settings.COL_WIDTH)

    cv2.namedWindow(name, cv2.WINDOW_NORMAL)
    cv2.resizeWindow(name, viewport[0], viewport[1])

    def _on_mouse(event, x, y, flags, param):
        if event == cv2.EVENT_LBUTTONDOWN:
            session.unlock_audio()

    cv2.setMouseCallback(name, _on_mouse)

    session.start()
    delay_ms = max(1, int(1000.0 / max(1.0, settings.FRAME_RATE)))
    try:
        while True:
            history = session.state.snapshot()
            size = _window_size(name, viewport)
            if size != viewport:
                viewport = size
                canvas.resize(viewport[0], viewport[1], len(history))
            cv2.imshow(name, canvas.frame(history))
            if (cv2.waitKey(delay_ms) & 0xFF) == ord("q"):
                break
    finally:
        session.stop()
        cv2.destroyAllWindows()
    return session
