"""
Emotion sampling from a recorded video file.
"""
# emomap/offline.py
from __future__ import annotations
from typing import List, Optional
import logging
import os

import cv2

from emomap.config import Settings
from emomap.expression import DeepFaceExpressionSource, ExpressionSource
from emomap.models import Sample
from emomap.sampler import Sampler
from emomap.state import SessionState

logger = logging.getLogger(__name__)


def sample_video_file(
    video_path: str,
    settings: Settings,
    source: Optional[ExpressionSource] = None,
) -> List[Sample]:
    """
    Sample a video every SAMPLE_INTERVAL_MS of video time, like the live loop does in wall time.

    Returns the history: one Sample per interval, zeros where no face was found
    or detection failed. No audio cues are played.
    """
    if not os.path.exists(video_path):
        raise FileNotFoundError(f"Video not found: {video_path}")

    logger.debug(f"[offline] open video: {video_path}")
    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open video: {video_path}")

    if source is None:
        source = DeepFaceExpressionSource(settings)
    state = SessionState()
    sampler = Sampler(state, source)

    fps = cap.get(cv2.CAP_PROP_FPS) or 25.0
    interval = settings.sample_interval
    next_t = 0.0
    frame_index = 0
    logger.debug(f"[offline] fps={fps} interval={interval}s")

    try:
        while True:
            ok, frame = cap.read()
            if not ok:
                break
            t = frame_index / fps
            # tolerance for float drift on frame timestamps
            if t + 1e-6 >= next_t:
                sampler.tick(frame)
                next_t += interval
            frame_index += 1
    finally:
        cap.release()

    history = list(state.snapshot())
    logger.debug(f"[offline] finished; frames={frame_index} samples={len(history)}")
    return history
