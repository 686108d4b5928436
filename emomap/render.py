"""Heat-map rendering.

- emotion_hsb / emotion_color: map (emotion, intensity) to a fixed hue with brightness
  rising linearly in intensity (neutral is grey)
- draw_heatmap: one column per sample, one row per emotion, separator lines between rows
- HeatmapCanvas: grow-only canvas width and auto-scroll to the newest column

Canvases are BGR uint8 numpy arrays so they go straight to cv2.imshow / cv2.imencode.
"""
from __future__ import annotations
import colorsys
import logging
from typing import Dict, Sequence, Tuple

import cv2
import numpy as np

from emomap.models import EMOTIONS, Sample

logger = logging.getLogger(__name__)

COL_WIDTH = 6

# (hue deg, saturation %, brightness low, brightness high)
EMOTION_HUES: Dict[str, Tuple[float, float, float, float]] = {
    "neutral": (0, 0, 30, 80),       # grey
    "happy": (60, 100, 10, 100),     # yellow
    "sad": (220, 80, 10, 100),       # deep blue
    "angry": (0, 100, 10, 100),      # red
    "fearful": (280, 80, 10, 100),   # violet
    "disgusted": (130, 80, 10, 100), # green
    "surprised": (180, 80, 10, 100), # teal
}
FALLBACK_HUE = (0, 0, 10, 100)

# Row separators: grey at 30% brightness, 80% opacity
SEPARATOR_GREY = 0.30 * 255
SEPARATOR_ALPHA = 0.80


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def emotion_hsb(label: str, value: float) -> Tuple[float, float, float]:
    """HSB color (360/100/100) for an emotion at intensity `value` in [0,1]."""
    h, s, lo, hi = EMOTION_HUES.get(label, FALLBACK_HUE)
    v = min(1.0, max(0.0, float(value)))
    return float(h), float(s), _lerp(lo, hi, v)


def _unit_bgr(label: str) -> Tuple[float, float, float]:
    # HSV->RGB is linear in V, so full-brightness components scale directly
    h, s, _, _ = EMOTION_HUES.get(label, FALLBACK_HUE)
    r, g, b = colorsys.hsv_to_rgb(h / 360.0, s / 100.0, 1.0)
    return b, g, r


def emotion_color(label: str, value: float) -> Tuple[int, int, int]:
    """BGR uint8 color for an emotion at intensity `value`."""
    _, _, bright = emotion_hsb(label, value)
    scale = bright / 100.0 * 255.0
    return tuple(int(round(c * scale)) for c in _unit_bgr(label))


def required_width(n_samples: int, viewport_width: int, col_width: int = COL_WIDTH) -> int:
    return max(int(viewport_width), int(n_samples) * int(col_width))


def _color_grid(history: Sequence[Sample]) -> np.ndarray:
    """(n, 7, 3) BGR colors for every cell of the history."""
    values = np.array([[s.value(name) for name in EMOTIONS] for s in history], dtype=np.float64)
    values = np.clip(values, 0.0, 1.0)
    lo = np.array([EMOTION_HUES[name][2] for name in EMOTIONS], dtype=np.float64)
    hi = np.array([EMOTION_HUES[name][3] for name in EMOTIONS], dtype=np.float64)
    bright = lo + (hi - lo) * values                              # (n, 7)
    unit = np.array([_unit_bgr(name) for name in EMOTIONS])        # (7, 3)
    grid = bright[:, :, None] / 100.0 * 255.0 * unit[None, :, :]
    return np.rint(grid).astype(np.uint8)


def draw_heatmap(history: Sequence[Sample],
                 width: int,
                 height: int,
                 col_width: int = COL_WIDTH) -> np.ndarray:
    """Draw the whole history onto a fresh black canvas.

    Args:
        history: samples in arrival order; column t is history[t]
        width, height: canvas size in pixels
        col_width: pixel width of one time step

    Returns:
        BGR canvas of shape (height, width, 3)
    """
    canvas = np.zeros((max(1, int(height)), max(1, int(width)), 3), dtype=np.uint8)
    if not history:
        return canvas
    H, W = canvas.shape[:2]

    grid = _color_grid(history)                                   # (n, 7, 3)
    cols = np.repeat(grid, col_width, axis=0)[:W]                 # (n*cw, 7, 3)
    row_of_y = np.minimum((np.arange(H) * len(EMOTIONS)) // H, len(EMOTIONS) - 1)
    canvas[:, :cols.shape[0]] = cols[:, row_of_y].transpose(1, 0, 2)

    # subtle row separators so bands are readable
    for e in range(1, len(EMOTIONS)):
        y = min(H - 1, int(round(e * H / float(len(EMOTIONS)))))
        line = canvas[y].astype(np.float32)
        canvas[y] = np.rint(SEPARATOR_ALPHA * SEPARATOR_GREY + (1.0 - SEPARATOR_ALPHA) * line).astype(np.uint8)
    return canvas


class HeatmapCanvas:
    """Canvas geometry: grows with the history, follows the viewport, scrolls to the end."""
    def __init__(self, viewport_width: int, viewport_height: int, col_width: int = COL_WIDTH):
        self.col_width = int(col_width)
        self.viewport_width = max(1, int(viewport_width))
        self.height = max(1, int(viewport_height))
        self.width = self.viewport_width

    def grow(self, n_samples: int) -> bool:
        """Widen to fit `n_samples` columns. Never shrinks. Returns True if resized."""
        needed = required_width(n_samples, self.viewport_width, self.col_width)
        if needed > self.width:
            logger.debug(f"[render] grow width {self.width} -> {needed}")
            self.width = needed
            return True
        return False

    def resize(self, viewport_width: int, viewport_height: int, n_samples: int) -> None:
        """Viewport changed: recompute height and width from the growth rule."""
        self.viewport_width = max(1, int(viewport_width))
        self.height = max(1, int(viewport_height))
        self.width = required_width(n_samples, self.viewport_width, self.col_width)
        logger.debug(f"[render] resize viewport={self.viewport_width}x{self.height} width={self.width}")

    @property
    def scroll_x(self) -> int:
        return max(0, self.width - self.viewport_width)

    def render(self, history: Sequence[Sample]) -> np.ndarray:
        self.grow(len(history))
        return draw_heatmap(history, self.width, self.height, self.col_width)

    def visible(self, canvas: np.ndarray) -> np.ndarray:
        """Right-most viewport-wide slice of the canvas (auto-scroll)."""
        x0 = self.scroll_x
        return canvas[:, x0:x0 + self.viewport_width]

    def frame(self, history: Sequence[Sample]) -> np.ndarray:
        """
        The visible slice, drawn from the visible columns only.

        Pixel-identical to `visible(render(history))`; cost depends on the
        viewport, not on how long the session has been running.
        """
        self.grow(len(history))
        x0 = self.scroll_x
        first = x0 // self.col_width
        offset = x0 - first * self.col_width
        strip = draw_heatmap(history[first:], self.viewport_width + offset, self.height, self.col_width)
        return strip[:, offset:offset + self.viewport_width]


def encode_png(canvas: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", canvas)
    if not ok:
        raise RuntimeError("PNG encoding failed")
    return buf.tobytes()
