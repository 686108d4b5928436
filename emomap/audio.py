"""
Tone synthesis and a callback-driven mixer on top of sounddevice.

Each cue becomes an independent voice: a 250 ms sine with a short
attack/hold/decay envelope. Voices overlap freely and are never cancelled.
"""
from __future__ import annotations

import logging
import threading
from typing import List, Optional

import numpy as np
import sounddevice as sd

logger = logging.getLogger(__name__)

# Envelope timing in seconds
ATTACK_S = 0.01
DECAY_START_S = 0.05
DECAY_S = 0.15
STOP_S = 0.25


def envelope(amplitude: float, sample_rate: int) -> np.ndarray:
    """Piecewise-linear amplitude envelope: ramp up, hold, decay, silence until release."""
    n = int(round(STOP_S * sample_rate))
    t = np.arange(n, dtype=np.float64) / float(sample_rate)
    env = np.interp(
        t,
        [0.0, ATTACK_S, DECAY_START_S, DECAY_START_S + DECAY_S, STOP_S],
        [0.0, amplitude, amplitude, 0.0, 0.0],
    )
    return env.astype(np.float32)


def render_tone(frequency: float, amplitude: float, sample_rate: int) -> np.ndarray:
    env = envelope(amplitude, sample_rate)
    t = np.arange(env.shape[0], dtype=np.float64) / float(sample_rate)
    return (np.sin(2 * np.pi * float(frequency) * t) * env).astype(np.float32)


class _Voice:
    __slots__ = ("buf", "pos")

    def __init__(self, buf: np.ndarray):
        self.buf = buf
        self.pos = 0


class ToneMixer:
    """Mixes fire-and-forget tones into one mono output stream."""
    def __init__(self, sample_rate: int = 44100):
        self.sample_rate = int(sample_rate)
        self._voices: List[_Voice] = []
        self._lock = threading.Lock()
        self._stream: Optional[sd.OutputStream] = None

    @property
    def started(self) -> bool:
        return self._stream is not None

    def start(self) -> None:
        if self._stream is not None:
            return
        stream = sd.OutputStream(
            samplerate=self.sample_rate,
            channels=1,
            dtype="float32",
            callback=self._callback,
        )
        stream.start()
        self._stream = stream
        logger.debug(f"[audio] output stream started sr={self.sample_rate}")

    def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except Exception:
            logger.exception("[audio] failed to close output stream")
        with self._lock:
            self._voices.clear()

    def play(self, frequency: float, amplitude: float) -> None:
        if self._stream is None:
            logger.debug("[audio] play before start; dropped")
            return
        buf = render_tone(frequency, amplitude, self.sample_rate)
        with self._lock:
            self._voices.append(_Voice(buf))

    def active_voices(self) -> int:
        with self._lock:
            return len(self._voices)

    def mix(self, frames: int) -> np.ndarray:
        """Sum the next `frames` samples of every live voice; finished voices are dropped."""
        out = np.zeros(frames, dtype=np.float32)
        with self._lock:
            alive: List[_Voice] = []
            for v in self._voices:
                chunk = v.buf[v.pos:v.pos + frames]
                out[:chunk.shape[0]] += chunk
                v.pos += chunk.shape[0]
                if v.pos < v.buf.shape[0]:
                    alive.append(v)
            self._voices = alive
        np.clip(out, -1.0, 1.0, out=out)
        return out

    def _callback(self, outdata, frames, time_info, status):
        if status:
            logger.debug(f"[audio] stream status={status}")
        outdata[:, 0] = self.mix(frames)
