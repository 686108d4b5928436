import pytest
import numpy as np

from emomap.config import Settings


class FakeMixer:
    """Stands in for ToneMixer: records tones instead of opening an output stream."""
    def __init__(self, fail_start=False):
        self.fail_start = fail_start
        self.started = False
        self.closed = False
        self.played = []
    def start(self):
        if self.fail_start:
            raise RuntimeError("no audio device")
        self.started = True
    def close(self):
        self.started = False
        self.closed = True
    def play(self, frequency, amplitude):
        self.played.append((frequency, amplitude))


class FakeSource:
    """Expression source replaying a script of results; Exception instances are raised."""
    def __init__(self, script=None, default=None):
        self.script = list(script or [])
        self.default = default
        self.calls = 0
    def detect(self, frame):
        self.calls += 1
        item = self.script.pop(0) if self.script else self.default
        if isinstance(item, Exception):
            raise item
        return item


class DummyCap:
    def __init__(self, opened=True, ok=True):
        self.opened = opened
        self.ok = ok
        self.released = False
        self.reads = 0
        self.frame = np.zeros((32, 32, 3), dtype=np.uint8)
    def isOpened(self): return self.opened
    def read(self):
        self.reads += 1
        if not self.ok:
            return False, None
        return True, self.frame.copy()
    def release(self): self.released = True


@pytest.fixture
def settings():
    return Settings(SAMPLE_INTERVAL_MS=10, VIEWPORT_WIDTH=120, VIEWPORT_HEIGHT=70)

@pytest.fixture
def fake_mixer():
    return FakeMixer()

@pytest.fixture
def fake_source():
    return FakeSource

@pytest.fixture
def dummy_cap():
    return DummyCap
