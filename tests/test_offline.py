import numpy as np, cv2
import pytest

from emomap.config import Settings
from emomap.models import Sample
from emomap.offline import sample_video_file

from conftest import FakeSource


def _tiny_video(path, frames=10, fps=5):
    h, w = 32, 32
    fourcc = cv2.VideoWriter_fourcc(*"MJPG")
    writer = cv2.VideoWriter(path, fourcc, fps, (w, h))
    assert writer.isOpened(), "OpenCV VideoWriter failed to open"
    for _ in range(frames):
        writer.write(np.zeros((h, w, 3), dtype=np.uint8))
    writer.release()

def test_sample_video_file(tmp_path):
    path = str(tmp_path / "tiny.avi")
    _tiny_video(path, frames=10, fps=5)
    src = FakeSource([{"happy": 0.8}, None, ValueError("bad crop")], default={"sad": 0.2})

    # 5 fps -> one frame per 200 ms interval
    out = sample_video_file(path, Settings(SAMPLE_INTERVAL_MS=200), source=src)
    assert len(out) == 10
    assert out[0].happy == 0.8
    assert out[1] == Sample.zeros()
    assert out[2] == Sample.zeros()
    assert out[3].sad == 0.2

def test_sample_video_file_coarser_interval(tmp_path):
    path = str(tmp_path / "tiny.avi")
    _tiny_video(path, frames=10, fps=5)
    out = sample_video_file(path, Settings(SAMPLE_INTERVAL_MS=1000), source=FakeSource(default=None))
    assert len(out) == 2

def test_sample_video_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        sample_video_file(str(tmp_path / "nope.mp4"), Settings(), source=FakeSource())
