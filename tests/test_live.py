import numpy as np

import emomap.live as live
from emomap.live import LiveSession, run_live_heatmap
from emomap.models import Sample

from conftest import FakeMixer


def test_unlock_audio_once(settings, fake_source, fake_mixer):
    s = LiveSession(settings, source=fake_source(), mixer=fake_mixer)
    assert s.status().audio_unlocked is False
    assert s.unlock_audio() is True
    assert s.unlock_audio() is False
    assert fake_mixer.started
    assert s.status().audio_unlocked is True

def test_unlock_audio_init_error_is_logged(settings, fake_source, caplog):
    s = LiveSession(settings, source=fake_source(), mixer=FakeMixer(fail_start=True))
    assert s.unlock_audio() is True
    assert s.state.audio_unlocked
    assert "audio init error" in caplog.text

def test_session_lifecycle(monkeypatch, settings, fake_source, fake_mixer, dummy_cap):
    monkeypatch.setattr(live.cv2, "VideoCapture", lambda idx: dummy_cap())
    s = LiveSession(settings, source=fake_source(default={"happy": 0.9}), mixer=fake_mixer)
    s.unlock_audio()
    s.start()
    assert s.running
    import time
    deadline = time.time() + 2.0
    while len(s.state) < 2 and time.time() < deadline:
        time.sleep(0.01)
    s.stop()
    st = s.status()
    assert st.running is False
    assert st.samples >= 2
    assert st.camera_ok is True
    assert fake_mixer.closed
    assert len(fake_mixer.played) >= 2

def test_run_live_heatmap_window(monkeypatch, settings, fake_source, fake_mixer, dummy_cap):
    shown = []
    calls = {"n": 0}

    def fake_waitKey(delay):
        calls["n"] += 1
        return ord("q") if calls["n"] > 3 else -1

    monkeypatch.setattr(live.cv2, "VideoCapture", lambda idx: dummy_cap())
    monkeypatch.setattr(live.cv2, "namedWindow", lambda *a, **k: None)
    monkeypatch.setattr(live.cv2, "resizeWindow", lambda *a, **k: None)
    # simulate the user clicking right away
    monkeypatch.setattr(live.cv2, "setMouseCallback",
                        lambda name, cb: cb(live.cv2.EVENT_LBUTTONDOWN, 5, 5, 0, None))
    monkeypatch.setattr(live.cv2, "getWindowImageRect", lambda name: (0, 0, 90, 35))
    monkeypatch.setattr(live.cv2, "imshow", lambda name, img: shown.append(img.copy()))
    monkeypatch.setattr(live.cv2, "waitKey", fake_waitKey)
    monkeypatch.setattr(live.cv2, "destroyAllWindows", lambda: None)

    session = LiveSession(settings, source=fake_source(default={"angry": 0.8}), mixer=fake_mixer)
    out = run_live_heatmap(settings, session=session)

    assert out is session
    assert not session.running
    assert session.state.audio_unlocked
    assert len(shown) == 4
    assert all(img.shape == (35, 90, 3) for img in shown)
    assert all(isinstance(s, Sample) for s in session.state.snapshot())

def test_window_size_fallback(monkeypatch):
    def broken(name):
        raise RuntimeError("no window")
    monkeypatch.setattr(live.cv2, "getWindowImageRect", broken)
    assert live._window_size("x", (10, 20)) == (10, 20)
    monkeypatch.setattr(live.cv2, "getWindowImageRect", lambda name: (-1, -1, -1, -1))
    assert live._window_size("x", (10, 20)) == (10, 20)
