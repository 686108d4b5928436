import sys, types
import numpy as np
import pytest

from emomap.config import Settings
from emomap.expression import DeepFaceExpressionSource, normalize_expressions


def _inject(monkeypatch, result):
    calls = {"n": 0}
    class DF:
        @staticmethod
        def analyze(frame, actions, enforce_detection, detector_backend):
            calls["n"] += 1
            if isinstance(result, Exception):
                raise result
            return result
    monkeypatch.setitem(sys.modules, "deepface", types.SimpleNamespace(DeepFace=DF))
    return calls

FRAME = np.zeros((32, 32, 3), dtype=np.uint8)

def test_normalize_expressions_maps_deepface_names():
    out = normalize_expressions({"fear": 50.0, "disgust": 10, "surprise": 100, "Happy": 20, "contempt": 99})
    assert out == {"fearful": 0.5, "disgusted": 0.1, "surprised": 1.0, "happy": 0.2}

def test_detect_single_face(monkeypatch):
    _inject(monkeypatch, [{
        "emotion": {"angry": 0, "disgust": 0, "fear": 5.0, "happy": 90.0, "sad": 0, "surprise": 5.0, "neutral": 0},
        "dominant_emotion": "happy",
        "face_confidence": 0.93,
    }])
    src = DeepFaceExpressionSource(Settings())
    out = src.detect(FRAME)
    assert out["happy"] == pytest.approx(0.9)
    assert out["fearful"] == pytest.approx(0.05)
    assert out["surprised"] == pytest.approx(0.05)

def test_detect_dict_result(monkeypatch):
    _inject(monkeypatch, {"emotion": {"sad": 40.0}})
    assert DeepFaceExpressionSource(Settings()).detect(FRAME) == {"sad": pytest.approx(0.4)}

@pytest.mark.parametrize("result", [
    [],
    [{"emotion": {"happy": 80.0}, "face_confidence": 0}],
    [{"dominant_emotion": "happy"}],
])
def test_detect_no_face(monkeypatch, result):
    _inject(monkeypatch, result)
    assert DeepFaceExpressionSource(Settings()).detect(FRAME) is None

def test_detect_none_frame_skips_model(monkeypatch):
    calls = _inject(monkeypatch, [])
    assert DeepFaceExpressionSource(Settings()).detect(None) is None
    assert calls["n"] == 0

def test_detect_propagates_detector_errors(monkeypatch):
    _inject(monkeypatch, ValueError("boom"))
    with pytest.raises(ValueError):
        DeepFaceExpressionSource(Settings()).detect(FRAME)

def test_warmup_swallows_errors(monkeypatch):
    calls = _inject(monkeypatch, ValueError("weights missing"))
    DeepFaceExpressionSource(Settings()).warmup()
    assert calls["n"] == 1

def test_missing_deepface_raises_runtime_error(monkeypatch):
    monkeypatch.setitem(sys.modules, "deepface", None)
    with pytest.raises(RuntimeError):
        DeepFaceExpressionSource(Settings())
