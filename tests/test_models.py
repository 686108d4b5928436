import pytest
from pydantic import ValidationError
from emomap.models import EMOTIONS, Sample, HistoryResponse, SessionStatus

def test_emotion_order():
    assert EMOTIONS == ("neutral", "happy", "sad", "angry", "fearful", "disgusted", "surprised")

def test_sample_defaults_missing_labels_to_zero():
    s = Sample.from_expressions({"happy": 0.7, "sad": None})
    d = s.as_dict()
    assert list(d) == list(EMOTIONS)
    assert d["happy"] == 0.7
    assert all(d[k] == 0.0 for k in EMOTIONS if k != "happy")

def test_sample_clamps_and_ignores_unknown_keys():
    s = Sample.from_expressions({"angry": 1.7, "fearful": -0.2, "bored": 0.9, "neutral": float("nan")})
    assert s.angry == 1.0
    assert s.fearful == 0.0
    assert s.neutral == 0.0
    assert "bored" not in s.as_dict()
    assert all(0.0 <= v <= 1.0 for _, v in s.items())

def test_sample_is_immutable_and_validated():
    s = Sample.zeros()
    with pytest.raises(ValidationError):
        s.happy = 0.5
    with pytest.raises(ValidationError):
        Sample(happy=1.5)

def test_sample_value_unknown_label():
    assert Sample(happy=0.3).value("happy") == 0.3
    assert Sample(happy=0.3).value("bored") == 0.0

def test_io_models():
    h = HistoryResponse(interval_ms=200, samples=[Sample(sad=0.4)])
    assert h.labels == list(EMOTIONS)
    assert h.model_dump()["samples"][0]["sad"] == 0.4
    st = SessionStatus(running=False)
    assert st.samples == 0 and st.audio_unlocked is False and st.camera_ok is None
