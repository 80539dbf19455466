import numpy as np
import pytest
from blinkflip.eye.blink import LEFT_EYE, RIGHT_EYE, EyeIndices, compute_ear, eye_ears

def fake_pts(open_=0.1, scale=1.0, offset=(0.0, 0.0), n=478):
    pts = np.zeros((n,2), dtype=np.float32)
    # outer, upper1, upper2, inner, lower1, lower2
    eye = np.array([[0.0,0.0],[0.33,open_],[0.66,open_],[1.0,0.0],[0.66,-open_],[0.33,-open_]])
    for ids in (LEFT_EYE, RIGHT_EYE):
        pts[list(ids)] = eye*scale + np.array(offset)
    return pts

def test_open_eye_ratio():
    assert compute_ear(fake_pts(0.1), LEFT_EYE) == pytest.approx(0.2, abs=1e-6)

def test_scale_and_translation_invariant():
    base = compute_ear(fake_pts(0.12), RIGHT_EYE)
    moved = compute_ear(fake_pts(0.12, scale=0.07, offset=(0.4, 0.55)), RIGHT_EYE)
    assert moved == pytest.approx(base, rel=1e-4)

def test_closed_eye_is_zero():
    assert compute_ear(fake_pts(0.0, scale=0.1, offset=(0.3,0.3)), LEFT_EYE) == pytest.approx(0.0, abs=1e-7)

def test_eye_ears_pair():
    pts = fake_pts(0.1)
    pts[list(RIGHT_EYE)] = pts[list(RIGHT_EYE)] * np.array([1.0, 0.5])
    l, r = eye_ears(pts)
    assert l == pytest.approx(0.2, abs=1e-6)
    assert r == pytest.approx(0.1, abs=1e-6)

def test_eye_indices_order():
    assert LEFT_EYE.outer == 362 and LEFT_EYE.inner == 263
    assert isinstance(RIGHT_EYE, EyeIndices) and len(RIGHT_EYE) == 6
