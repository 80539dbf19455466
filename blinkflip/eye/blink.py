from __future__ import annotations
from typing import NamedTuple, Tuple
import numpy as np

class EyeIndices(NamedTuple):
    """FaceMesh ids ordered: outer corner, upper lid x2, inner corner, lower lid x2."""
    outer: int
    upper1: int
    upper2: int
    inner: int
    lower1: int
    lower2: int

# Subject's own left/right (FaceMesh, unmirrored frame)
LEFT_EYE = EyeIndices(362, 385, 387, 263, 373, 380)
RIGHT_EYE = EyeIndices(33, 160, 158, 133, 153, 144)

def ear(eye_pts):
    A = np.linalg.norm(eye_pts[1] - eye_pts[5])
    B = np.linalg.norm(eye_pts[2] - eye_pts[4])
    C = np.linalg.norm(eye_pts[0] - eye_pts[3])
    return float((A + B) / (2.0 * C))

def compute_ear(landmarks: np.ndarray, eye: EyeIndices) -> float:
    """
    Eye aspect ratio for one eye of a (N,2) normalized landmark array.
    Caller must skip frames without a face.
    """
    pts = np.asarray(landmarks, dtype=np.float64)[list(eye), :2]
    return ear(pts)

def eye_ears(landmarks: np.ndarray, left: EyeIndices=LEFT_EYE, right: EyeIndices=RIGHT_EYE) -> Tuple[float,float]:
    return compute_ear(landmarks, left), compute_ear(landmarks, right)
