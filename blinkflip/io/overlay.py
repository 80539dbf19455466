from __future__ import annotations
from typing import Iterable, Optional
import cv2
import numpy as np
from ..eye.blink import EyeIndices, LEFT_EYE, RIGHT_EYE

GREEN = (0, 255, 0)

def draw_eye_landmarks(img: np.ndarray, pts: Optional[np.ndarray], eyes: Iterable[EyeIndices]=(LEFT_EYE, RIGHT_EYE), radius:int=2):
    """Dots on the twelve eye landmarks; ``pts`` are normalized, drawn in place."""
    if pts is None: return img
    h, w = img.shape[:2]
    for eye in eyes:
        for idx in eye:
            x, y = pts[idx][:2]
            cv2.circle(img, (int(x*w), int(y*h)), radius, GREEN, -1)
    return img

def draw_hud(img: np.ndarray, ear: Optional[float], threshold: float, face: bool=True):
    ear_txt = f"{ear:.3f}" if ear is not None else "-.---"
    txt = f"EAR: {ear_txt} | THR: {threshold:.3f}"
    if not face: txt += " | no face"
    cv2.putText(img, txt, (10, 24), cv2.FONT_HERSHEY_SIMPLEX, 0.6, GREEN, 2, cv2.LINE_AA)
    return img
