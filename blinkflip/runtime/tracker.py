from __future__ import annotations
from typing import Callable, List, Optional
import numpy as np
from ..eye.blink import EyeIndices, LEFT_EYE, RIGHT_EYE, eye_ears
from ..fuse.state import GestureSM
from .events import GestureEvent

class EyeTracker:
    """Frame -> landmarks -> EAR pair -> gesture events."""
    def __init__(self, sm: Optional[GestureSM]=None,
                 detector: Optional[Callable[[np.ndarray], Optional[np.ndarray]]]=None,
                 left_eye: EyeIndices=LEFT_EYE, right_eye: EyeIndices=RIGHT_EYE):
        if detector is None:
            from ..eye.landmarks import FaceLandmarks
            detector = FaceLandmarks()
        self.detector = detector
        self.sm = sm or GestureSM()
        self.left_eye = left_eye; self.right_eye = right_eye
        self.face_present = False
        self.last_landmarks: Optional[np.ndarray] = None

    def process(self, frame_bgr, ts: Optional[float]=None) -> List[GestureEvent]:
        return self.process_landmarks(self.detector(frame_bgr), ts)

    def process_landmarks(self, pts: Optional[np.ndarray], ts: Optional[float]=None) -> List[GestureEvent]:
        if pts is None or len(pts) == 0:
            # an absent face is not a closed eye; keep the state machine as it was
            self.face_present = False
            self.last_landmarks = None
            return []
        l, r = eye_ears(pts, self.left_eye, self.right_eye)
        events = self.sm.update(l, r, ts)
        # readers only see a face once last_ear holds this frame's value
        self.face_present = True
        self.last_landmarks = pts
        return events

    def current_ear(self) -> Optional[float]:
        return self.sm.current_ear() if self.face_present else None
