from __future__ import annotations
from typing import Optional
import mediapipe as mp
import numpy as np
import cv2

class FaceLandmarks:
    """Single-face FaceMesh wrapper: BGR frame -> (N,2) normalized points, or None."""
    def __init__(self, static_image_mode=False, min_detection_confidence=0.5, min_tracking_confidence=0.5):
        self.mesh = mp.solutions.face_mesh.FaceMesh(static_image_mode=static_image_mode,
                                                    refine_landmarks=True,
                                                    max_num_faces=1,
                                                    min_detection_confidence=min_detection_confidence,
                                                    min_tracking_confidence=min_tracking_confidence)

    def __call__(self, frame_bgr) -> Optional[np.ndarray]:
        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        res = self.mesh.process(rgb)
        if not res.multi_face_landmarks: return None
        lms = res.multi_face_landmarks[0]
        return np.array([(lm.x, lm.y) for lm in lms.landmark], dtype=np.float32)

    def close(self):
        self.mesh.close()
