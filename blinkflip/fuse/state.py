from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
from ..runtime.events import GestureEvent, GestureType, History

log = logging.getLogger(__name__)

@dataclass
class GestureThresholds:
    blink_threshold: float = 0.25
    wink_margin: float = 0.06

@dataclass
class GestureState:
    # True once the event for the current closure episode has fired
    both_closed: bool = False
    left_winking: bool = False
    right_winking: bool = False

class GestureSM:
    """
    Edge-triggered blink / wink detector.

    Each update takes the (left, right) EAR pair of one frame. An event fires on
    the transition into its condition and re-arms only once the condition stops
    holding, so a closure held over many frames yields exactly one event.

    A wink needs the other eye above ``blink_threshold + wink_margin``; during a
    two-eyed blink both EARs dip together and neither wink condition holds.

    Eyes are the subject's own: ``right_wink`` means the subject's right eye
    closed (FaceMesh 33..133, image left in an unmirrored frame) while the left
    stays open.

    Frames without a face must not reach ``update``.
    """
    def __init__(self, thresholds: Optional[GestureThresholds]=None, history:int=30):
        self.thresholds = thresholds or GestureThresholds()
        self.state = GestureState()
        self.hist = History(maxlen=history)
        self._subs: Dict[GestureType, List[Callable[[], None]]] = {t: [] for t in GestureType}
        self.last_left_ear = 0.0
        self.last_right_ear = 0.0
        self.last_ear = 0.0
        self.updates = 0

    @property
    def blink_threshold(self) -> float:
        return self.thresholds.blink_threshold

    @property
    def wink_margin(self) -> float:
        return self.thresholds.wink_margin

    def set_threshold(self, value: float):
        value = float(value)
        if not 0.0 < value < 1.0:
            log.warning("blink threshold %.3f is outside (0, 1); detection may never or always fire", value)
        self.thresholds.blink_threshold = value

    def set_wink_margin(self, value: float):
        self.thresholds.wink_margin = float(value)

    def on(self, typ: GestureType, callback: Callable[[], None]) -> Callable[[], None]:
        """Subscribe a zero-argument callback; returns a function that unsubscribes it."""
        subs = self._subs[GestureType(typ)]
        subs.append(callback)
        def off():
            if callback in subs:
                subs.remove(callback)
        return off

    def current_ear(self) -> Optional[float]:
        return self.last_ear if self.updates else None

    def update(self, left_ear: float, right_ear: float, ts: Optional[float]=None) -> List[GestureEvent]:
        thr = self.thresholds.blink_threshold
        open_thr = thr + self.thresholds.wink_margin
        st = self.state
        self.last_left_ear = left_ear
        self.last_right_ear = right_ear
        self.last_ear = (left_ear + right_ear) / 2.0
        self.updates += 1

        left_closed = left_ear < thr
        right_closed = right_ear < thr
        fired: List[GestureType] = []

        if left_closed and right_closed:
            if not st.both_closed:
                st.both_closed = True
                fired.append(GestureType.BLINK)
        else:
            st.both_closed = False

        if right_closed and left_ear > open_thr:
            if not st.right_winking:
                st.right_winking = True
                fired.append(GestureType.RIGHT_WINK)
        else:
            st.right_winking = False

        if left_closed and right_ear > open_thr:
            if not st.left_winking:
                st.left_winking = True
                fired.append(GestureType.LEFT_WINK)
        else:
            st.left_winking = False

        out = []
        stamp = {"ts": ts} if ts is not None else {}
        for typ in fired:
            ev = GestureEvent(type=typ, left_ear=left_ear, right_ear=right_ear, ear=self.last_ear, **stamp)
            log.debug("%s (L=%.3f R=%.3f thr=%.3f)", typ.value, left_ear, right_ear, thr)
            self.hist.add(ev)
            out.append(ev)
            for cb in list(self._subs[typ]):
                cb()
        return out
