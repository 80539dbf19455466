from __future__ import annotations
import logging, math, threading
from dataclasses import dataclass, field
from typing import Callable, Optional
from ..fuse.state import GestureSM
from ..runtime.events import GestureType
from ..runtime.timer import IntervalTimer

log = logging.getLogger(__name__)

def derive_threshold(min_ear: float, offset: float=0.05, ceiling: float=0.35) -> float:
    """Closed/open cut slightly above the deepest blink seen, never above ``ceiling``."""
    return min(ceiling, min_ear + offset)

@dataclass
class CalibrationSession:
    target: int = 5
    completed: int = 0
    min_ear: float = math.inf
    done: threading.Event = field(default_factory=threading.Event)

    @property
    def progress(self) -> float:
        return min(1.0, self.completed / self.target)

class Calibrator:
    """
    Guided blink calibration.

    While a session runs, ``sample()`` is called on a fixed interval (its own
    timer, or an external one such as a QTimer when ``autosample=False``) and
    keeps the lowest combined EAR seen while a face is present. Every blink the
    state machine reports advances progress; after ``blinks`` of them the
    threshold becomes ``min(ceiling, min_ear + offset)``.
    """
    def __init__(self, sm: GestureSM, read_ear: Optional[Callable[[], Optional[float]]]=None,
                 blinks:int=5, interval_ms:int=50, offset:float=0.05, ceiling:float=0.35,
                 on_progress: Optional[Callable[[float], None]]=None,
                 on_complete: Optional[Callable[[float], None]]=None):
        self.sm = sm
        self.read_ear = read_ear or sm.current_ear
        self.blinks = blinks; self.interval_ms = interval_ms
        self.offset = offset; self.ceiling = ceiling
        self.on_progress = on_progress; self.on_complete = on_complete
        self.session: Optional[CalibrationSession] = None
        self.threshold: Optional[float] = None
        self._timer: Optional[IntervalTimer] = None
        self._unsub: Optional[Callable[[], None]] = None

    @property
    def active(self) -> bool:
        return self.session is not None

    def start(self, autosample: bool=True) -> CalibrationSession:
        if self.session is not None:
            self.cancel()
        self.session = CalibrationSession(target=self.blinks)
        self.threshold = None
        self._unsub = self.sm.on(GestureType.BLINK, self._on_blink)
        if autosample:
            self._timer = IntervalTimer(self.interval_ms, self.sample, name="calibration-sampler")
            self._timer.start()
        log.info("calibration started: blink %d times", self.blinks)
        return self.session

    def sample(self):
        s = self.session
        if s is None: return
        v = self.read_ear()
        if v is None: return  # no face
        if v < s.min_ear:
            s.min_ear = v

    def _on_blink(self):
        s = self.session
        if s is None: return
        s.completed += 1
        log.info("calibration blink %d/%d", s.completed, s.target)
        if self.on_progress: self.on_progress(s.progress)
        if s.completed >= s.target:
            self._detach()
            self.session = None
            self.finish(s.min_ear)
            s.done.set()

    def finish(self, min_ear: float) -> float:
        thr = derive_threshold(min_ear, self.offset, self.ceiling)
        if math.isinf(min_ear):
            log.warning("no face seen during calibration; falling back to %.3f", thr)
        self.sm.set_threshold(thr)
        self.threshold = thr
        log.info("calibration finished: min EAR %.3f -> threshold %.3f", min_ear, thr)
        if self.on_complete: self.on_complete(thr)
        return thr

    def cancel(self):
        s = self.session
        if s is None: return
        self._detach()
        self.session = None
        log.info("calibration abandoned after %d/%d blinks", s.completed, s.target)

    def wait(self, timeout: Optional[float]=None) -> Optional[float]:
        """Block until the current session completes; returns the new threshold."""
        s = self.session
        if s is not None and not s.done.wait(timeout):
            return None
        return self.threshold

    def _detach(self):
        if self._timer is not None:
            self._timer.stop(); self._timer = None
        if self._unsub is not None:
            self._unsub(); self._unsub = None
