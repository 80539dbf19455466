from __future__ import annotations
import threading
from typing import Callable, Optional

class IntervalTimer:
    """Calls ``fn`` every ``interval_ms`` on a daemon thread until stopped."""
    def __init__(self, interval_ms: int, fn: Callable[[], None], name: str="interval-timer"):
        self.interval = interval_ms / 1000.0
        self.fn = fn
        self.name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        if self._thread is not None: return
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def _run(self):
        while not self._stop.wait(self.interval):
            self.fn()

    def stop(self):
        self._stop.set()
        t = self._thread
        # stop() may be called from fn itself
        if t is not None and t is not threading.current_thread():
            t.join(timeout=1.0)
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop.is_set()
