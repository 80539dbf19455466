from __future__ import annotations
import logging, time
from typing import Callable, Dict, Optional
from ..fuse.state import GestureSM
from ..runtime.events import GestureType

log = logging.getLogger(__name__)

class KeySink:
    """
    Turns gestures into key presses so a keyboard-driven game can be played
    with the eyes (blink = flip gravity, right wink = shoot by default).
    Repeats of the same key inside ``cooldown_ms`` are dropped.
    """
    def __init__(self, bindings: Dict[GestureType, Optional[str]], cooldown_ms:int=350,
                 press: Optional[Callable[[str], None]]=None, clock: Callable[[], float]=time.monotonic):
        if press is None:
            import pyautogui
            pyautogui.PAUSE = 0
            press = pyautogui.press
        self.bindings = {GestureType(k): v for k, v in bindings.items() if v}
        self.cooldown = cooldown_ms / 1000.0
        self.press = press
        self.clock = clock
        self._last: Dict[str, float] = {}
        self._unsubs = []

    def attach(self, sm: GestureSM):
        for typ in self.bindings:
            self._unsubs.append(sm.on(typ, lambda t=typ: self.fire(t)))
        return self

    def detach(self):
        for off in self._unsubs: off()
        self._unsubs = []

    def fire(self, typ: GestureType) -> bool:
        key = self.bindings.get(typ)
        if key is None: return False
        now = self.clock()
        if now - self._last.get(key, -1e9) < self.cooldown:
            return False
        self._last[key] = now
        try:
            self.press(key)
        except Exception as e:
            # a failed injection must not kill the capture loop
            log.warning("key press %r failed: %s", key, e)
            return False
        return True
