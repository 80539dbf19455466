import json
from blinkflip.runtime.events import GestureEvent, GestureType, History

def test_event_json():
    ev = GestureEvent(type=GestureType.RIGHT_WINK, left_ear=0.33, right_ear=0.1, ear=0.215)
    d = json.loads(ev.model_dump_json())
    assert d["type"] == "right_wink" and d["ts"] > 0

def test_history_bounded_and_last():
    h = History(maxlen=3)
    for t in ["blink", "left_wink", "blink", "right_wink"]:
        h.add(GestureEvent(type=t))
    assert len(h) == 3
    assert h.last(GestureType.RIGHT_WINK).type == GestureType.RIGHT_WINK
    assert h.last(GestureType.BLINK) is not None
    assert [e.type.value for e in h] == ["left_wink", "blink", "right_wink"]
