from blinkflip.fuse.state import GestureSM, GestureThresholds
from blinkflip.runtime.events import GestureType

OPEN, SHUT = 0.33, 0.10

def run(sm, seq):
    out = []
    for l, r in seq:
        out += [e.type for e in sm.update(l, r)]
    return out

def test_blink_fires_once_while_held():
    sm = GestureSM()
    assert run(sm, [(OPEN,OPEN)] + [(SHUT,SHUT)]*6) == [GestureType.BLINK]
    assert sm.state.both_closed

def test_blink_rearms_after_reopen():
    sm = GestureSM()
    seq = [(SHUT,SHUT), (SHUT,SHUT), (OPEN,OPEN), (SHUT,SHUT), (SHUT,SHUT)]
    assert run(sm, seq) == [GestureType.BLINK, GestureType.BLINK]

def test_wink_vs_blink_discrimination():
    sm = GestureSM(GestureThresholds(blink_threshold=0.25, wink_margin=0.06))
    assert run(sm, [(OPEN, SHUT)]) == [GestureType.RIGHT_WINK]
    sm = GestureSM(GestureThresholds(blink_threshold=0.25, wink_margin=0.06))
    assert run(sm, [(SHUT, OPEN)]) == [GestureType.LEFT_WINK]
    sm = GestureSM(GestureThresholds(blink_threshold=0.25, wink_margin=0.06))
    assert run(sm, [(SHUT, SHUT)]) == [GestureType.BLINK]

def test_wink_needs_open_eye_above_margin():
    sm = GestureSM(GestureThresholds(blink_threshold=0.25, wink_margin=0.06))
    # 0.28 is open but inside the margin band: neither wink nor blink
    assert run(sm, [(0.28, SHUT), (0.30, SHUT)]) == []
    assert run(sm, [(0.32, SHUT), (0.32, SHUT)]) == [GestureType.RIGHT_WINK]

def test_right_wink_edge_triggered():
    sm = GestureSM()
    seq = [(OPEN,SHUT)]*4 + [(OPEN,OPEN)] + [(OPEN,SHUT)]*2
    assert run(sm, seq) == [GestureType.RIGHT_WINK, GestureType.RIGHT_WINK]

def test_subscribers_and_unsubscribe():
    sm = GestureSM()
    hits = []
    off = sm.on(GestureType.BLINK, lambda: hits.append("b"))
    sm.on(GestureType.RIGHT_WINK, lambda: hits.append("r"))
    run(sm, [(SHUT,SHUT), (OPEN,OPEN), (OPEN,SHUT)])
    off()
    run(sm, [(OPEN,OPEN), (SHUT,SHUT)])
    assert hits == ["b", "r"]

def test_set_threshold_changes_sensitivity():
    sm = GestureSM()
    assert run(sm, [(0.28,0.28)]) == []
    sm.set_threshold(0.30)
    assert sm.blink_threshold == 0.30
    assert run(sm, [(0.28,0.28)]) == [GestureType.BLINK]

def test_out_of_range_threshold_accepted():
    sm = GestureSM()
    sm.set_threshold(0.0)
    assert sm.blink_threshold == 0.0
    assert run(sm, [(0.0,0.0)]) == []

def test_last_values_and_history():
    sm = GestureSM()
    assert sm.current_ear() is None
    run(sm, [(0.2, 0.1)])
    assert sm.last_left_ear == 0.2 and sm.last_right_ear == 0.1
    assert abs(sm.last_ear - 0.15) < 1e-9
    ev = sm.hist.last(GestureType.BLINK)
    assert ev is not None and ev.left_ear == 0.2
