import pytest
from pydantic import ValidationError
from blinkflip.fuse.rules import GestureConfig, load_config, build_state_machine
from blinkflip.eye.blink import LEFT_EYE

def test_defaults():
    cfg = load_config(None)
    assert cfg.blink_threshold == 0.25 and cfg.wink_margin == 0.06
    assert cfg.calibration.blinks == 5 and cfg.calibration.interval_ms == 50
    assert cfg.eyes()[0] == LEFT_EYE

def test_yaml_overrides(tmp_path):
    p = tmp_path / "cfg.yaml"
    p.write_text("blink_threshold: 0.2\nwink_margin: 0.08\ncalibration:\n  blinks: 3\nkeys:\n  right_wink: x\n")
    cfg = load_config(p)
    sm = build_state_machine(cfg)
    assert sm.blink_threshold == 0.2 and sm.wink_margin == 0.08
    assert cfg.calibration.blinks == 3 and cfg.calibration.ceiling == 0.35
    assert cfg.keys.right_wink == "x" and cfg.keys.blink == "space"

def test_empty_file_is_defaults(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("")
    assert load_config(p) == GestureConfig()

@pytest.mark.parametrize("body", ["blink_threshold: 0\n", "left_eye: [1, 2, 3]\n", "right_eye: [1, 2, 3, 4, 5, -6]\n"])
def test_invalid_config(tmp_path, body):
    p = tmp_path / "bad.yaml"
    p.write_text(body)
    with pytest.raises(ValidationError):
        load_config(p)
