import sys, types
from typer.testing import CliRunner
import blinkflip.cli as cli

def test_gui_sets_up_logging(monkeypatch):
    calls, opened = [], []
    monkeypatch.setattr(cli, "_setup_logging", calls.append)
    fake = types.ModuleType("blinkflip.gui.app")
    fake.main = opened.append
    monkeypatch.setitem(sys.modules, "blinkflip.gui.app", fake)
    res = CliRunner().invoke(cli.app, ["gui", "--verbose"])
    assert res.exit_code == 0, res.output
    assert calls == [True]
    assert opened and opened[0].blink_threshold == 0.25

def test_gui_bad_config_exits(tmp_path, monkeypatch):
    monkeypatch.setattr(cli, "_setup_logging", lambda v: None)
    p = tmp_path / "bad.yaml"
    p.write_text("blink_threshold: 2\n")
    res = CliRunner().invoke(cli.app, ["gui", "--config", str(p)])
    assert res.exit_code == 1
