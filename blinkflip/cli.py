from __future__ import annotations
import typer, asyncio, logging, cv2, yaml
from rich import print
from rich.logging import RichHandler
from typing import Iterator, Optional
from pydantic import ValidationError
from .io.camera import frames
from .io.overlay import draw_eye_landmarks, draw_hud
from .calibrate.wizard import Calibrator
from .fuse.rules import GestureConfig, load_config, build_state_machine
from .runtime.events import GestureType, ws_broadcast
from .runtime.tracker import EyeTracker

app = typer.Typer(add_completion=False, help="BlinkFlip CLI: eye gestures for reflex games")

def _setup_logging(verbose: bool):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s",
                        datefmt="[%X]", handlers=[RichHandler(rich_tracebacks=True)])

def _load(config: Optional[str]) -> GestureConfig:
    try:
        return load_config(config)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        print(f"[red]Bad config[/red] {config}: {e}")
        raise typer.Exit(1)

def _tracker(cfg: GestureConfig) -> EyeTracker:
    left, right = cfg.eyes()
    return EyeTracker(build_state_machine(cfg), left_eye=left, right_eye=right)

def _show(tracker: EyeTracker, img, landmarks: bool) -> bool:
    """Debug window; returns False once the user presses q."""
    dbg = img.copy()
    if landmarks:
        draw_eye_landmarks(dbg, tracker.last_landmarks, (tracker.left_eye, tracker.right_eye))
    draw_hud(dbg, tracker.current_ear(), tracker.sm.blink_threshold, tracker.face_present)
    cv2.imshow("BlinkFlip", dbg)
    return (cv2.waitKey(1) & 0xFF) != ord('q')

def _run_calibration(tracker: EyeTracker, cfg: GestureConfig, stream: Iterator[dict], preview: bool=False) -> Optional[float]:
    c = cfg.calibration
    cal = Calibrator(tracker.sm, read_ear=tracker.current_ear, blinks=c.blinks, interval_ms=c.interval_ms,
                     offset=c.offset, ceiling=c.ceiling,
                     on_progress=lambda p: print(f"[cyan]progress[/cyan] {p:.0%}"))
    print(f"[bold]Blink {c.blinks} times[/bold]")
    cal.start()
    try:
        for f in stream:
            tracker.process(f["image"], f["meta"]["ts"])
            if preview and not _show(tracker, f["image"], True):
                break
            if not cal.active:
                break
    finally:
        if cal.active: cal.cancel()
    return cal.threshold

@app.command()
def calibrate(config: Optional[str]=typer.Option(None, help="YAML settings file"), camera:int=0,
              width:int=640, height:int=480, preview:bool=False, verbose:bool=False):
    """
    Guided session: blink five times, get a personal blink threshold.
    """
    _setup_logging(verbose)
    cfg = _load(config)
    tracker = _tracker(cfg)
    thr = _run_calibration(tracker, cfg, frames(camera, width, height), preview)
    if thr is None:
        print("[yellow]Calibration abandoned[/yellow]")
        raise typer.Exit(1)
    print("[green]Blink threshold[/green]", f"{thr:.3f}")

@app.command()
def run(config: Optional[str]=typer.Option(None, help="YAML settings file"),
        ws: bool=typer.Option(False, help="Broadcast events over WebSocket"), host:str="0.0.0.0", port:int=8765,
        keys: bool=typer.Option(False, help="Press game keys on gestures"),
        preview: bool=typer.Option(False, help="Show the camera with a debug overlay"),
        landmarks: bool=typer.Option(True, help="Draw eye landmarks in the preview"),
        threshold: Optional[float]=typer.Option(None, help="Override the blink threshold"),
        calibrate_first: bool=typer.Option(False, "--calibrate", help="Calibrate before running"),
        camera:int=0, width:int=640, height:int=480, verbose:bool=False):
    """
    Run detection and print JSONL gesture events; optionally broadcast over WebSocket.
    """
    _setup_logging(verbose)
    cfg = _load(config)
    tracker = _tracker(cfg)
    if threshold is not None:
        tracker.sm.set_threshold(threshold)
    stream = frames(camera, width, height)
    if calibrate_first:
        thr = _run_calibration(tracker, cfg, stream, preview)
        if thr is None: raise typer.Exit(1)
        print("[green]Blink threshold[/green]", f"{thr:.3f}")
    sink = None
    if keys:
        from .demos.keys import KeySink
        k = cfg.keys
        sink = KeySink({GestureType.BLINK: k.blink, GestureType.RIGHT_WINK: k.right_wink,
                        GestureType.LEFT_WINK: k.left_wink}, cooldown_ms=k.cooldown_ms).attach(tracker.sm)

    queue: "asyncio.Queue[str]" = asyncio.Queue()

    async def producer():
        for f in stream:
            for ev in tracker.process(f["image"], f["meta"]["ts"]):
                line = ev.model_dump_json()
                typer.echo(line)
                if ws: await queue.put(line)
            if preview and not _show(tracker, f["image"], landmarks):
                break
            # let the broadcaster drain between frames
            await asyncio.sleep(0)

    async def main():
        if ws:
            bcast = asyncio.create_task(ws_broadcast(queue, host, port))
            try:
                await producer()
            finally:
                bcast.cancel()
        else:
            await producer()

    try:
        asyncio.run(main())
    finally:
        if sink: sink.detach()
        if preview: cv2.destroyAllWindows()

@app.command()
def gui(config: Optional[str]=typer.Option(None, help="YAML settings file"), verbose:bool=False):
    """
    Open the control window (preview, sensitivity, calibration).
    """
    _setup_logging(verbose)
    cfg = _load(config)
    from .gui.app import main
    main(cfg)

if __name__ == "__main__":
    app()
