# rowramp/main.py
from __future__ import annotations
from pathlib import Path
import sys

from rowramp.core.commands import CommandSurface
from rowramp.core.config import (configure_logging, load_config, output_settings,
                                 playback_settings, run_mode)
from rowramp.core.emitters import FanOutEmitter, JsonLinesEmitter
from rowramp.core.engine import PlaybackEngine
from rowramp.core.errors import EmitterError, EmptyDatasetError
from rowramp.core.plotting import save_playback_plot
from rowramp.core.recorder import Recorder
from rowramp.core.scheduler import ManualScheduler, ThreadScheduler


def render(engine: PlaybackEngine, scheduler: ManualScheduler, max_ticks: int) -> int:
    """Drive the engine offline as fast as possible; returns the number of ticks fired."""
    engine.start()
    fired = 0
    while scheduler.active and fired < max_ticks:
        try:
            fired += scheduler.advance(1)
        except EmitterError as e:
            # the engine already advanced; a broken sink does not end the render
            print(f"[WARN] {e}", file=sys.stderr)
            fired += 1
        if engine.finished.is_set():
            if engine.hold_at_end and fired < max_ticks:
                fired += scheduler.advance(1)   # one frame of the held final row
            break
    engine.stop()
    return fired


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    # ---------- config ----------
    here = Path(__file__).resolve().parent
    cfg_path = Path(argv[0]).resolve() if argv else here / "config.yaml"
    cfg = load_config(cfg_path)
    verbose = configure_logging(cfg)

    pb = playback_settings(cfg)
    out = output_settings(cfg)
    mode = run_mode(cfg)
    in_cfg = cfg.get("input", {}) or {}
    if verbose:
        print(f"[cfg] config={cfg_path}", file=sys.stderr)
        print(f"[cfg] mode={mode} tick={pb.tick_ms} ms ramp={pb.ramp_ms} ms "
              f"hold_at_end={pb.hold_at_end}", file=sys.stderr)

    # ---------- emitters ----------
    recorder = Recorder(tick_ms=pb.tick_ms) if out.record else None
    sinks = []
    if out.stdout:
        sinks.append(JsonLinesEmitter(sys.stdout))
    if recorder is not None:
        sinks.append(recorder)
    emit = FanOutEmitter(*sinks)

    scheduler = ManualScheduler() if mode == "render" else ThreadScheduler()
    engine = PlaybackEngine(emit, scheduler=scheduler, tick_ms=pb.tick_ms,
                            ramp_ms=pb.ramp_ms, hold_at_end=pb.hold_at_end)
    surface = CommandSurface(engine)

    # ---------- load ----------
    def echo(msg: str) -> None:
        print(msg, file=sys.stderr)

    for key, command in (("path", "loadCSV"), ("metadata", "loadJSON")):
        value = in_cfg.get(key)
        if not value:
            continue
        res = surface.execute(f"{command} {Path(value).expanduser()}")
        echo(res.message if res.ok else f"[WARN] {res.message}")

    if engine.dataset is None:
        echo("[INFO] no dataset loaded (set input.path in the config or use `load <path>`).")
        if mode == "render":
            return 1

    # ---------- run ----------
    if mode == "render":
        try:
            fired = render(engine, scheduler, pb.max_ticks)
        except EmptyDatasetError as e:
            echo(f"[WARN] {e}")
            return 1
        echo(f"[OK] rendered {fired} tick(s)")
    else:
        if pb.autostart and engine.dataset is not None:
            res = surface.execute("start")
            echo(res.message if res.ok else f"[WARN] {res.message}")
        try:
            if sys.stdin.isatty() or not pb.autostart:
                echo("Commands: load <path>, loadJSON <path>, interval <ms>, start, stop, status, quit")
                surface.run(sys.stdin, echo=echo)
            elif engine.running:
                engine.finished.wait()
        except KeyboardInterrupt:
            echo("Exiting.")
        finally:
            engine.stop()

    # ---------- outputs ----------
    if recorder is not None and len(recorder):
        stem = Path(engine.dataset.source).stem if engine.dataset and engine.dataset.source else "playback"
        out_root = out.root.resolve()
        recorder.write(out_root / stem, fmt=out.format, mat_variable=out.mat_variable)
        if out.plot:
            save_playback_plot(recorder.to_dataframe(), out_root / f"{stem}.png", title=stem)
    return 0


if __name__ == "__main__":
    sys.exit(main())
