# rowramp/core/config.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
import yaml

from .engine import DEFAULT_RAMP_MS, DEFAULT_TICK_MS

_LOG = logging.getLogger(__name__)

_MODES = ("live", "render")


@dataclass(frozen=True)
class PlaybackSettings:
    tick_ms: int = DEFAULT_TICK_MS
    ramp_ms: int = DEFAULT_RAMP_MS
    hold_at_end: bool = False
    autostart: bool = True
    max_ticks: int = 100_000        # render-mode safety bound


@dataclass(frozen=True)
class OutputSettings:
    root: Path = Path("out")
    stdout: bool = True
    record: bool = True
    format: str = "csv"             # csv | mat | both
    mat_variable: str = "playback"
    plot: bool = True


def load_config(cfg_path: Path) -> dict:
    with cfg_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _int_or(value, default: int) -> int:
    # yaml `key:` or `key: null` means "use the default"
    return default if value is None else int(value)


def playback_settings(cfg: dict | None) -> PlaybackSettings:
    """Resolve the `playback:` section; non-positive durations are clamped to 1 ms."""
    pb = (cfg or {}).get("playback", {}) or {}
    tick = _int_or(pb.get("tick_ms"), DEFAULT_TICK_MS)
    ramp = _int_or(pb.get("ramp_ms"), DEFAULT_RAMP_MS)
    if tick < 1 or ramp < 1:
        _LOG.debug("clamping tick_ms=%d ramp_ms=%d to >= 1", tick, ramp)
    return PlaybackSettings(
        tick_ms=max(1, tick),
        ramp_ms=max(1, ramp),
        hold_at_end=bool(pb.get("hold_at_end", False)),
        autostart=bool(pb.get("autostart", True)),
        max_ticks=max(1, _int_or(pb.get("max_ticks"), 100_000)),
    )


def output_settings(cfg: dict | None) -> OutputSettings:
    out = (cfg or {}).get("output", {}) or {}
    fmt = str(out.get("format", "csv")).lower()
    if fmt not in ("csv", "mat", "both"):
        _LOG.warning("unknown output format %r; using csv", fmt)
        fmt = "csv"
    return OutputSettings(
        root=Path(out.get("root", "out")),
        stdout=bool(out.get("stdout", True)),
        record=bool(out.get("record", True)),
        format=fmt,
        mat_variable=str(out.get("mat_variable", "playback")),
        plot=bool(out.get("plot", True)),
    )


def run_mode(cfg: dict | None) -> str:
    mode = str((cfg or {}).get("mode", "live")).lower()
    if mode not in _MODES:
        raise ValueError(f"mode must be one of {_MODES}, got {mode!r}")
    return mode


def configure_logging(cfg: dict | None) -> bool:
    """Set up root logging from the `logging:` section; returns the verbose flag."""
    lg = (cfg or {}).get("logging", {}) or {}
    verbose = bool(lg.get("verbose", True))
    level = getattr(logging, str(lg.get("level", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level if verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return verbose
