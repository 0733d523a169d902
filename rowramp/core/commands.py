# rowramp/core/commands.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from ..loaders import csv_loader, json_loader
from ..utils.detect import detect_kind
from .engine import PlaybackEngine
from .errors import PlaybackError

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    ok: bool
    message: str = ""
    quit: bool = False


def _parse_interval(arg: str) -> int:
    # "250", "250.9" and "1e3" are accepted; fractional milliseconds truncate
    return int(float(arg))


class CommandSurface:
    """
    Line-oriented control of one engine:

        load <path>        CSV / zipped CSV (or JSON metadata, by extension)
        loadCSV <path>     CSV / zipped CSV
        loadJSON <path>    metadata object
        interval <ms>      row-to-row ramp; a bare number does the same
        start | stop | status | quit

    Handler failures are logged and returned as CommandResult(ok=False);
    nothing is raised back into the input loop.
    """

    def __init__(self, engine: PlaybackEngine):
        self.engine = engine
        self.metadata: dict = {}
        self._handlers: dict[str, Callable[[str], CommandResult]] = {
            "load":     self._load_any,
            "loadcsv":  self._load_csv,
            "loadjson": self._load_json,
            "interval": self._interval,
            "start":    self._start,
            "stop":     self._stop,
            "status":   self._status,
            "quit":     self._quit,
            "exit":     self._quit,
        }

    # ---------- dispatch ----------
    def execute(self, line: str) -> CommandResult:
        text = (line or "").strip()
        if not text:
            return CommandResult(True)
        name, _, arg = text.partition(" ")
        arg = arg.strip()

        handler = self._handlers.get(name.lower())
        if handler is None:
            try:
                float(name)
            except ValueError:
                return self._fail(f"unknown command: {name}")
            handler, arg = self._interval, name

        try:
            return handler(arg)
        except (PlaybackError, OSError, ValueError, OverflowError) as e:
            return self._fail(f"{name} failed: {e}")

    def run(self, lines: Iterable[str], echo: Callable[[str], None] = print) -> None:
        """Feed commands until `quit` or the input ends."""
        for line in lines:
            res = self.execute(line)
            if res.message:
                echo(res.message if res.ok else f"[WARN] {res.message}")
            if res.quit:
                break

    def _fail(self, message: str) -> CommandResult:
        _LOG.warning(message)
        return CommandResult(False, message)

    # ---------- handlers ----------
    def _load_any(self, arg: str) -> CommandResult:
        if not arg:
            return self._fail("load needs a path")
        kind = detect_kind(Path(arg))
        if kind == "json":
            return self._load_json(arg)
        if kind in ("csv", "csvzip"):
            return self._load_csv(arg)
        return self._fail(f"no loader for {arg}")

    def _load_csv(self, arg: str) -> CommandResult:
        if not arg:
            return self._fail("loadCSV needs a path")
        ds = csv_loader.load(Path(arg))
        self.engine.load(ds)
        return CommandResult(True, f"[load] {len(ds)} data row(s), columns={list(ds.columns)}")

    def _load_json(self, arg: str) -> CommandResult:
        if not arg:
            return self._fail("loadJSON needs a path")
        self.metadata = json_loader.load(Path(arg))
        return CommandResult(True, f"[load] metadata keys={sorted(self.metadata)}")

    def _interval(self, arg: str) -> CommandResult:
        ms = self.engine.set_ramp_duration(_parse_interval(arg))
        return CommandResult(True, f"[cfg] ramp={ms} ms")

    def _start(self, arg: str) -> CommandResult:
        self.engine.start()
        return CommandResult(True, "[start] playback running")

    def _stop(self, arg: str) -> CommandResult:
        self.engine.stop()
        return CommandResult(True, "[stop] playback stopped")

    def _status(self, arg: str) -> CommandResult:
        s = self.engine.state
        ds = self.engine.dataset
        rows = len(ds) if ds is not None else 0
        return CommandResult(True, (
            f"[status] {self.engine.status.value} row={s.cursor}/{rows} "
            f"elapsed={s.elapsed_ms} ms ramp={s.ramp_ms} ms tick={self.engine.tick_ms} ms"))

    def _quit(self, arg: str) -> CommandResult:
        self.engine.stop()
        return CommandResult(True, "[quit]", quit=True)
