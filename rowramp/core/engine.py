# rowramp/core/engine.py
from __future__ import annotations
import logging
import threading
from typing import Callable

from .errors import EmitterError, EmptyDatasetError
from .interpolate import interpolate_row, ramp_fraction
from .model import Dataset, PlaybackState, PlaybackStatus, Record, TypedRow
from .rowparse import parse_row
from .scheduler import Scheduler, ThreadScheduler

_LOG = logging.getLogger(__name__)

DEFAULT_TICK_MS = 16
DEFAULT_RAMP_MS = 500

Emitter = Callable[[Record], None]


class PlaybackEngine:
    """
    Streams a Dataset as interpolated records, one per tick.

    The engine ramps from a settled row to a target row over `ramp_ms`,
    emitting on every tick of the injected scheduler. Numeric columns are
    blended linearly, text columns snap when the ramp completes. When the
    ramp into the last row completes the schedule is cancelled (or, with
    `hold_at_end`, the last row keeps being emitted until stop()).

    All entry points share one re-entrant lock so a threaded scheduler can
    drive tick() while start()/stop() arrive from another thread.
    """

    def __init__(self,
                 emit: Emitter,
                 scheduler: Scheduler | None = None,
                 tick_ms: int = DEFAULT_TICK_MS,
                 ramp_ms: int = DEFAULT_RAMP_MS,
                 hold_at_end: bool = False,
                 on_complete: Callable[[], None] | None = None):
        self._emit = emit
        self._scheduler = scheduler if scheduler is not None else ThreadScheduler()
        self.tick_ms = max(1, int(tick_ms))
        self.hold_at_end = bool(hold_at_end)
        self._on_complete = on_complete
        self._lock = threading.RLock()
        self._handle = None
        self._token = None
        self._dataset: Dataset | None = None
        self.state = PlaybackState(ramp_ms=max(1, int(ramp_ms)))
        self.finished = threading.Event()

    # ---------- dataset ----------
    @property
    def dataset(self) -> Dataset | None:
        return self._dataset

    def load(self, dataset: Dataset) -> None:
        """Replace the dataset wholesale; playback stops and state resets."""
        self.stop()
        with self._lock:
            self._dataset = dataset
            self._clear_state()
        _LOG.info("loaded %d row(s), columns=%s", len(dataset), list(dataset.columns))

    # ---------- lifecycle ----------
    def reset(self) -> None:
        """Stop playback and forget the current position."""
        self.stop()
        self._clear_state()

    def _clear_state(self) -> None:
        with self._lock:
            self.state.cursor = -1
            self.state.settled_row = None
            self.state.target_row = None
            self.state.elapsed_ms = 0
            self.finished.clear()

    def start(self) -> None:
        """
        Restart playback from the first row. Nothing is emitted until the first tick.
        Raises EmptyDatasetError (engine stays idle) when there is nothing to play.
        """
        self.stop()
        with self._lock:
            self._clear_state()
            if self._dataset is None or len(self._dataset) == 0:
                raise EmptyDatasetError("no data rows loaded")
            self._load_next_row()
            self._load_next_row()   # optional; a single row just holds
            self.state.running = True
            token = self._token = object()
            self._handle = self._scheduler.schedule_repeating(
                self.tick_ms, lambda: self._scheduled_tick(token))
            _LOG.info("started playback: ramp=%d ms, tick=%d ms, rows=%d",
                      self.state.ramp_ms, self.tick_ms, len(self._dataset))

    def stop(self) -> None:
        with self._lock:
            handle, self._handle = self._handle, None
            self._token = None
            was_running = self.state.running
            self.state.running = False
        if handle is not None:
            # outside the lock: a threaded tick may be waiting on it
            self._scheduler.cancel(handle)
        if was_running:
            _LOG.info("stopped playback at row %d", self.state.cursor)

    def set_ramp_duration(self, ms) -> int:
        with self._lock:
            clamped = max(1, int(ms))
            if clamped != ms:
                _LOG.debug("ramp duration %r clamped to %d ms", ms, clamped)
            self.state.ramp_ms = clamped
        _LOG.info("row-to-row ramp set to %d ms", clamped)
        return clamped

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def status(self) -> PlaybackStatus:
        s = self.state
        if s.settled_row is None:
            return PlaybackStatus.IDLE
        if not s.running:
            return PlaybackStatus.STOPPED
        return PlaybackStatus.RAMPING if s.target_row is not None else PlaybackStatus.SINGLE_ROW_HOLD

    # ---------- tick ----------
    def _scheduled_tick(self, token: object) -> None:
        with self._lock:
            # stop() may have won the race for the lock
            if self._token is not token:
                return
            self.tick()

    def tick(self) -> Record | None:
        """One fixed-period update. Returns the emitted record (None when idle)."""
        with self._lock:
            s = self.state
            if s.settled_row is None:
                return None

            if s.target_row is None:
                record = self._record(s.settled_row)
                self._send(record)
                return record

            frac = ramp_fraction(s.elapsed_ms, s.ramp_ms)
            record = self._record(interpolate_row(s.settled_row, s.target_row, frac))
            failure = None
            try:
                self._emit(record)
            except Exception as e:
                failure = e

            s.elapsed_ms += self.tick_ms
            if s.elapsed_ms >= s.ramp_ms:
                s.settled_row, s.target_row = s.target_row, None
                s.elapsed_ms = 0
                if not self._load_next_row():
                    self._end_of_data()

            if failure is not None:
                raise EmitterError(f"emitter failed: {failure}") from failure
            return record

    # ---------- internals ----------
    def _record(self, row: TypedRow) -> Record:
        return Record.build(self._dataset.columns, row)

    def _send(self, record: Record) -> None:
        try:
            self._emit(record)
        except Exception as e:
            raise EmitterError(f"emitter failed: {e}") from e

    def _load_next_row(self) -> bool:
        """Hand out the next row: into settled_row first, target_row afterwards."""
        s = self.state
        nxt = s.cursor + 1
        if self._dataset is None or nxt >= len(self._dataset):
            return False
        s.cursor = nxt
        typed = parse_row(self._dataset.rows[nxt])
        if s.settled_row is None:
            s.settled_row = typed
        else:
            s.target_row = typed
        _LOG.debug("row %d loaded", nxt)
        return True

    def _end_of_data(self) -> None:
        self.finished.set()
        if self.hold_at_end:
            _LOG.info("reached end of data; holding final row")
        else:
            _LOG.info("reached end of data; stopping")
            self.stop()
        if self._on_complete is not None:
            self._on_complete()
