# rowramp/core/scheduler.py
from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Protocol

_LOG = logging.getLogger(__name__)


class Scheduler(Protocol):
    def schedule_repeating(self, period_ms: int, callback: Callable[[], None]) -> object: ...
    def cancel(self, handle: object) -> None: ...


# ---------- manual clock (tests, offline rendering) ----------
@dataclass
class _ManualHandle:
    period_ms: int
    callback: Callable[[], None]
    active: bool = True


@dataclass
class ManualScheduler:
    """
    Fires callbacks only when advance() is called.
    Keeps the engine fully synchronous: one advance step == one tick of every
    active schedule.
    """

    handles: list[_ManualHandle] = field(default_factory=list)

    def schedule_repeating(self, period_ms: int, callback: Callable[[], None]) -> _ManualHandle:
        h = _ManualHandle(int(period_ms), callback)
        self.handles.append(h)
        return h

    def cancel(self, handle: _ManualHandle) -> None:
        if handle is not None:
            handle.active = False

    @property
    def active(self) -> bool:
        return any(h.active for h in self.handles)

    def advance(self, ticks: int = 1) -> int:
        """Fire up to `ticks` rounds; returns how many rounds had an active schedule."""
        fired = 0
        for _ in range(int(ticks)):
            live = [h for h in self.handles if h.active]
            if not live:
                break
            for h in live:
                if h.active:          # an earlier callback in this round may have cancelled it
                    h.callback()
            fired += 1
        self.handles = [h for h in self.handles if h.active]
        return fired


# ---------- real-time clock ----------
class _Repeating:
    def __init__(self, period_ms: int, callback: Callable[[], None]):
        self.period_s = max(1, int(period_ms)) / 1000.0
        self.callback = callback
        self.stop_event = threading.Event()
        self.thread = threading.Thread(target=self._run, name="rowramp-tick", daemon=True)

    def _run(self) -> None:
        next_at = time.monotonic() + self.period_s
        while not self.stop_event.wait(max(0.0, next_at - time.monotonic())):
            try:
                self.callback()
            except Exception:
                # a failing tick must not kill the clock
                _LOG.exception("tick callback failed")
            next_at += self.period_s
            now = time.monotonic()
            if next_at < now - self.period_s:
                # fell behind by more than a period: skip ahead instead of bursting
                next_at = now


class ThreadScheduler:
    """
    Repeating timer on a daemon thread, one thread per schedule.
    cancel() joins the thread unless it is called from the tick itself, so an
    in-flight tick has finished by the time cancel() returns.
    """

    def schedule_repeating(self, period_ms: int, callback: Callable[[], None]) -> _Repeating:
        h = _Repeating(period_ms, callback)
        h.thread.start()
        return h

    def cancel(self, handle: _Repeating) -> None:
        if handle is None:
            return
        handle.stop_event.set()
        if handle.thread is not threading.current_thread() and handle.thread.is_alive():
            handle.thread.join()
