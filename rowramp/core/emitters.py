# rowramp/core/emitters.py
from __future__ import annotations
import json
import sys
from typing import Callable, TextIO

from .model import Record


class JsonLinesEmitter:
    """One JSON object per record, keys in column order."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream if stream is not None else sys.stdout

    def __call__(self, record: Record) -> None:
        self.stream.write(json.dumps(record.as_dict()) + "\n")
        self.stream.flush()


class FanOutEmitter:
    """Calls every sink; the first failure is re-raised after all of them ran."""

    def __init__(self, *sinks: Callable[[Record], None]):
        self.sinks = list(sinks)

    def __call__(self, record: Record) -> None:
        first_error = None
        for sink in self.sinks:
            try:
                sink(record)
            except Exception as e:
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error
