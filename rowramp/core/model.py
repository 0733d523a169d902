# rowramp/core/model.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Sequence, Union

from .errors import MalformedRowError


@dataclass(frozen=True)
class Numeric:
    kind: ClassVar[str] = "numeric"
    value: float


@dataclass(frozen=True)
class Text:
    kind: ClassVar[str] = "text"
    value: str


Cell = Union[Numeric, Text]
TypedRow = tuple  # tuple[Cell, ...], same length as Dataset.columns


@dataclass(frozen=True)
class Dataset:
    columns: tuple[str, ...]        # output key order
    rows: tuple[tuple[str, ...], ...]  # raw cell text, one tuple per data row
    source: str = ""                # file the rows came from (may be empty)

    @classmethod
    def from_rows(cls, columns: Sequence[str], rows: Sequence[Sequence[str]], source: str = "") -> "Dataset":
        """
        Build a dataset, rejecting ragged rows and duplicate column names.
        Row numbers in errors are 1-based data rows (header excluded).
        """
        cols = tuple(str(c) for c in columns)
        seen = set()
        for c in cols:
            if c in seen:
                raise MalformedRowError(f"duplicate column name {c!r}")
            seen.add(c)

        out = []
        for n, raw in enumerate(rows, start=1):
            raw = tuple(str(v) for v in raw)
            if len(raw) != len(cols):
                raise MalformedRowError(
                    f"row {n} has {len(raw)} cells, expected {len(cols)}", row_number=n)
            out.append(raw)
        return cls(columns=cols, rows=tuple(out), source=source)

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class Record:
    """One emitted frame: ordered (column, cell) pairs."""

    fields: tuple[tuple[str, Cell], ...]

    @classmethod
    def build(cls, columns: Sequence[str], row: Sequence[Cell]) -> "Record":
        return cls(fields=tuple(zip(columns, row)))

    def as_dict(self) -> dict:
        return {name: cell.value for name, cell in self.fields}

    def __getitem__(self, name: str):
        for key, cell in self.fields:
            if key == name:
                return cell.value
        raise KeyError(name)


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    SINGLE_ROW_HOLD = "single_row_hold"
    RAMPING = "ramping"
    STOPPED = "stopped"


@dataclass
class PlaybackState:
    ramp_ms: int = 500
    cursor: int = -1                      # last row index handed out, -1 = none yet
    settled_row: TypedRow | None = None   # "from" anchor
    target_row: TypedRow | None = None    # "to" row, None while holding
    elapsed_ms: int = 0
    running: bool = False
