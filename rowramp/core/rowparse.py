# rowramp/core/rowparse.py
from __future__ import annotations
from typing import Sequence
import numpy as np

from .model import Cell, Numeric, Text, TypedRow


def parse_cell(raw: str) -> Cell:
    """Numeric if the text is a finite float, else the original text."""
    text = "" if raw is None else str(raw)
    try:
        num = float(text)
    except ValueError:
        return Text(text)
    if not np.isfinite(num):           # "nan", "inf", "Infinity" stay textual
        return Text(text)
    return Numeric(num)


def parse_row(raw: Sequence[str]) -> TypedRow:
    return tuple(parse_cell(v) for v in raw)

