# rowramp/core/interpolate.py
from __future__ import annotations
from .model import Cell, Numeric, TypedRow


def ramp_fraction(elapsed_ms: int, ramp_ms: int) -> float:
    frac = elapsed_ms / max(1, ramp_ms)
    return 1.0 if frac > 1.0 else frac


def lerp(a: float, b: float, frac: float) -> float:
    # endpoints are returned as-is so "ramp complete" and the following hold agree bit-for-bit
    if frac <= 0.0:
        return a
    if frac >= 1.0:
        return b
    v = a + (b - a) * frac
    lo, hi = (a, b) if a <= b else (b, a)
    return min(max(v, lo), hi)


def interpolate_cell(a: Cell, b: Cell, frac: float) -> Cell:
    if a.kind == "numeric" and b.kind == "numeric":
        return Numeric(lerp(a.value, b.value, frac))
    # text (or mixed) columns snap only once the ramp is complete
    return a if frac < 1.0 else b


def interpolate_row(a: TypedRow, b: TypedRow, frac: float) -> TypedRow:
    """
    Blend two typed rows column by column.
    Numeric pairs are linearly interpolated; any pair involving text holds
    the 'from' cell until frac reaches 1.
    """
    return tuple(interpolate_cell(x, y, frac) for x, y in zip(a, b))
