# rowramp/core/recorder.py
from __future__ import annotations
from pathlib import Path
from typing import Literal
import numpy as np
import pandas as pd
from scipy.io import savemat

from .model import Record

RecordFormat = Literal["csv", "mat", "both"]


class Recorder:
    """
    Emitter that keeps every record in memory so a playback run can be
    written out afterwards (CSV and/or MATLAB struct) or plotted.
    """

    def __init__(self, tick_ms: int = 16):
        self.tick_ms = int(tick_ms)
        self.records: list[Record] = []

    def __call__(self, record: Record) -> None:
        self.records.append(record)

    def __len__(self) -> int:
        return len(self.records)

    def clear(self) -> None:
        self.records.clear()

    def to_dataframe(self) -> pd.DataFrame:
        """One row per emitted record plus a leading `t_ms` column (tick index * tick_ms)."""
        if not self.records:
            return pd.DataFrame(columns=["t_ms"])
        # matched by column name: a reload may change the columns mid-recording
        df = pd.DataFrame([r.as_dict() for r in self.records])
        df.insert(0, "t_ms", np.arange(len(df), dtype=np.int64) * self.tick_ms)
        return df

    def write(self, out_base: Path, fmt: RecordFormat = "csv", mat_variable: str = "playback") -> list[Path]:
        """
        Write the recording.
        - out_base is a *base path without extension* (e.g., .../playback)
        - fmt: "csv" | "mat" | "both"
        """
        if not self.records:
            print("[INFO] nothing recorded; skipping output.")
            return []
        df_out = self.to_dataframe()
        written = []
        if fmt in ("csv", "both"):
            written.append(_write_csv(df_out, out_base.with_suffix(".csv")))
        if fmt in ("mat", "both"):
            written.append(_write_mat(df_out, out_base.with_suffix(".mat"), mat_variable))
        return written


def _write_csv(df_out: pd.DataFrame, out_csv: Path) -> Path:
    out_csv.parent.mkdir(parents=True, exist_ok=True)
    df_out.to_csv(out_csv, index=False, encoding="utf-8")
    print(f"[OK] wrote recording → {out_csv}")
    return out_csv


def _to_mat_cellstr(seq: list) -> np.ndarray:
    """Make a MATLAB column cell array from a list of strings."""
    seq2 = [("" if s is None or pd.isna(s) else str(s)) for s in seq]
    arr = np.empty((len(seq2), 1), dtype=object)
    arr[:, 0] = seq2
    return arr


def _mat_field_name(name: str, taken: set) -> str:
    import re
    s = re.sub(r"[^A-Za-z0-9_]+", "_", str(name)).strip("_") or "col"
    if not s[0].isalpha():
        s = "c_" + s
    base, k = s[:60], 2
    s = base
    while s in taken:
        s = f"{base}_{k}"
        k += 1
    taken.add(s)
    return s


def _write_mat(df_out: pd.DataFrame, out_mat: Path, varname: str) -> Path:
    """
    Save a MATLAB struct with one field per column.
    All-numeric columns become double (Nx1); anything else a cell array (Nx1).
    Column names are sanitised into valid MATLAB field names.
    """
    out_mat.parent.mkdir(parents=True, exist_ok=True)
    taken: set = set()
    mat_struct = {}
    for col in df_out.columns:
        series = df_out[col]
        key = _mat_field_name(col, taken)
        if pd.api.types.is_numeric_dtype(series):
            mat_struct[key] = series.to_numpy(dtype=float).reshape(-1, 1)
        else:
            mat_struct[key] = _to_mat_cellstr(series.tolist())
    savemat(out_mat, {varname: mat_struct})
    print(f"[OK] wrote recording → {out_mat}")
    return out_mat
