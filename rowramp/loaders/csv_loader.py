# rowramp/loaders/csv_loader.py
from __future__ import annotations
from pathlib import Path
import csv, io, logging, zipfile
import pandas as pd

from ..core.errors import MalformedRowError
from ..core.model import Dataset

_LOG = logging.getLogger(__name__)


# ---------- shape check ----------
def _check_rectangular(lines: list[str]) -> list[str]:
    """
    Plain comma-separated data only (no quoting), so a row's width is its
    comma count. Returns the header names; raises on any ragged data row.
    """
    if not lines:
        raise MalformedRowError("CSV is empty (no header line)")
    header = [h.strip() for h in lines[0].split(",")]
    for n, line in enumerate(lines[1:], start=1):
        width = line.count(",") + 1
        if width != len(header):
            raise MalformedRowError(
                f"row {n} has {width} cells, expected {len(header)}", row_number=n)
    return header


# ---------- CSV → Dataset ----------
def _dataset_from_csv_bytes(buff: bytes, source: str) -> Dataset:
    lines = [ln for ln in buff.decode("utf-8-sig").splitlines() if ln.strip()]
    header = _check_rectangular(lines)
    df = pd.read_csv(io.StringIO("\n".join(lines) + "\n"), sep=",", header=0, dtype=str,
                     na_filter=False, quoting=csv.QUOTE_NONE, skip_blank_lines=True)
    rows = list(df.itertuples(index=False, name=None))
    ds = Dataset.from_rows(header, rows, source=source)
    if len(ds) == 0:
        _LOG.warning("%s: CSV has no data rows, just a header", source)
    return ds


def _first_csv_member(zf: zipfile.ZipFile) -> str | None:
    members = sorted(m for m in zf.namelist() if m.lower().endswith(".csv"))
    return members[0] if members else None


# ---------- public loader ----------
def load(path: Path) -> Dataset:
    """
    Accepts: a loose .csv file, or a .zip with CSV members (first one by name).
    The first line is the header; every cell is kept as raw text.
    """
    path = Path(path)
    if path.suffix.lower() == ".zip":
        with zipfile.ZipFile(path, "r") as zf:
            member = _first_csv_member(zf)
            if member is None:
                raise ValueError(f"{path.name}: zip contains no CSV member")
            ds = _dataset_from_csv_bytes(zf.read(member), source=str(path / member))
    else:
        ds = _dataset_from_csv_bytes(path.read_bytes(), source=str(path))
    _LOG.info("loaded %s: %d data row(s), columns=%s", path.name, len(ds), list(ds.columns))
    return ds
