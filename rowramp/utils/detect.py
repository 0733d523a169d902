# rowramp/utils/detect.py
from __future__ import annotations
from pathlib import Path
import zipfile
from typing import Literal

DetectedKind = Literal["csv", "csvzip", "json", "unknown"]


def _is_zip_with_csv(p: Path) -> bool:
    if not p.is_file():
        return False
    try:
        if not zipfile.is_zipfile(p):
            return False
        with zipfile.ZipFile(p, "r") as zf:
            return any(name.lower().endswith(".csv") for name in zf.namelist())
    except (OSError, zipfile.BadZipFile):
        return False


def detect_kind(p: Path) -> DetectedKind:
    """
    Classify a single path.
    - .csv  -> 'csv'
    - .zip (with any .csv member) -> 'csvzip'
    - .json -> 'json'
    else    -> 'unknown'
    """
    p = Path(p)
    suffix = p.suffix.lower()
    if suffix == ".csv":
        return "csv"
    if suffix == ".zip" and _is_zip_with_csv(p):
        return "csvzip"
    if suffix == ".json":
        return "json"
    return "unknown"
