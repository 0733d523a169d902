# rowramp/loaders/json_loader.py
from __future__ import annotations
from pathlib import Path
import json, logging

_LOG = logging.getLogger(__name__)


def load(path: Path) -> dict:
    """Optional side-car metadata (e.g. per-column min/max). Must be a JSON object."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path.name}: expected a JSON object, got {type(data).__name__}")
    _LOG.info("loaded metadata %s (%d key(s))", path.name, len(data))
    return data
