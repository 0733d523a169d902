# rowramp/core/plotting.py
from __future__ import annotations
from pathlib import Path
import matplotlib.pyplot as plt
import pandas as pd


def numeric_columns(df: pd.DataFrame) -> list[str]:
    return [c for c in df.columns
            if c != "t_ms" and pd.api.types.is_numeric_dtype(df[c]) and df[c].notna().any()]


def _thin_xy(x, y, max_points: int):
    """Light decimator: keep at most max_points evenly spaced points."""
    import numpy as np
    n = len(x)
    if n <= max_points or max_points <= 0:
        return x, y
    idx = np.linspace(0, n - 1, max_points).astype(int)
    return x[idx], y[idx]


def save_playback_plot(df: pd.DataFrame, out_path: Path, title: str,
                       legend_ncol: int = 4, max_points: int = 20000) -> Path | None:
    """
    Plot every numeric column of a recording against `t_ms`.
    Text columns cannot be drawn and are left out; with no numeric column
    the plot is skipped.
    """
    cols = numeric_columns(df) if "t_ms" in df.columns else []
    if not cols:
        print(f"[INFO] {title}: no numeric columns recorded; skipping plot.")
        return None
    out_path.parent.mkdir(parents=True, exist_ok=True)

    plt.figure(figsize=(11, 6))
    t = df["t_ms"].to_numpy()
    for col in cols:
        x, y = _thin_xy(t, df[col].to_numpy(dtype=float), max_points)
        plt.plot(x, y, label=str(col))
    plt.xlabel("time [ms]")
    plt.ylabel("value")
    plt.title(f"{title} — interpolated playback")
    plt.grid(True, alpha=0.3)
    plt.legend(
        fontsize=8,
        ncol=legend_ncol,
        loc="upper center",
        bbox_to_anchor=(0.5, -0.15),
        frameon=False,
    )
    plt.tight_layout(rect=[0, 0.18, 1, 1])
    plt.savefig(out_path, dpi=160)
    plt.close()
    print(f"[OK] {title}: {len(cols)} series → {out_path}")
    return out_path
