# src/helpers.py
"""
General-purpose helpers shared across the pipeline.

- Missingness profile of a table (used to document the column drop lists).
- Date span of a table (report text).
- Figure filename construction.

All functions are pure and side-effect free (except directory creation in
_figure_path).

IMPORTANT: This module does not import project-specific modules to avoid circular
dependencies.
"""
from __future__ import annotations

import os
import pandas as pd


def missingness_summary(df: pd.DataFrame) -> pd.DataFrame:
    """
    Per-column count and percentage of missing values, most-missing first.

    Parameters
    ----------
    df : pd.DataFrame
        Any table.

    Returns
    -------
    pd.DataFrame
        Columns 'column', 'n_missing', 'pct_missing'. Ties keep the
        original column order.
    """
    n = len(df)
    miss = df.isna().sum()
    pct = (100.0 * miss / n) if n else miss.astype(float) * 0.0
    out = pd.DataFrame({
        "column": miss.index,
        "n_missing": miss.to_numpy(dtype=int),
        "pct_missing": pct.to_numpy(dtype=float),
    })
    return out.sort_values("n_missing", ascending=False, kind="stable").reset_index(drop=True)


def date_span(df: pd.DataFrame, col: str = "date") -> tuple:
    """
    (first, last) non-null date in `col`, or (None, None) for an empty column.
    """
    s = pd.to_datetime(df[col]).dropna()
    if s.empty:
        return None, None
    return s.min(), s.max()


def _figure_path(figures_dir: str, name: str, fmt: str = "pdf") -> str:
    """
    '<figures_dir>/<name>.<fmt>', creating the directory if needed.
    """
    os.makedirs(figures_dir, exist_ok=True)
    return os.path.join(figures_dir, f"{name}.{fmt.lstrip('.')}")
