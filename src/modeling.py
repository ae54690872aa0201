# src/modeling.py
"""
Linear trend of the infection percentage over time.

One ordinary-least-squares model is fitted,

    infection_percent = b0 + b1 * days

where `days` counts whole days since the start of the analysis window. The
slope is judged significant when its p-value is below SIGNIFICANCE_LEVEL.
Rows with a missing ratio are dropped by statsmodels (missing="drop").

Fitted values and residuals are returned per row for the diagnostic plot,
along with a residual spread comparison across low and high fitted values. No
formal tests beyond the slope t-test and no alternative models are run here.
"""
from __future__ import annotations

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf

from transforms import CUTOFF_DATE

SIGNIFICANCE_LEVEL = 0.05
FORMULA = "infection_percent ~ days"
SLOPE_TERM = "days"
# Upper-half residual spread above this multiple of the lower half counts as fanning out.
FAN_OUT_RATIO = 1.5


def add_time_index(df: pd.DataFrame, origin=CUTOFF_DATE) -> pd.DataFrame:
    """
    Return a copy of `df` with a float 'days' column: whole days since `origin`.
    """
    out = df.copy()
    out["days"] = (out["date"] - pd.Timestamp(origin)).dt.days.astype(float)
    return out


def fit_infection_trend(derived: pd.DataFrame, origin=CUTOFF_DATE):
    """
    Fit the OLS trend on the derived table.

    Parameters
    ----------
    derived : pd.DataFrame
        Table with 'date' and 'infection_percent'.
    origin : date-like
        Day zero of the time index.

    Returns
    -------
    (results, data)
        statsmodels RegressionResults and the modelling frame (with 'days').
    """
    data = add_time_index(derived, origin)
    results = smf.ols(FORMULA, data=data, missing="drop").fit()
    print(f"[model] OLS on {int(results.nobs)} rows: R^2 = {results.rsquared:.3f}")
    return results, data


def coefficient_table(results) -> pd.DataFrame:
    """
    Tidy coefficient table: term, estimate, std_error, statistic, p_value.
    """
    return pd.DataFrame({
        "term": list(results.params.index),
        "estimate": list(results.params),
        "std_error": list(results.bse),
        "statistic": list(results.tvalues),
        "p_value": list(results.pvalues),
    })


def summarize_slope(results, term: str = SLOPE_TERM) -> dict:
    """
    Slope estimate with its standard error, t statistic, p-value and the
    significance decision at SIGNIFICANCE_LEVEL.
    """
    p = float(results.pvalues[term])
    return {
        "slope": float(results.params[term]),
        "std_error": float(results.bse[term]),
        "t_value": float(results.tvalues[term]),
        "p_value": p,
        "significant": bool(p < SIGNIFICANCE_LEVEL),
    }


def fit_diagnostics(results, data: pd.DataFrame) -> pd.DataFrame:
    """
    Per-row fitted values and residuals for every row used in the fit.
    """
    used = data.loc[results.fittedvalues.index]
    out = used[["state", "date", "days", "infection_percent"]].copy()
    out["fitted"] = results.fittedvalues
    out["residual"] = results.resid
    return out


def residual_spread(diagnostics: pd.DataFrame) -> dict:
    """
    Residual standard deviation in the lower and upper halves of the fitted values.

    Rows are ordered by fitted value and split at the middle row. 'ratio' is
    upper / lower; it is NaN when either half has fewer than two rows, and inf
    when only the lower half has zero spread.
    """
    ordered = diagnostics.sort_values("fitted", kind="stable")
    half = len(ordered) // 2
    lower = float(ordered["residual"].iloc[:half].std())
    upper = float(ordered["residual"].iloc[half:].std())
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = float(np.float64(upper) / np.float64(lower))
    return {
        "lower_sd": lower,
        "upper_sd": upper,
        "ratio": ratio,
        "fans_out": bool(ratio > FAN_OUT_RATIO),
    }
