# src/transforms.py
import numpy as np
import pandas as pd

# First day of the analysis window; earlier reporting was too sparse to compare states.
CUTOFF_DATE = pd.Timestamp("2020-03-15")


def restrict_to_cutoff(df: pd.DataFrame, cutoff=CUTOFF_DATE) -> pd.DataFrame:
    """
    Rows dated on or after `cutoff`.
    """
    return df.loc[df["date"] >= pd.Timestamp(cutoff)].copy()


def derive_infection_table(cleaned: pd.DataFrame, cutoff=CUTOFF_DATE) -> pd.DataFrame:
    """
    Restrict the cleaned table to the analysis window and add

        infection_percent = 100 * positive / Population

    Rows without a positive population get NaN rather than inf.
    """
    df = restrict_to_cutoff(cleaned, cutoff)
    pop = pd.to_numeric(df["Population"], errors="coerce")
    with np.errstate(divide="ignore", invalid="ignore"):
        df["infection_percent"] = np.where(pop > 0, 100.0 * df["positive"] / pop, np.nan)
    print(f"[derive] {len(df)} rows on or after {pd.Timestamp(cutoff).date()}")
    return df


def mean_new_cases_by_state(df: pd.DataFrame) -> pd.DataFrame:
    """
    Per-state mean of the day-over-day new positive count, with the state's population.

    Returns columns: state, mean_new_cases, Population.
    """
    out = (
        df.groupby("state", as_index=False)
          .agg(mean_new_cases=("positiveIncrease", "mean"), Population=("Population", "first"))
    )
    return out
