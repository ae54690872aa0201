# tests/conftest.py
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from data_loaders import DAILY_SCHEMA


def _make_daily(rows):
    """
    Daily report frame with every schema column; unspecified fields are NaN.
    'date' in a row is accepted as shorthand for 'dateChecked'.
    """
    records = []
    for r in rows:
        r = dict(r)
        if "date" in r:
            r["dateChecked"] = r.pop("date")
        rec = {col: np.nan for col in DAILY_SCHEMA}
        rec.update(r)
        records.append(rec)
    df = pd.DataFrame(records, columns=list(DAILY_SCHEMA))
    df["dateChecked"] = pd.to_datetime(df["dateChecked"])
    df["state"] = df["state"].astype(object)
    df["hash"] = df["hash"].astype(object)
    return df


@pytest.fixture
def make_daily():
    return _make_daily


@pytest.fixture
def ny_tables():
    """One New York report with no negative count, plus matching lookups."""
    daily = _make_daily([{
        "state": "NY",
        "date": "2020-04-01",
        "positive": 100000.0,
        "negative": np.nan,
        "total": 100000.0,
        "fips": 36.0,
        "death": 3000.0,
    }])
    population = pd.DataFrame({"State": ["New York"], "Population": [19000000.0]})
    abbreviations = pd.DataFrame({"State": ["New York"], "Abbreviation": ["NY"]})
    return daily, population, abbreviations


@pytest.fixture
def small_panel():
    """Three states (one territory) over ten days, with a few gaps."""
    states = [("NY", "New York", 36.0, 19000000.0),
              ("WA", "Washington", 53.0, 7600000.0),
              ("PR", "Puerto Rico", 72.0, 3200000.0)]
    rows = []
    for code, _, fips, _ in states:
        for i, day in enumerate(pd.date_range("2020-03-10", periods=10, freq="D")):
            rows.append({
                "state": code,
                "date": day + pd.Timedelta(hours=20),
                "positive": 1000.0 * (i + 1) * (2 if code == "NY" else 1),
                "negative": np.nan if i == 0 else 5000.0 * (i + 1),
                "total": 1000.0 * (i + 1) + (0 if i == 0 else 5000.0 * (i + 1)),
                "fips": fips,
                "death": np.nan if i < 2 else 10.0 * i,
                "positiveIncrease": 0.0 if i == 0 else 1000.0 * (2 if code == "NY" else 1),
                "hospitalizedCurrently": np.nan,
                "recovered": np.nan,
            })
    daily = _make_daily(rows)
    population = pd.DataFrame({
        "State": [name for _, name, _, _ in states],
        "Population": [pop for _, _, _, pop in states],
    })
    abbreviations = pd.DataFrame({
        "State": [name for _, name, _, _ in states],
        "Abbreviation": [code for code, _, _, _ in states],
    })
    return daily, population, abbreviations
