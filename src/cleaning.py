# src/cleaning.py
import pandas as pd

# FIPS codes of 60 and above are territories (AS, GU, MP, PR, VI).
FIPS_TERRITORY_THRESHOLD = 60

DATE_SOURCE_COL = "dateChecked"
DATE_COL = "date"

# Redundant with other columns, or flagged as unreliable by the data source.
UNRELIABLE_COLUMNS = [
    "Abbreviation",
    "pending",
    "hash",
    "hospitalized",
    "posNeg",
    "totalTestResults",
    "negativeIncrease",
    "deathIncrease",
    "hospitalizedIncrease",
    "totalTestResultsIncrease",
]

# Missing for most states on most days; there is no safe fill for these.
SPARSE_COLUMNS = [
    "hospitalizedCurrently",
    "hospitalizedCumulative",
    "inIcuCurrently",
    "inIcuCumulative",
    "onVentilatorCurrently",
    "onVentilatorCumulative",
    "recovered",
]


def drop_territories(df: pd.DataFrame) -> pd.DataFrame:
    """
    Keep the 50 states + DC. Rows with a missing FIPS code are dropped too,
    since they cannot be placed below the threshold.
    """
    return df.loc[df["fips"] < FIPS_TERRITORY_THRESHOLD].copy()


def normalize_date(df: pd.DataFrame) -> pd.DataFrame:
    """
    Copy the calendar day of the check timestamp into 'date' and drop the source.
    """
    out = df.copy()
    out[DATE_COL] = pd.to_datetime(out[DATE_SOURCE_COL]).dt.normalize()
    return out.drop(columns=[DATE_SOURCE_COL])


def apply_missing_policy(df: pd.DataFrame) -> pd.DataFrame:
    """
    Per-column missing-value rules.

    - negative: missing counts coincide with total == positive, i.e. no
      negative results were reported yet, so they are set to 0.
    - death: left as is; 'missing_deaths' records where it was absent.
    """
    out = df.copy()
    out["negative"] = out["negative"].fillna(0)
    out["missing_deaths"] = out["death"].isna()
    return out


def clean_joined(joined: pd.DataFrame) -> pd.DataFrame:
    """
    Apply the cleaning rules to the joined table, in order:

      a. keep rows with fips < 60;
      b. dateChecked -> date (calendar day), source column dropped;
      c. drop UNRELIABLE_COLUMNS;
      d. drop SPARSE_COLUMNS;
      e. negative: NaN -> 0;
      f. missing_deaths = death is NaN.

    No other rows are removed. A missing expected column raises KeyError.
    """
    df = drop_territories(joined)
    df = normalize_date(df)
    df = df.drop(columns=UNRELIABLE_COLUMNS)
    df = df.drop(columns=SPARSE_COLUMNS)
    df = apply_missing_policy(df)
    print(f"[clean] {len(joined)} joined rows -> {len(df)} rows, {df.shape[1]} columns")
    return df
