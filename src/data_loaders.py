# src/data_loaders.py
import os
import yaml
import pandas as pd


# Column -> semantic type. Columns listed here must be present in the CSV;
# anything else in the file is kept as read.
DAILY_SCHEMA = {
    "dateChecked": "datetime",
    "state": "string",
    "fips": "float",
    "positive": "float",
    "negative": "float",
    "pending": "float",
    "total": "float",
    "death": "float",
    "hospitalized": "float",
    "totalTestResults": "float",
    "posNeg": "float",
    "positiveIncrease": "float",
    "negativeIncrease": "float",
    "deathIncrease": "float",
    "hospitalizedIncrease": "float",
    "totalTestResultsIncrease": "float",
    "hospitalizedCurrently": "float",
    "hospitalizedCumulative": "float",
    "inIcuCurrently": "float",
    "inIcuCumulative": "float",
    "onVentilatorCurrently": "float",
    "onVentilatorCumulative": "float",
    "recovered": "float",
    "hash": "string",
}

ABBREVIATION_SCHEMA = {
    "State": "string",
    "Abbreviation": "string",
}

POPULATION_SCHEMA = {
    "State": "string",
    "Population": "float",
}

SCHEMAS = {
    "daily": DAILY_SCHEMA,
    "population": POPULATION_SCHEMA,
    "abbreviations": ABBREVIATION_SCHEMA,
}


def return_default_config():
    """
    Returns the default configuration dictionary
    """
    return {
        "paths": {
            "data_dir": "./data",
            "daily_csv": "./data/daily.csv",
            "population_csv": "./data/state_populations.csv",
            "abbreviations_csv": "./data/state_abbreviations.csv",
            "figures_dir": "./figures",
            "report_path": "./results/report.md",
        },
        "figures": {"format": "pdf", "dpi": 150},
        "diagnostics": {
            "print_missingness": True,
        },
        "maintenance": {"clean_run": False},
    }

def _resolve(ROOT_DIR, p):
    """
    Resolve path p relative to ROOT_DIR if not absolute.
    """
    return os.path.abspath(os.path.join(ROOT_DIR, p))

def _deep_merge(dst, src):
    """
    Recursively merge src into dst
    """
    for k, v in src.items():
        if isinstance(v, dict) and isinstance(dst.get(k), dict):
            _deep_merge(dst[k], v)
        else:
            dst[k] = v

def _load_config(ROOT_DIR: str, path: str):
    """
    Load YAML config if present; otherwise use defaults for both config and paths.
    Returns (cfg, PATHS)
    """
    cfg = return_default_config()
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as fh:
            user = yaml.safe_load(fh) or {}
        _deep_merge(cfg, user)
    else:
        print(f"[config] No config file at {path}; using built-in defaults.")

    PATHS = {key: _resolve(ROOT_DIR, p) for key, p in cfg["paths"].items()}
    return cfg, PATHS

# ----------------------------- table loading ---------------------------------

def _coerce_column(s: pd.Series, kind: str) -> pd.Series:
    """
    Coerce one column to its semantic type. Raises on values that do not parse.
    """
    if kind == "float":
        return pd.to_numeric(s, errors="raise").astype(float)
    if kind == "datetime":
        return pd.to_datetime(s, errors="raise", utc=True).dt.tz_convert(None)
    if kind == "string":
        return s.astype("string").str.strip()
    raise ValueError(f"Unknown column type '{kind}'")

def validate_schema(df: pd.DataFrame, schema: dict, name: str = "table") -> pd.DataFrame:
    """
    Check that every schema column is present and coerce it to its declared type.

    Args:
        df (pd.DataFrame): Raw table as read from disk.
        schema (dict): Mapping column -> one of 'string', 'float', 'datetime'.
        name (str): Table name used in error messages.

    Returns:
        pd.DataFrame: A copy with schema columns coerced; other columns untouched.

    Raises:
        KeyError: If a schema column is missing.
        ValueError: If a schema column holds a value that cannot be coerced.
    """
    missing = [c for c in schema if c not in df.columns]
    if missing:
        raise KeyError(f"{name}: missing expected column(s) {missing}")

    out = df.copy()
    for col, kind in schema.items():
        try:
            out[col] = _coerce_column(out[col], kind)
        except (ValueError, TypeError) as e:
            raise ValueError(f"{name}: column '{col}' is not {kind}: {e}") from e
    return out

def load_table(file_path: str, schema: dict, name: str = "table") -> pd.DataFrame:
    """
    Reads one delimited file and validates it against `schema`.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"{name}: file not found: {file_path}")
    df = pd.read_csv(file_path, thousands=",")
    return validate_schema(df, schema, name)

def load_all_data(paths: dict) -> dict:
    """
    Loads the daily report, population and abbreviation tables.

    `paths` needs the keys 'daily_csv', 'population_csv' and 'abbreviations_csv'
    (the PATHS dict returned by `_load_config`).
    """
    data_files = {
        "daily": paths["daily_csv"],
        "population": paths["population_csv"],
        "abbreviations": paths["abbreviations_csv"],
    }
    tables = {name: load_table(path, SCHEMAS[name], name) for name, path in data_files.items()}
    for name, df in tables.items():
        print(f"[load] {name}: {df.shape[0]} rows x {df.shape[1]} columns")
    return tables
