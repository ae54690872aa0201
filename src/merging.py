# src/merging.py
import logging
import pandas as pd

STATE_NAME_COL = "State"
ABBREV_COL = "Abbreviation"
DAILY_STATE_COL = "state"


def merge_tables(daily: pd.DataFrame, population: pd.DataFrame,
                 abbreviations: pd.DataFrame) -> pd.DataFrame:
    """
    Join the three input tables into one (state, date) panel with population.

    Two successive full outer joins:
      1. population ⟗ abbreviations on the full state name ('State');
      2. result ⟗ daily on 'Abbreviation' == 'state'.

    Unmatched rows on either side are kept with nulls. Duplicate keys are not
    collapsed: every matching pair within a key group produces a row, as with
    any pandas outer merge.
    """
    states = population.merge(abbreviations, on=STATE_NAME_COL, how="outer")
    joined = states.merge(
        daily,
        left_on=ABBREV_COL,
        right_on=DAILY_STATE_COL,
        how="outer",
    )

    counts = unmatched_keys(joined)
    if counts["no_daily_rows"]:
        logging.warning(f"[join] {counts['no_daily_rows']} state row(s) have no daily report match")
    if counts["no_state_match"]:
        logging.warning(f"[join] {counts['no_state_match']} daily row(s) have no population/abbreviation match")
    return joined


def unmatched_keys(joined: pd.DataFrame) -> dict:
    """
    Count joined rows that came from only one side of the second join.
    """
    return {
        "no_daily_rows": int(joined[DAILY_STATE_COL].isna().sum()),
        "no_state_match": int(joined[ABBREV_COL].isna().sum()),
    }
