# src/report.py
import os
import pandas as pd

from modeling import SIGNIFICANCE_LEVEL

FIGURE_CAPTIONS = {
    "positive_boxplot": "Distribution of cumulative positive tests across all state-days.",
    "positive_vs_date": "Cumulative positive tests by report date, all rows.",
    "positive_vs_date_since_cutoff": "Cumulative positive tests from the start of the analysis window, by state.",
    "new_cases_vs_population": "Mean daily new positive cases against state population.",
    "infection_percent_trend": "Percentage of the population with a positive test, by state.",
    "residuals": "Residuals of the linear trend against fitted values.",
}


def _rel(path: str, start: str) -> str:
    return os.path.relpath(path, start).replace(os.sep, "/")


def _table_block(df: pd.DataFrame, float_format="{:.4g}".format) -> str:
    return "```\n" + df.to_string(index=False, float_format=float_format) + "\n```\n"


def conclusion_text(slope: dict, spread: dict = None) -> str:
    """
    Closing paragraph: significance decision, then what the residual spread
    (modeling.residual_spread) says about the fit.
    """
    if slope["significant"]:
        decision = (
            f"The slope on days is {slope['slope']:.4g} percentage points per day "
            f"(p = {slope['p_value']:.3g} < {SIGNIFICANCE_LEVEL}), so the null hypothesis of no "
            "relationship between date and infection percentage is rejected."
        )
    else:
        decision = (
            f"The slope on days is {slope['slope']:.4g} percentage points per day "
            f"(p = {slope['p_value']:.3g} >= {SIGNIFICANCE_LEVEL}), so the null hypothesis of no "
            "relationship between date and infection percentage is not rejected."
        )
    if spread is not None and spread["fans_out"]:
        caveat = (
            "The residuals fan out as the fitted value grows (standard deviation "
            f"{spread['lower_sd']:.3g} in the lower half of fitted values against "
            f"{spread['upper_sd']:.3g} in the upper half), so the constant-variance "
            "assumption of the straight-line fit does not hold and a single line pooled "
            "over all states is not an adequate description of how the infected share evolves."
        )
    elif spread is not None:
        caveat = (
            "The residual spread is similar across fitted values (standard deviation "
            f"{spread['lower_sd']:.3g} in the lower half against {spread['upper_sd']:.3g} "
            "in the upper half); see the residual plot for any remaining structure."
        )
    else:
        caveat = "See the residual plot for how well the straight line fits."
    return decision + "\n\n" + caveat + "\n"


def render_report(report_path, figures, missingness, coef_table, slope, n_rows,
                  date_range=(None, None), spread=None):
    """
    Write the Markdown analysis document and return its path.

    Parameters
    ----------
    report_path : str
        Output file.
    figures : dict
        {figure name: path}; links are written relative to the report.
    missingness : pd.DataFrame
        Output of helpers.missingness_summary on the joined table.
    coef_table : pd.DataFrame
        Output of modeling.coefficient_table.
    slope : dict
        Output of modeling.summarize_slope.
    n_rows : int
        Rows in the derived (modelled) table.
    date_range : tuple
        (first, last) date of the derived table.
    spread : dict, optional
        Output of modeling.residual_spread.
    """
    out_dir = os.path.dirname(os.path.abspath(report_path))
    os.makedirs(out_dir, exist_ok=True)

    first, last = date_range
    lines = ["# Share of US state populations with a positive COVID-19 test", ""]

    lines += ["## Data", ""]
    lines.append(
        "Daily state reports are joined with 2019 state populations through the state "
        "abbreviation table (full outer joins). Territories (FIPS code 60 and above) are removed."
    )
    if first is not None:
        lines.append(f"The analysis window runs from {first.date()} to {last.date()} ({n_rows} state-days).")
    lines.append("")

    lines += ["## Missing data", ""]
    lines.append(
        "Columns with pervasive missingness (hospitalization, ICU, ventilator, recovered) are "
        "dropped; missing negative counts are set to 0; missing deaths are flagged in "
        "`missing_deaths` and left unimputed."
    )
    lines.append("")
    top = missingness[missingness["n_missing"] > 0]
    if not top.empty:
        lines.append(_table_block(top, float_format="{:.1f}".format))

    lines += ["## Figures", ""]
    for name, path in figures.items():
        caption = FIGURE_CAPTIONS.get(name, name)
        lines.append(f"![{caption}]({_rel(path, out_dir)})")
        lines.append("")
        lines.append(f"*{caption}*")
        lines.append("")

    lines += ["## Model", ""]
    lines.append("Ordinary least squares: `infection_percent ~ days`.")
    lines.append("")
    lines.append(_table_block(coef_table))

    lines += ["## Conclusion", ""]
    lines.append(conclusion_text(slope, spread))

    with open(report_path, "w", encoding="utf-8") as fh:
        fh.write("\n".join(lines))
    return report_path
