# ------------------------------------------------------------------------------
# US state COVID-19 infection-percentage pipeline.
# - Loads the daily state reports, state populations and state abbreviations.
# - Full outer joins them into one (state, date) panel.
# - Cleans: territories out, dateChecked -> date, fixed column drops,
#   negative NaN -> 0, missing_deaths flag.
# - Derives infection_percent = 100 * positive / Population from the cutoff on.
# - Renders the exploratory figures, fits infection_percent ~ days by OLS,
#   plots the residuals and writes one Markdown report.
# - Optional maintenance.clean_run deletes figures_dir once the inputs load.
# - Relative paths resolve against the config file's directory (or the
#   current directory for an installed script).
# ------------------------------------------------------------------------------


from __future__ import annotations
import os
import sys
import shutil

from data_loaders import load_all_data, _load_config
from merging import merge_tables
from cleaning import clean_joined
from transforms import CUTOFF_DATE, derive_infection_table
from modeling import (
    fit_infection_trend, coefficient_table, summarize_slope, fit_diagnostics, residual_spread,
)
from figures_static import render_figures, plot_residuals
from helpers import missingness_summary, date_span, _figure_path
from report import render_report

# ------------------------------- Config loading -------------------------------
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
CONFIG_NAME = "config.yaml"


def _project_root() -> str:
    """
    Directory that config.yaml and relative paths are resolved against.

    The current directory when it holds a config.yaml, or when this module is
    installed (no pyproject.toml above src/); otherwise the source checkout.
    """
    cwd = os.getcwd()
    if os.path.exists(os.path.join(cwd, CONFIG_NAME)):
        return cwd
    if not os.path.exists(os.path.join(ROOT_DIR, "pyproject.toml")):
        return cwd
    return ROOT_DIR


def run_pipeline(CFG: dict, PATHS: dict, cutoff=CUTOFF_DATE) -> dict:
    """
    Run every stage once, top to bottom. Any exception aborts the run.

    Returns a dict with the intermediate tables, the fit and the output paths.
    """
    fig_cfg = CFG.get("figures", {})
    fmt = fig_cfg.get("format", "pdf")
    dpi = int(fig_cfg.get("dpi", 150))

    # Load (inputs must all validate before figures_dir is touched)
    tables = load_all_data(PATHS)

    # Maintenance: clean run (delete figures_dir)
    if bool(CFG.get("maintenance", {}).get("clean_run", False)):
        if os.path.isdir(PATHS["figures_dir"]):
            shutil.rmtree(PATHS["figures_dir"])
            print(f"[maintenance] Removed figures_dir: {PATHS['figures_dir']}")
    os.makedirs(PATHS["figures_dir"], exist_ok=True)

    # Join
    joined = merge_tables(tables["daily"], tables["population"], tables["abbreviations"])
    print(f"[join] {len(joined)} rows after outer joins")

    # Explore
    missingness = missingness_summary(joined)
    if bool(CFG.get("diagnostics", {}).get("print_missingness", True)):
        print("[explore] Missing values in joined table:")
        print(missingness[missingness["n_missing"] > 0].to_string(index=False))

    # Clean + derive
    cleaned = clean_joined(joined)
    derived = derive_infection_table(cleaned, cutoff)

    # Visualize
    figures = render_figures(cleaned, derived, PATHS["figures_dir"], cutoff=cutoff, fmt=fmt, dpi=dpi)

    # Fit + diagnose
    results, data = fit_infection_trend(derived, origin=cutoff)
    coefs = coefficient_table(results)
    slope = summarize_slope(results)
    diagnostics = fit_diagnostics(results, data)
    spread = residual_spread(diagnostics)
    figures["residuals"] = plot_residuals(
        diagnostics, _figure_path(PATHS["figures_dir"], "residuals", fmt), dpi=dpi
    )
    print(f"[model] slope = {slope['slope']:.4g} (se {slope['std_error']:.3g}, "
          f"p = {slope['p_value']:.3g}); significant: {slope['significant']}")

    # Report
    report_path = render_report(
        PATHS["report_path"], figures, missingness, coefs, slope,
        n_rows=len(derived), date_range=date_span(derived), spread=spread,
    )
    print(f"[output] Report written to {report_path}")

    return {
        "joined": joined,
        "cleaned": cleaned,
        "derived": derived,
        "results": results,
        "coefficients": coefs,
        "slope": slope,
        "diagnostics": diagnostics,
        "figures": figures,
        "report_path": report_path,
    }


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if argv:
        config_path = os.path.abspath(argv[0])
        root = os.path.dirname(config_path)
    else:
        root = _project_root()
        config_path = os.path.join(root, CONFIG_NAME)
    CFG, PATHS = _load_config(root, config_path)
    run_pipeline(CFG, PATHS)


if __name__ == "__main__":
    main()
