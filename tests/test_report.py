# tests/test_report.py
import sys
from pathlib import Path

import pandas as pd
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from report import render_report, conclusion_text


@pytest.fixture
def slope_sig():
    return {'slope': 0.01, 'std_error': 0.001, 't_value': 10.0, 'p_value': 1e-8, 'significant': True}


@pytest.fixture
def slope_not_sig():
    return {'slope': 0.0001, 'std_error': 0.001, 't_value': 0.1, 'p_value': 0.9, 'significant': False}


@pytest.fixture
def report_inputs(tmp_path):
    figs = tmp_path / 'figures'
    figs.mkdir()
    figures = {'positive_boxplot': str(figs / 'positive_boxplot.pdf'),
               'residuals': str(figs / 'residuals.pdf')}
    missingness = pd.DataFrame({'column': ['death', 'positive'], 'n_missing': [3, 0],
                                'pct_missing': [30.0, 0.0]})
    coefs = pd.DataFrame({'term': ['Intercept', 'days'], 'estimate': [0.1, 0.01],
                          'std_error': [0.01, 0.001], 'statistic': [10.0, 10.0],
                          'p_value': [1e-8, 1e-8]})
    return figures, missingness, coefs


class TestConclusionText:

    def test_rejects_when_significant(self, slope_sig):
        text = conclusion_text(slope_sig)
        assert 'is rejected' in text

    def test_fanning_residuals_reported(self, slope_sig):
        spread = {'lower_sd': 0.1, 'upper_sd': 1.0, 'ratio': 10.0, 'fans_out': True}
        text = conclusion_text(slope_sig, spread)
        assert 'fan out' in text
        assert 'not an adequate description' in text

    def test_even_residuals_not_called_fanning(self, slope_sig):
        spread = {'lower_sd': 0.5, 'upper_sd': 0.55, 'ratio': 1.1, 'fans_out': False}
        text = conclusion_text(slope_sig, spread)
        assert 'fan out' not in text
        assert 'not an adequate description' not in text
        assert 'similar across fitted values' in text

    def test_without_spread_points_to_figure(self, slope_sig):
        text = conclusion_text(slope_sig)
        assert 'fan out' not in text
        assert 'residual plot' in text

    def test_does_not_reject_otherwise(self, slope_not_sig):
        text = conclusion_text(slope_not_sig)
        assert 'is not rejected' in text


class TestRenderReport:

    def test_writes_sections(self, tmp_path, report_inputs, slope_sig):
        figures, missingness, coefs = report_inputs
        path = render_report(str(tmp_path / 'results' / 'report.md'), figures, missingness, coefs,
                             slope_sig, n_rows=10,
                             date_range=(pd.Timestamp('2020-03-15'), pd.Timestamp('2020-04-01')))
        text = Path(path).read_text(encoding='utf-8')
        for heading in ['## Data', '## Missing data', '## Figures', '## Model', '## Conclusion']:
            assert heading in text
        assert '2020-03-15 to 2020-04-01 (10 state-days)' in text

    def test_figure_links_relative(self, tmp_path, report_inputs, slope_sig):
        figures, missingness, coefs = report_inputs
        path = render_report(str(tmp_path / 'results' / 'report.md'), figures, missingness, coefs,
                             slope_sig, n_rows=10)
        text = Path(path).read_text(encoding='utf-8')
        assert '(../figures/positive_boxplot.pdf)' in text
        assert '(../figures/residuals.pdf)' in text

    def test_tables_embedded(self, tmp_path, report_inputs, slope_sig):
        figures, missingness, coefs = report_inputs
        path = render_report(str(tmp_path / 'report.md'), figures, missingness, coefs,
                             slope_sig, n_rows=10)
        text = Path(path).read_text(encoding='utf-8')
        assert 'death' in text
        assert 'Intercept' in text and 'std_error' in text
        # fully observed columns are left out of the missingness table
        missing_block = text.split('## Missing data')[1].split('## Figures')[0]
        assert 'positive' not in missing_block.split('```')[1]

    def test_conclusion_uses_spread(self, tmp_path, report_inputs, slope_sig):
        figures, missingness, coefs = report_inputs
        spread = {'lower_sd': 0.01, 'upper_sd': 0.2, 'ratio': 20.0, 'fans_out': True}
        path = render_report(str(tmp_path / 'report.md'), figures, missingness, coefs,
                             slope_sig, n_rows=10, spread=spread)
        conclusion = Path(path).read_text(encoding='utf-8').split('## Conclusion')[1]
        assert 'fan out' in conclusion
        assert '0.01' in conclusion and '0.2' in conclusion
