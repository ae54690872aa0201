import matplotlib.pyplot as plt
import seaborn as sns
from tqdm import tqdm

from helpers import _figure_path
from transforms import CUTOFF_DATE, restrict_to_cutoff, mean_new_cases_by_state


def _finish(fig, ax, fig_path, dpi, legend_title=None):
    ax.grid(which='major', linestyle='--', alpha=0.2)
    if legend_title is not None and ax.get_legend() is not None:
        sns.move_legend(
            ax, 'upper left',
            bbox_to_anchor=(1.01, 1.0),
            title=legend_title,
            ncol=2,
            fontsize=7,
            frameon=True,
            edgecolor='k',
        )
    sns.despine(fig=fig)
    fig.tight_layout()
    fig.savefig(fig_path, dpi=dpi)
    plt.close(fig)
    return fig_path


def plot_positive_distribution(df, fig_path, dpi=150):
    """Box plot of the cumulative positive count."""
    fig, ax = plt.subplots(figsize=(5, 6))
    sns.boxplot(data=df, y='positive', ax=ax, color='#345995')
    ax.set_ylabel('Cumulative positive tests')
    ax.set_title('a.', loc='left', fontweight='bold', fontsize=15)
    return _finish(fig, ax, fig_path, dpi)


def plot_positive_over_time(df, fig_path, dpi=150):
    """Scatter of positive count against report date, all rows."""
    fig, ax = plt.subplots(figsize=(10, 5))
    sns.scatterplot(data=df, x='date', y='positive', ax=ax, s=10, color='#B80C09', alpha=0.6,
                    edgecolor=None)
    ax.set_xlabel('Date')
    ax.set_ylabel('Cumulative positive tests')
    ax.set_title('b.', loc='left', fontweight='bold', fontsize=15)
    fig.autofmt_xdate()
    return _finish(fig, ax, fig_path, dpi)


def plot_positive_since_cutoff(df, fig_path, cutoff=CUTOFF_DATE, dpi=150):
    """Scatter of positive count against date from `cutoff` on, coloured by state."""
    sub = restrict_to_cutoff(df, cutoff)
    fig, ax = plt.subplots(figsize=(11, 6))
    sns.scatterplot(data=sub, x='date', y='positive', hue='state', ax=ax, s=12, edgecolor=None)
    ax.set_xlabel('Date')
    ax.set_ylabel('Cumulative positive tests')
    ax.set_title('c.', loc='left', fontweight='bold', fontsize=15)
    fig.autofmt_xdate()
    return _finish(fig, ax, fig_path, dpi, legend_title='State')


def plot_new_cases_vs_population(df, fig_path, cutoff=CUTOFF_DATE, dpi=150):
    """Per-state mean daily new cases (from `cutoff` on) against population."""
    by_state = mean_new_cases_by_state(restrict_to_cutoff(df, cutoff))
    fig, ax = plt.subplots(figsize=(11, 6))
    sns.scatterplot(data=by_state, x='Population', y='mean_new_cases', hue='state', ax=ax, s=40,
                    edgecolor='k')
    ax.set_xlabel('Population')
    ax.set_ylabel('Mean daily new positive cases')
    ax.set_title('d.', loc='left', fontweight='bold', fontsize=15)
    return _finish(fig, ax, fig_path, dpi, legend_title='State')


def plot_infection_trend(df, fig_path, dpi=150):
    """Line plot of infection_percent against date, one line per state."""
    fig, ax = plt.subplots(figsize=(11, 6))
    sns.lineplot(data=df, x='date', y='infection_percent', hue='state', ax=ax, linewidth=1.2)
    ax.set_xlabel('Date')
    ax.set_ylabel('Population infected (%)')
    ax.set_title('e.', loc='left', fontweight='bold', fontsize=15)
    fig.autofmt_xdate()
    return _finish(fig, ax, fig_path, dpi, legend_title='State')


def plot_residuals(diagnostics, fig_path, dpi=150):
    """Residuals against fitted values of the linear trend, with the zero line."""
    fig, ax = plt.subplots(figsize=(8, 5))
    sns.scatterplot(data=diagnostics, x='fitted', y='residual', ax=ax, s=12, color='#2E6F40',
                    alpha=0.6, edgecolor=None)
    ax.axhline(0.0, color='k', linestyle='--', linewidth=1)
    ax.set_xlabel('Fitted infection percent')
    ax.set_ylabel('Residual')
    ax.set_title('f.', loc='left', fontweight='bold', fontsize=15)
    return _finish(fig, ax, fig_path, dpi)


def render_figures(cleaned, derived, figures_dir, cutoff=CUTOFF_DATE, fmt='pdf', dpi=150):
    """
    Render the five exploratory figures. Returns {name: path}.
    """
    jobs = [
        ('positive_boxplot', lambda p: plot_positive_distribution(cleaned, p, dpi=dpi)),
        ('positive_vs_date', lambda p: plot_positive_over_time(cleaned, p, dpi=dpi)),
        ('positive_vs_date_since_cutoff',
         lambda p: plot_positive_since_cutoff(cleaned, p, cutoff=cutoff, dpi=dpi)),
        ('new_cases_vs_population',
         lambda p: plot_new_cases_vs_population(cleaned, p, cutoff=cutoff, dpi=dpi)),
        ('infection_percent_trend', lambda p: plot_infection_trend(derived, p, dpi=dpi)),
    ]
    paths = {}
    for name, job in tqdm(jobs, desc='figures', unit='fig'):
        paths[name] = job(_figure_path(figures_dir, name, fmt))
    return paths
