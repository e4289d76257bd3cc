"""Plotting of the lightcurves at each degradation stage.

None of these functions modify the table they are given; selection
of rows is done through degradation.select_stage and util_lib.
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.gridspec as gridspec

from .util_lib import iter_series, select_non_detections
from .degradation import select_stage, stage_column, STAGES
from .gp_tools import lag_matrix

stage_titles = {'latent':'Latent signal',
                'discrete':'Discrete epochs',
                'noisy':'Measurement noise',
                'visible':'Visibility gaps',
                'detected':'Non-detections'}


# ---------------------------------
#
# Degradation sequence
#
# ---------------------------------

def plot_degradation(lcf, series=None, stages=STAGES, title=None,
                     show=True, save_path=None):
    """Plots one panel per stage, on a shared time axis.

    Arguments:
        lcf (pd.DataFrame): annotated table, may contain several series
        series (str or list of str): series to plot, default all
        stages (tuple of str): stages to plot, in order
        title (str): Figure title
        show (bool): whether to plt.show afterwards
        save_path (str): if given, the figure is saved there

    Returns:
        fig, axes
    """

    lcf = _select_series(lcf, series)
    nstages = len(stages)

    fig = plt.figure(figsize=(8, 1.8*nstages + 0.6))
    gs = gridspec.GridSpec(nstages, 1, hspace=0.0)

    axes = np.empty(nstages, dtype=object)
    for i, stage in enumerate(stages):
        sharex = axes[0] if i > 0 else None
        axes[i] = fig.add_subplot(gs[i], sharex=sharex)
        plot_stage(lcf, stage, ax=axes[i], show=False, legend=(i == 0))

    # Standard structural aesthetics
    # ------------------------------

    # Limits from the full grid, so gaps show as gaps
    axes[0].set_xlim(lcf['t'].min() - 1, lcf['t'].max() + 1)
    ylim = _common_ylim(lcf)
    for i, ax in enumerate(axes):
        ax.set_ylim(*ylim)
        if i + 1 < nstages:
            ax.xaxis.set_visible(False)
        ax.spines['top'].set_visible(i == 0)
        ax.text(0.01, 0.95, stage_titles[stages[i]], transform=ax.transAxes,
                va='top', ha='left',
                bbox=dict(facecolor='white', alpha=0.8))
    axes[-1].set_xlabel('epoch')

    if title is not None:
        fig.suptitle(title)

    if save_path is not None:
        fig.savefig(save_path, bbox_inches='tight')

    if show:
        plt.show()

    return fig, axes

def plot_stage(lcf, stage, ax=None, show=True, legend=True, **plot_kwargs):
    """Plots every series of the table as it appears at one stage.

    The latent stage is a line, later stages are points; stages with
    measurement noise get error bars, and in the detected stage the
    non-detections are marked as upper limits at y + y_se.

    Args:
        lcf (pd.DataFrame)
        stage (str): one of STAGES
        ax (matplotlib.Axes): axis on which to plot
        show (bool): whether to plt.show() the plot or not
        legend (bool)
        **plot_kwargs: passed to the plot of the points,
            expect: alpha, marker, markersize etc...

    Returns:
        fig, ax
    """

    lcf_stage = select_stage(lcf, stage)
    col = stage_column(stage)

    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    if 'alpha' not in plot_kwargs: plot_kwargs['alpha'] = 0.8
    if 'marker' not in plot_kwargs: plot_kwargs['marker'] = '.'

    labels = list(dict.fromkeys(lcf['series']))
    cl = series_colours(len(labels))

    for label, group in iter_series(lcf_stage):
        colour = cl[labels.index(label)]

        if stage == 'latent':
            ax.plot(group['t'], group[col], '-', color=colour, label=label)
        elif stage == 'discrete':
            ax.plot(group['t'], group[col], color=colour, linestyle='none',
                    label=label, **plot_kwargs)
        else:
            ax.errorbar(group['t'], group[col], yerr=group['y_se'],
                        color=colour, linestyle='none', elinewidth=0.8,
                        label=label, **plot_kwargs)

    if stage == 'detected':
        for label, group in iter_series(select_non_detections(lcf)):
            colour = cl[labels.index(label)]
            ax.plot(group['t'], group['y'] + group['y_se'], color=colour,
                    marker='v', linestyle='none', alpha=0.5)

    ax.axhline(0.0, color='0.7', linestyle='--', zorder=-10)

    if legend and len(labels) > 1:
        ax.legend(loc='upper right', fontsize='small')

    if show:
        plt.show()

    return fig, ax

def plot_series_grid(lcf, stage='detected', show=True, save_path=None):
    """One panel per series at a single stage."""

    labels = list(dict.fromkeys(lcf['series']))

    fig, axes = plt.subplots(len(labels), 1, sharex=True, squeeze=False,
                             figsize=(8, 2.2*len(labels)))
    axes = axes[:, 0]

    for ax, label in zip(axes, labels):
        plot_stage(lcf[lcf['series'] == label], stage, ax=ax, show=False,
                   legend=False)
        ax.set_ylabel(label)
    axes[-1].set_xlabel('epoch')
    fig.suptitle(stage_titles[stage])

    if save_path is not None:
        fig.savefig(save_path, bbox_inches='tight')

    if show:
        plt.show()

    return fig, axes


# ---------------------------------
#
# Kernel
#
# ---------------------------------

def plot_kernel(kernel, n_epochs, title=None, show=True, save_path=None):
    """Covariance matrix image next to k(tau).

    Args:
        kernel (PeriodicKernel or callable)
        n_epochs (int)

    Returns:
        fig, (ax_matrix, ax_tau)
    """

    K = kernel(lag_matrix(n_epochs))
    tau = np.arange(n_epochs)

    fig, (ax_matrix, ax_tau) = plt.subplots(1, 2, figsize=(9, 4))

    im = ax_matrix.imshow(K, origin='lower', cmap='inferno',
                          extent=(0.5, n_epochs + 0.5, 0.5, n_epochs + 0.5))
    fig.colorbar(im, ax=ax_matrix, fraction=0.046, pad=0.04)
    ax_matrix.set_xlabel('epoch')
    ax_matrix.set_ylabel('epoch')

    ax_tau.plot(tau, kernel(tau), 'k-')
    ax_tau.set_xlim(0, n_epochs - 1)
    ax_tau.set_ylim(0, None)
    ax_tau.set_xlabel(r'lag $\tau$')
    ax_tau.set_ylabel(r'$k(\tau)$')

    if title is None and hasattr(kernel, 'get_parameter_dict'):
        title = ", ".join("{} = {:.3g}".format(k, v)
                          for k, v in kernel.get_parameter_dict().items())
    if title is not None:
        fig.suptitle(title)

    if save_path is not None:
        fig.savefig(save_path, bbox_inches='tight')

    if show:
        plt.show()

    return fig, (ax_matrix, ax_tau)


# Work functions
# --------------

def series_colours(n):
    """n colours from the inferno colourmap, avoiding the dark end."""

    cmap = plt.get_cmap('inferno')
    return cmap(np.linspace(0.15, 0.75, max(n, 1)))

def _select_series(lcf, series):
    if series is None:
        return lcf
    if isinstance(series, str):
        series = [series]

    missing = [s for s in series if s not in set(lcf['series'])]
    if missing:
        raise ValueError("Series not found in lightcurve: {}".format(missing))

    return lcf[lcf['series'].isin(series)]

def _common_ylim(lcf):
    """y limits covering the latent values and the error bars."""

    lo = [lcf['y_latent'].min()]
    hi = [lcf['y_latent'].max()]
    if 'y' in lcf and 'y_se' in lcf:
        lo.append((lcf['y'] - lcf['y_se']).min())
        hi.append((lcf['y'] + lcf['y_se']).max())

    lo, hi = min(lo), max(hi)
    pad = 0.05 * (hi - lo) if hi > lo else 1.0

    return lo - pad, hi + pad
