"""The full degradation sequence, from latent signal to figures.

Runs the whole sequence, in order:
    1. draw the three illustrative series (SERIES_PRESETS)
    2. annotate them: noise, standard errors, visibility, detection
    3. plot the kernel and every degradation stage of each series

Usage:
    python -m lcdegrade.notebook [output_dir]
"""

import os
import sys

import matplotlib.pyplot as plt

from . import OUTPUT_DIR
from . import analysis, util_lib
from .degradation import synthesise_lightcurves, SERIES_PRESETS
from .gp_tools import PeriodicKernel


def run_notebook(presets=None, output_dir=None, show=False, verbose=True,
                 quiet=False, **overrides):
    """Synthesises the lightcurves and renders the figure sequence.

    Args:
        presets (dict): label -> parameters, default SERIES_PRESETS
        output_dir (str): if given, figures are saved there as png
        show (bool): whether to plt.show each figure
        verbose (bool): print progress and the summary table
        quiet (bool): suppress the annotation warnings
        **overrides: passed to synthesise_lightcurves

    Returns:
        lcf (pd.DataFrame): the combined, annotated table
    """

    presets = SERIES_PRESETS if presets is None else presets

    if output_dir is not None:
        os.makedirs(output_dir, exist_ok=True)

    if verbose:
        print("Synthesising {} series: {}".format(len(presets),
                                                  list(presets.keys())))

    lcf = synthesise_lightcurves(presets, quiet=quiet, **overrides)

    if verbose:
        print("\nSummary\n", '-'*7, '\n', util_lib.summarise_lightcurves(lcf))

    for label, params in presets.items():
        params = dict(params, **overrides)
        kernel = PeriodicKernel(params['amplitude'], params['lengthscale'],
                                params['period'])

        fig, _ = analysis.plot_kernel(
                        kernel, params['n_epochs'],
                        title="{}: {}".format(label, kernel),
                        show=show,
                        save_path=_figure_path(output_dir, label, 'kernel'))
        plt.close(fig)

        fig, _ = analysis.plot_degradation(
                        lcf, series=label,
                        title="{} (cadence = {}, threshold = {})".format(
                            label, params.get('cadence'),
                            params.get('threshold')),
                        show=show,
                        save_path=_figure_path(output_dir, label,
                                               'degradation'))
        plt.close(fig)

        if verbose:
            print("[OK  ] {}".format(label))

    fig, _ = analysis.plot_series_grid(
                    lcf, stage='detected', show=show,
                    save_path=_figure_path(output_dir, 'all', 'detected'))
    plt.close(fig)

    if verbose and output_dir is not None:
        print("Figures saved in {}".format(output_dir))

    return lcf

def _figure_path(output_dir, label, name):
    if output_dir is None:
        return None
    return os.path.join(output_dir, "{}_{}.png".format(label, name))


if __name__ == '__main__':
    output_dir = sys.argv[1] if len(sys.argv) > 1 else OUTPUT_DIR
    run_notebook(output_dir=output_dir, show=False, verbose=True)
