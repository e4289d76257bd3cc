"""
Package for generating **synthetic lightcurves** and showing how
they degrade into realistic observations.

Contains:
- gp_tools: periodic covariance kernel and the seeded Gaussian
	process draw of the latent signal, reshaped into a long table.
- degradation: the annotation pass (noise, standard errors,
	visibility, non-detections) and the series presets.
- analysis: plotting of each degradation stage.
- notebook: the full linear sequence, from latent signal to the
	stage-by-stage figures.

Tables are pandas DataFrames in long format, one row per
(time, series) pair, with columns:
	t, series, y_latent, noise, y_se, y, visible, non_detection
"""

import os

# FILE STRUCTURE
HOME_DIR = os.path.expanduser('~')
OUTPUT_DIR = os.environ.get('LCDEGRADE_OUTPUT',
                            "{}/lcdegrade_figures".format(HOME_DIR))

# Column order of an annotated lightcurve table
LCF_COLUMNS = ('t', 'series', 'y_latent', 'noise', 'y_se', 'y',
               'visible', 'non_detection')

from .gp_tools import (PeriodicKernel, periodic_kernel, lag_matrix,
                       build_covariance, check_covariance, draw_paths,
                       generate_series, InvalidKernelParametersError,
                       NonPositiveDefiniteError)
from .degradation import (annotate_series, synthesise_lightcurve,
                          synthesise_lightcurves, select_stage,
                          SERIES_PRESETS, STAGES, CadenceError)
