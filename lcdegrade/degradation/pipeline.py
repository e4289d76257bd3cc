"""Synthesis of the illustrative lightcurves, stage by stage.

Each series is one call of the generator (its own kernel and seed),
followed by its own annotation pass. The seed of a series is split
into two independent streams, one for the latent draw and one for
the annotation, so changing e.g the noise level never changes the
latent signal.

The degradation stages, in order:
    latent      the continuous latent signal
    discrete    the same signal, sampled on the epochs only
    noisy       with measurement noise (and standard errors)
    visible     only the epochs where the source is observable
    detected    visible epochs above the detection limit
"""

from collections import OrderedDict

import numpy as np
import pandas as pd

from .annotation import annotate_series, annotation_defaults, annotation_keys
from ..gp_tools import PeriodicKernel, generate_series
from .. import util_lib

STAGES = ('latent', 'discrete', 'noisy', 'visible', 'detected')

# Column holding the plotted value at each stage
stage_columns = {'latent':'y_latent', 'discrete':'y_latent', 'noisy':'y',
                 'visible':'y', 'detected':'y'}

# The three illustrative series
SERIES_PRESETS = OrderedDict([
    ('periodic', {'n_epochs':140, 'seed':2, 'amplitude':10.0,
                  'lengthscale':1.0, 'period':35.0, 'noise_sd':2.0,
                  'se_scale':1.0, 'cadence':0.5, 'threshold':2.0}),
    ('long_period', {'n_epochs':140, 'seed':3, 'amplitude':5.0,
                     'lengthscale':1.0, 'period':70.0, 'noise_sd':1.0,
                     'se_scale':1.5, 'cadence':0.25, 'threshold':2.0}),
    ('aperiodic', {'n_epochs':140, 'seed':1, 'amplitude':10.0,
                   'lengthscale':1.0, 'period':np.inf, 'noise_sd':3.0,
                   'se_scale':1.0, 'cadence':0.25, 'threshold':2.0}),
])


# Synthesis
# ---------

def synthesise_lightcurve(label, seed, n_epochs, amplitude, lengthscale,
                          period=np.inf, quiet=False, **annotation_kwargs):
    """Generates and annotates a single series.

    Args:
        label (str): series label
        seed (int): split into the latent and annotation streams
        n_epochs (int): N
        amplitude, lengthscale, period (floats): kernel
            hyperparameters, period may be np.inf
        quiet (bool): passed to annotate_series
        **annotation_kwargs: noise_sd, se_scale, cadence, threshold;
            missing ones are taken from annotation_defaults

    Returns:
        lcf (pd.DataFrame): fully annotated, one row per epoch
    """

    unknown = [key for key in annotation_kwargs if key not in annotation_keys]
    if unknown:
        raise TypeError("Unexpected keyword arguments: {}".format(unknown))

    kernel = PeriodicKernel(amplitude, lengthscale, period)
    rng_latent, rng_obs = series_generators(seed)

    lcf = generate_series(kernel, n_epochs, n_series=1, rng=rng_latent,
                          label=label)

    ann_kwargs = dict(annotation_defaults)
    ann_kwargs.update(annotation_kwargs)

    return annotate_series(lcf, rng=rng_obs, quiet=quiet, **ann_kwargs)

def synthesise_lightcurves(presets=None, quiet=False, **overrides):
    """Runs every preset and combines them into one table.

    Args:
        presets (dict): label -> parameter dict, as SERIES_PRESETS,
            which is the default
        quiet (bool)
        **overrides: values replacing those of every preset,
            e.g n_epochs=60 or threshold=1.5

    Returns:
        lcf (pd.DataFrame): all series, in preset order, index reset
    """

    presets = SERIES_PRESETS if presets is None else presets

    if len(presets) == 0:
        raise ValueError("No series presets were given.")

    lcf_list = []
    for label, params in presets.items():
        params = dict(params)
        params.update(overrides)
        lcf_list.append(synthesise_lightcurve(label, quiet=quiet, **params))

    lcf = pd.concat(lcf_list, ignore_index=True)
    lcf.index = range(len(lcf))

    return lcf

def series_generators(seed):
    """Two independent generators (latent, annotation) from one seed."""

    ss_latent, ss_obs = np.random.SeedSequence(seed).spawn(2)
    return np.random.default_rng(ss_latent), np.random.default_rng(ss_obs)


# Stages
# ------

def select_stage(lcf, stage):
    """Rows of the table shown at a degradation stage.

    Args:
        lcf (pd.DataFrame): annotated table
        stage (str): one of STAGES

    Returns:
        lcf (pd.DataFrame): copy of the selected rows
    """

    if stage not in STAGES:
        raise ValueError("Unknown stage: {!r}, expected one of "
                         "{}".format(stage, STAGES))

    if stage in ('latent', 'discrete'):
        util_lib.check_lightcurve(lcf, columns=('t', 'series', 'y_latent'))
        return lcf.copy()

    util_lib.check_lightcurve(lcf)

    if stage == 'noisy':
        return lcf.copy()
    elif stage == 'visible':
        return util_lib.select_visible(lcf)
    else:
        return util_lib.select_detected(lcf)

def stage_column(stage):
    if stage not in STAGES:
        raise ValueError("Unknown stage: {!r}".format(stage))
    return stage_columns[stage]
