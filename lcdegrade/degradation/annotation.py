"""Annotation pass, turning a latent signal into observations.

For each series, layers on:
    - additive gaussian measurement noise: y = y_latent + noise
    - a half-normal standard error per point: y_se
    - a visibility flag from the observing cadence
    - a non-detection flag from the standard error threshold

Every function works on a copy; the random draws come from the
np.random.Generator passed in, which should belong to that series
only.
"""

import numbers
import warnings

import numpy as np
import pandas as pd
from scipy.stats import norm, halfnorm

from .. import LCF_COLUMNS

# Tolerance on 1/cadence being an integer number of epochs
cadence_tol = 1e-9

annotation_defaults = {'noise_sd':1.0, 'se_scale':1.0, 'cadence':1.0,
                       'threshold':2.0}
annotation_keys = tuple(annotation_defaults.keys())


# Full annotation
# ---------------

def annotate_series(lcf, noise_sd=None, se_scale=None, cadence=None,
                    threshold=None, rng=None, seed=None, quiet=False):
    """Applies noise, standard errors, visibility and detectability.

    Draw order is fixed: first the noise, then the standard errors,
    so a given generator always gives the same annotation.

    Args:
        lcf (pd.DataFrame): with columns 't' and 'y_latent'
        noise_sd (float): standard deviation of the additive noise
        se_scale (float): scale of the half-normal standard errors
        cadence (float): fraction of epochs observed, 1/cadence must
            be an integer; e.g 0.25 observes every 4th epoch
        threshold (float): standard errors above this are
            non-detections
        rng (np.random.Generator): if None, created from seed
        seed (int): only used if rng is None
        quiet (bool): if False, warns when no points are visible
            or detected

    Any of noise_sd, se_scale, cadence or threshold that are None
    take their value from annotation_defaults.

    Returns:
        lcf (pd.DataFrame): copy, with the added columns
            ['noise', 'y_se', 'y', 'visible', 'non_detection']
    """

    noise_sd = annotation_defaults['noise_sd'] if noise_sd is None \
               else noise_sd
    se_scale = annotation_defaults['se_scale'] if se_scale is None \
               else se_scale
    cadence = annotation_defaults['cadence'] if cadence is None \
              else cadence
    threshold = annotation_defaults['threshold'] if threshold is None \
                else threshold

    if rng is None:
        rng = np.random.default_rng(seed)

    lcf = add_noise(lcf, noise_sd=noise_sd, rng=rng)
    lcf = draw_standard_errors(lcf, se_scale=se_scale, rng=rng)
    lcf['visible'] = flag_visibility(lcf['t'], cadence).values
    lcf['non_detection'] = flag_non_detections(lcf['y_se'], threshold).values

    columns = [col for col in LCF_COLUMNS if col in lcf.columns]
    lcf = lcf[columns + [col for col in lcf.columns if col not in columns]]

    if not quiet:
        label = lcf['series'].iloc[0] if 'series' in lcf and len(lcf) \
                else None
        if not lcf['visible'].any():
            warnings.warn("No visible points in series {} "
                          "(cadence = {}).".format(label, cadence))
        elif not (lcf['visible'] & ~lcf['non_detection']).any():
            warnings.warn("No detected points in series {} "
                          "(threshold = {}).".format(label, threshold))

    return lcf


# Stage work-functions
# --------------------

def add_noise(lcf, noise_sd, rng):
    """Adds N(0, noise_sd) noise to y_latent, giving y.

    noise_sd = 0 gives an exact copy of the latent signal.
    """

    if not noise_sd >= 0 or not np.isfinite(noise_sd):
        raise ValueError("noise_sd must be finite and non-negative, "
                         "got: {}".format(noise_sd))

    lcf = lcf.copy()

    if noise_sd == 0:
        noise = np.zeros(len(lcf), dtype=float)
    else:
        noise = norm.rvs(loc=0.0, scale=noise_sd, size=len(lcf),
                         random_state=rng)

    lcf['noise'] = noise
    lcf['y'] = lcf['y_latent'].values + noise

    return lcf

def draw_standard_errors(lcf, se_scale, rng):
    """Draws y_se = |N(0, se_scale)| for each point."""

    if not se_scale > 0 or not np.isfinite(se_scale):
        raise ValueError("se_scale must be finite and positive, "
                         "got: {}".format(se_scale))

    lcf = lcf.copy()
    lcf['y_se'] = halfnorm.rvs(loc=0.0, scale=se_scale, size=len(lcf),
                               random_state=rng)

    return lcf

def flag_visibility(t, cadence):
    """True where t is an exact multiple of 1/cadence.

    Args:
        t (pd.Series or array-like): integer epochs
        cadence (float): in (0, 1]; 1 means every epoch is visible

    Returns:
        visible (pd.Series of bool)

    Raises:
        CadenceError: cadence out of range, or 1/cadence isn't an
            integer number of epochs
    """

    step = cadence_step(cadence)

    t = _as_series(t)
    return (t % step) == 0

def flag_non_detections(y_se, threshold):
    """True where the standard error is strictly above threshold."""

    if not threshold >= 0:
        raise ValueError("threshold must be non-negative, "
                         "got: {}".format(threshold))

    return _as_series(y_se) > threshold

def cadence_step(cadence):
    """Number of epochs between visible epochs, i.e 1/cadence."""

    if isinstance(cadence, bool) \
        or not isinstance(cadence, numbers.Real) or not 0 < cadence <= 1:
        raise CadenceError("cadence must be in (0, 1], "
                           "got: {!r}".format(cadence))

    step = 1.0 / cadence
    if abs(step - round(step)) > cadence_tol * step:
        raise CadenceError("1/cadence must be a whole number of epochs, "
                           "got cadence = {} (1/cadence = "
                           "{}).".format(cadence, step))

    return int(round(step))


# Hidden Utilities
# ----------------

def _as_series(x):
    if isinstance(x, pd.Series):
        return x
    return pd.Series(np.asarray(x))


# Exception definitions
# ---------------------

class CadenceError(ValueError):
    """The observing cadence can't be turned into an epoch step."""
    pass
