"""Library for utility functions used by various processes in lcdegrade.

Row selection, table checks, autocorrelation and summaries...
"""

import numpy as np
import pandas as pd
from scipy import signal
from astropy.stats import mad_std

from . import LCF_COLUMNS


# Standardised lightcurve checks
# ------------------------------

def check_lightcurve(lcf, columns=LCF_COLUMNS):
    """Checks a table before it's selected from or plotted.

    1. Check the columns
    2. Check length
    3. Check ordering in time within each series

    Args:
        lcf (pd.DataFrame)
        columns (tuple of str): required columns

    Returns:
        None

    Raises:
        MissingColumnsError, ZeroLengthError, UnorderedLightcurveError
    """

    missing = [col for col in columns if col not in lcf.columns]
    if missing:
        raise MissingColumnsError("Lightcurve is missing the columns: "
                                  "{}".format(missing))

    if len(lcf) == 0:
        raise ZeroLengthError("Lightcurve has no points.")

    if 'series' in lcf.columns:
        for label, group in lcf.groupby('series', sort=False):
            if not (np.diff(group['t'].values) > 0).all():
                raise UnorderedLightcurveError(
                    "Series {} is unordered or has duplicated "
                    "epochs.".format(label))
    elif not (np.diff(lcf['t'].values) > 0).all():
        raise UnorderedLightcurveError("Lightcurve was unordered.")


# Row selection
# -------------

def select_visible(lcf):
    """Rows where the source was observable."""

    return lcf[lcf['visible'].astype(bool)].copy()

def select_detected(lcf):
    """Visible rows that are not non-detections."""

    mask = lcf['visible'].astype(bool) & ~lcf['non_detection'].astype(bool)
    return lcf[mask].copy()

def select_non_detections(lcf):
    """Visible rows whose standard error is above the threshold."""

    mask = lcf['visible'].astype(bool) & lcf['non_detection'].astype(bool)
    return lcf[mask].copy()

def iter_series(lcf):
    """Yields (label, rows) for each series, in order of appearance."""

    for label in pd.unique(lcf['series']):
        yield label, lcf[lcf['series'] == label]


# Periodicity
# -----------

# Ranges below this fraction of the largest value are rounding noise
const_rtol = 1e-10
# Peaks this close to the highest one are taken as its harmonics
harmonic_tol = 0.1

def autocorrelation(y, max_lag=None):
    """Normalised autocorrelation function of a regular series.

    Args:
        y (array-like): values on a regular grid (no gaps)
        max_lag (int): largest lag returned, default len(y) - 1

    Returns:
        acf (np.ndarray): acf[k] for k = 0..max_lag, acf[0] = 1
    """

    if isinstance(y, pd.Series):
        y = y.values
    y = np.asarray(y, dtype=float)

    if len(y) < 2:
        raise ValueError("Need at least 2 points for an autocorrelation.")

    max_lag = len(y) - 1 if max_lag is None else min(max_lag, len(y) - 1)

    if np.ptp(y) <= const_rtol * np.max(np.abs(y)):
        # Constant series: fully correlated at every lag
        return np.ones(max_lag + 1, dtype=float)

    dy = y - np.mean(y)
    acf = np.correlate(dy, dy, mode='full')[len(dy)-1:len(dy)+max_lag]

    return acf / acf[0]

def estimate_period(y, min_height=0.5, max_lag=None):
    """Estimates the period from the peaks of the autocorrelation.

    Each acf[k] is rescaled by N/(N-k), the number of pairs it sums
    over, so that a series repeating after k epochs peaks at 1
    whatever k is. The period is the shortest lag among the peaks
    within harmonic_tol of the highest one.

    Args:
        y (array-like): regular series
        min_height (float): minimum rescaled acf value of a peak
        max_lag (int): default len(y)//2, beyond which the acf is
            estimated from too few pairs

    Returns:
        period (float): np.nan if no peak qualifies
    """

    n = len(y)
    max_lag = n//2 if max_lag is None else max_lag

    # One lag further, so a peak at max_lag has a right-hand neighbour
    acf = autocorrelation(y, max_lag=max_lag + 1)
    lags = np.arange(len(acf))
    acf = acf * n / (n - lags)

    peaks, properties = signal.find_peaks(acf, height=min_height)
    heights = properties['peak_heights']
    peaks, heights = peaks[peaks <= max_lag], heights[peaks <= max_lag]
    if len(peaks) == 0:
        return np.nan

    harmonics = peaks[heights >= heights.max() - harmonic_tol]

    return float(harmonics[0])


# Summaries
# ---------

def summarise_lightcurves(lcf):
    """Per-series summary of what survives each degradation stage.

    Returns:
        summary (pd.DataFrame): indexed by series, columns:
            n_points, n_visible, n_detected, n_non_detections,
            latent_std, noise_mad_std, median_se, period_acf
    """

    check_lightcurve(lcf)

    rows = []
    for label, group in iter_series(lcf):
        visible = group['visible'].astype(bool)
        non_det = group['non_detection'].astype(bool)
        rows.append({'series':label,
                     'n_points':len(group),
                     'n_visible':int(visible.sum()),
                     'n_detected':int((visible & ~non_det).sum()),
                     'n_non_detections':int((visible & non_det).sum()),
                     'latent_std':np.std(group['y_latent'].values),
                     'noise_mad_std':mad_std(group['noise'].values),
                     'median_se':np.median(group['y_se'].values),
                     'period_acf':(estimate_period(group['y_latent'])
                                   if len(group) >= 4 else np.nan)})

    return pd.DataFrame(rows).set_index('series')


# Exception definitions
# ---------------------

class LightcurveError(ValueError):
    """Holds all specific types of lightcurve error."""
    pass

class ZeroLengthError(LightcurveError):
    """When a lightcurve has zero valid points."""
    pass

class MissingColumnsError(LightcurveError):
    """When a lightcurve table doesn't have the expected columns."""
    pass

class UnorderedLightcurveError(LightcurveError):
    """Epochs of a series are not strictly increasing."""
    pass
