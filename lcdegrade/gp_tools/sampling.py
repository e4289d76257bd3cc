"""Seeded Gaussian process draws of the latent lightcurve signal.

CONVENTION:
    - randomness only comes from an explicit np.random.Generator,
        either passed in directly or created from a seed; there is
        no global random state.
    - the wide array of draws has shape (n_series, n_epochs), the
        long table has one row per (time, series) pair, ordered by
        time and then by series.
"""

import numpy as np
import pandas as pd
from scipy import linalg

from .kernels import (build_covariance, NonPositiveDefiniteError,
                      _check_n_epochs)

# Relative tolerance on eigenvalues, w.r.t the largest eigenvalue
psd_rtol = 1e-8
# Absolute tolerance on the asymmetry, w.r.t the largest entry
sym_rtol = 1e-10


# Covariance validation
# ---------------------

def check_covariance(K, rtol=psd_rtol):
    """Checks K is symmetric positive semi-definite within tolerance.

    Eigenvalues in [-rtol*w_max, 0) are considered numerical noise of
    a PSD matrix. Anything more negative means the hyperparameters
    produced an invalid covariance.

    Args:
        K (np.ndarray): square covariance matrix
        rtol (float): relative eigenvalue tolerance

    Returns:
        w, V: eigenvalues (ascending) and eigenvectors of K

    Raises:
        NonPositiveDefiniteError
    """

    K = np.asarray(K, dtype=float)

    if K.ndim != 2 or K.shape[0] != K.shape[1]:
        raise NonPositiveDefiniteError(
            "Covariance must be a square matrix, got shape "
            "{}.".format(K.shape))

    if not np.all(np.isfinite(K)):
        raise NonPositiveDefiniteError(
            "Covariance contains non-finite values; invalid kernel "
            "parameters.")

    scale = max(np.max(np.abs(K)), np.finfo(float).tiny)
    if np.max(np.abs(K - K.T)) > sym_rtol * scale:
        raise NonPositiveDefiniteError(
            "Covariance is not symmetric (max asymmetry: {:.3g}); "
            "invalid kernel parameters.".format(np.max(np.abs(K - K.T))))

    w, V = linalg.eigh(K)

    w_max = max(w[-1], 0.0)
    if w[0] < -rtol * w_max or (w_max == 0.0 and w[0] < 0.0):
        raise NonPositiveDefiniteError(
            "Covariance is not positive semi-definite: minimum "
            "eigenvalue {:.6g} (largest {:.6g}, tolerance {:.3g}); "
            "invalid kernel parameters.".format(w[0], w_max, rtol*w_max),
            min_eigenvalue=w[0])

    return w, V

def sampling_factor(K, rtol=psd_rtol):
    """Returns L such that L @ L.T reproduces K.

    Built from the eigendecomposition rather than a Cholesky
    decomposition, as rank-deficient matrices are expected (the
    aperiodic kernel gives a rank-1 constant matrix, and a grid
    covering whole periods repeats its rows).

    Eigenvalues below rtol*w_max are truncated to zero.
    """

    w, V = check_covariance(K, rtol=rtol)

    w = w.copy()
    w[w < rtol * max(w[-1], 0.0)] = 0.0

    return V * np.sqrt(w)


# Sampling
# --------

def draw_paths(K, n_series=1, rng=None, seed=None):
    """Draws independent zero-mean paths with covariance K.

    Args:
        K (np.ndarray): N x N covariance matrix
        n_series (int): S, number of independent paths
        rng (np.random.Generator): if None, created from seed
        seed (int): only used if rng is None

    Returns:
        paths (np.ndarray): shape (S, N)
    """

    n_series = _check_n_series(n_series)
    if rng is None:
        rng = np.random.default_rng(seed)

    L = sampling_factor(K)
    z = rng.standard_normal((n_series, L.shape[1]))

    paths = z @ L.T

    if not np.all(np.isfinite(paths)):
        raise NonPositiveDefiniteError(
            "Sampling produced non-finite values; invalid kernel "
            "parameters.")

    return paths

def generate_series(kernel, n_epochs, n_series=1, seed=None, rng=None,
                    label=None, verbose=False):
    """Draws the latent signal and reshapes it into a long table.

    Same kernel, n_epochs, n_series and seed always give the same
    table, bit for bit.

    Args:
        kernel (callable): k(tau), e.g a PeriodicKernel
        n_epochs (int): N, the time grid is 1..N
        n_series (int): S, number of independent draws
        seed (int): seeds a new generator if rng is None
        rng (np.random.Generator): takes priority over seed
        label (str): series label; with several series, used as the
            prefix of '{label}_{j}', j = 1..S. Without a label, the
            series are 'series_1', 'series_2'...
        verbose (bool): print information on the covariance

    Returns:
        lcf (pd.DataFrame): columns ['t', 'series', 'y_latent']

    Raises:
        InvalidKernelParametersError, NonPositiveDefiniteError,
        ValueError: for invalid n_epochs or n_series
    """

    n_epochs = _check_n_epochs(n_epochs)
    n_series = _check_n_series(n_series)

    K = build_covariance(kernel, n_epochs)

    if verbose:
        w = linalg.eigvalsh(K)
        print("Covariance: N = {}, max = {:.4g}, effective rank = "
              "{}".format(n_epochs, K.max(),
                          np.sum(w > psd_rtol * w[-1])))

    paths = draw_paths(K, n_series=n_series, rng=rng, seed=seed)

    return to_long_table(paths, series_labels(n_series, label))

def series_labels(n_series, label=None):
    """Labels for S series drawn in one call."""

    if n_series == 1 and label is not None:
        return [label]

    prefix = 'series' if label is None else label
    return ["{}_{}".format(prefix, j) for j in range(1, n_series + 1)]

def to_long_table(paths, labels):
    """Pivots the (S, N) array of paths into one row per (t, series).

    Epochs are 1..N. Rows are ordered by time, then by series.
    """

    paths = np.atleast_2d(paths)
    n_series, n_epochs = paths.shape

    if len(labels) != n_series:
        raise ValueError("Got {} labels for {} series.".format(len(labels),
                                                               n_series))

    t_col = np.empty(n_epochs * n_series, dtype=int)
    series_col = np.empty(n_epochs * n_series, dtype=object)
    y_col = np.empty(n_epochs * n_series, dtype=float)

    row = 0
    for i in range(n_epochs):
        for j in range(n_series):
            t_col[row] = i + 1
            series_col[row] = labels[j]
            y_col[row] = paths[j, i]
            row += 1

    return pd.DataFrame({'t':t_col, 'series':series_col, 'y_latent':y_col})


# Hidden Utilities
# ----------------

def _check_n_series(n_series):
    if isinstance(n_series, bool) or not isinstance(n_series,
                                                    (int, np.integer)):
        raise ValueError("n_series must be an integer, got: "
                         "{!r}".format(n_series))
    if n_series < 1:
        raise ValueError("n_series must be at least 1, got: "
                         "{}".format(n_series))
    return int(n_series)
