"""Shared pytest fixtures for the lcdegrade test suite."""
import matplotlib
matplotlib.use('Agg')

import numpy as np
import pytest

from lcdegrade import PeriodicKernel, generate_series, synthesise_lightcurves


@pytest.fixture
def periodic_kernel():
    """Four full cycles over 140 epochs."""
    return PeriodicKernel(amplitude=10.0, lengthscale=1.0, period=35.0)


@pytest.fixture
def aperiodic_kernel():
    return PeriodicKernel(amplitude=10.0, lengthscale=1.0, period=np.inf)


@pytest.fixture
def latent_lcf(periodic_kernel):
    return generate_series(periodic_kernel, 140, n_series=1, seed=1,
                           label='periodic')


@pytest.fixture(scope='module')
def combined_lcf():
    """The three presets, shortened to keep the suite fast."""
    return synthesise_lightcurves(n_epochs=60, quiet=True)
