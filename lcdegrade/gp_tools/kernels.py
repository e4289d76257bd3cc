"""Periodic covariance kernel for the latent lightcurve signal.

The kernel is stationary, so the covariance between two epochs only
depends on their lag tau = |t_i - t_j|:

    k(tau) = amplitude**2 * exp(-(2/lengthscale**2) * sin(pi*tau/period)**2)

An infinite period is allowed; sin(pi*tau/inf) is zero for every
finite lag, so the covariance collapses to the constant amplitude**2,
which is how the aperiodic series is produced.

NOTE: the time grid is always the integer epochs 1..N, hence lags are
integers and the lag matrix only depends on N.
"""

import numbers
from collections import OrderedDict

import numpy as np


# Kernel function
# ---------------

def periodic_kernel(tau, amplitude, lengthscale, period):
    """Evaluates the periodic kernel at the lag(s) tau.

    Args:
        tau (float or np.ndarray): lag(s), the absolute value is used
        amplitude (float): sigma, the covariance at zero lag is sigma**2
        lengthscale (float): ell, smaller means sharper features
            within a period
        period (float): T, may be np.inf for the aperiodic limit

    Returns:
        k (float or np.ndarray): same shape as tau
    """

    validate_hyperparameters(amplitude, lengthscale, period)

    tau = np.abs(np.asarray(tau, dtype=float))
    sin_term = np.sin(np.pi * tau / period)

    return amplitude**2 * np.exp(-(2.0 / lengthscale**2) * sin_term**2)

def lag_matrix(n_epochs):
    """The N x N matrix of |i - j| over the epochs 1..N."""

    n_epochs = _check_n_epochs(n_epochs)
    t = np.arange(1, n_epochs + 1)

    return np.abs(np.subtract.outer(t, t))

def build_covariance(kernel, n_epochs):
    """Applies the kernel elementwise to the lag matrix.

    Args:
        kernel (callable): k(tau), e.g a PeriodicKernel, must accept
            an array of lags and return an array of the same shape
        n_epochs (int): N, size of the time grid

    Returns:
        K (np.ndarray): N x N covariance matrix
    """

    K = np.asarray(kernel(lag_matrix(n_epochs)), dtype=float)

    if K.shape != (n_epochs, n_epochs):
        raise InvalidKernelParametersError(
            "Kernel returned a matrix of shape {}, expected "
            "({}, {}).".format(K.shape, n_epochs, n_epochs))

    return K

def validate_hyperparameters(amplitude, lengthscale, period):
    """Raises InvalidKernelParametersError on out-of-range values."""

    values = OrderedDict([('amplitude', amplitude),
                          ('lengthscale', lengthscale),
                          ('period', period)])

    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise InvalidKernelParametersError(
                "{} must be a real number, got: {!r}".format(name, value))
        if np.isnan(value):
            raise InvalidKernelParametersError(
                "{} is NaN.".format(name))
        if not value > 0:
            raise InvalidKernelParametersError(
                "{} must be positive, got: {}".format(name, value))

    if not np.isfinite(amplitude) or not np.isfinite(lengthscale):
        raise InvalidKernelParametersError(
            "amplitude and lengthscale must be finite; only the period "
            "may be infinite. Values: {}".format(dict(values)))


# Kernel object
# -------------

class PeriodicKernel(object):
    """Holds the hyperparameters of the periodic kernel.

    Can be called as a function of the lag, i.e kernel(tau), so it
    can be passed anywhere a kernel callable is expected.

    Hyperparameters are accessed by name, kernel['period'], and are
    validated whenever they are set. Derived values ('variance',
    'frequency') can be read but not set.

    Attributes:
        parameter_names (list of str)
        parameter_vector (np.ndarray): amplitude, lengthscale, period
    """

    _param_names = ('amplitude', 'lengthscale', 'period')
    _derived_parameter_names = ('variance', 'frequency')

    def __init__(self, amplitude, lengthscale, period=np.inf):
        """Initialise the kernel.

        Args:
            amplitude (float): sigma > 0
            lengthscale (float): ell > 0
            period (float): T > 0, default is np.inf (aperiodic)

        Raises:
            InvalidKernelParametersError
        """

        validate_hyperparameters(amplitude, lengthscale, period)

        self._amplitude = float(amplitude)
        self._lengthscale = float(lengthscale)
        self._period = float(period)

    @classmethod
    def from_cycles(cls, n_epochs, num_cycles, amplitude, lengthscale):
        """Kernel with num_cycles full periods over the N epochs."""

        if num_cycles == 0:
            return cls(amplitude, lengthscale, np.inf)

        return cls(amplitude, lengthscale, n_epochs / num_cycles)


    # Internal operator work-methods
    # ------------------------------

    def __call__(self, tau):
        return periodic_kernel(tau, self._amplitude, self._lengthscale,
                               self._period)

    def __len__(self):
        return len(self._param_names)

    def __getitem__(self, name):
        if name in self._param_names:
            return getattr(self, '_' + name)
        elif name in self._derived_parameter_names:
            return self._getter_dict[name](self)
        else:
            raise KeyError("{} is not a kernel parameter.".format(name))

    def __setitem__(self, name, value):
        if name in self._param_names:
            hp = self.get_parameter_dict()
            hp[name] = value
            validate_hyperparameters(**hp)
            setattr(self, '_' + name, float(value))
        elif name in self._derived_parameter_names:
            raise NotImplementedError('Cannot set by derived params.')
        else:
            raise KeyError("{} is not a kernel parameter.".format(name))

    def __repr__(self):
        return "{}(amplitude={}, lengthscale={}, period={})".format(
            type(self).__name__, self._amplitude, self._lengthscale,
            self._period)


    # Properties and parameters
    # -------------------------

    @property
    def parameter_names(self):
        return list(self._param_names)

    def get_parameter_vector(self):
        return np.array([self[n] for n in self._param_names])

    def set_parameter_vector(self, vector):
        if len(vector) != len(self):
            raise ValueError("Vector was of the wrong dimension, expected: "
                             "{}, received: {}".format(len(self),
                                                       len(vector)))
        validate_hyperparameters(*vector)
        for name, value in zip(self._param_names, vector):
            setattr(self, '_' + name, float(value))

    parameter_vector = property(get_parameter_vector, set_parameter_vector)

    def get_parameter_dict(self):
        return OrderedDict(zip(self._param_names, self.get_parameter_vector()))

    @property
    def is_periodic(self):
        return bool(np.isfinite(self._period))

    # Conversion methods

    def get_variance(self):
        return self._amplitude**2

    def get_frequency(self):
        return 1.0 / self._period

    _getter_dict = {'variance':get_variance,
                    'frequency':get_frequency}


    # Evaluation
    # ----------

    def get_matrix(self, n_epochs):
        """Covariance matrix over the epochs 1..n_epochs."""

        return build_covariance(self, n_epochs)


# Hidden Utilities
# ----------------

def _check_n_epochs(n_epochs):
    if isinstance(n_epochs, bool) or not isinstance(n_epochs,
                                                    (int, np.integer)):
        raise ValueError("n_epochs must be an integer, got: "
                         "{!r}".format(n_epochs))
    if n_epochs < 1:
        raise ValueError("n_epochs must be at least 1, got: "
                         "{}".format(n_epochs))
    return int(n_epochs)


# Exception definitions
# ---------------------

class InvalidKernelParametersError(ValueError):
    """Kernel hyperparameters or matrix are invalid for sampling."""
    pass

class NonPositiveDefiniteError(InvalidKernelParametersError):
    """Covariance matrix is not symmetric positive semi-definite."""

    def __init__(self, error_str, *args, min_eigenvalue=None):
        self.error_str = error_str
        self.min_eigenvalue = min_eigenvalue
        super().__init__(error_str, *args)
