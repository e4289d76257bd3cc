from .kernels import (PeriodicKernel, periodic_kernel, lag_matrix,
                      build_covariance, validate_hyperparameters,
                      InvalidKernelParametersError,
                      NonPositiveDefiniteError)
from .sampling import (check_covariance, sampling_factor, draw_paths,
                       generate_series, series_labels, to_long_table)
