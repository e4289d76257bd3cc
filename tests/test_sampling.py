import numpy as np
import pandas as pd
import pytest

from lcdegrade.gp_tools import (check_covariance, draw_paths,
                                generate_series, sampling_factor,
                                to_long_table, NonPositiveDefiniteError,
                                InvalidKernelParametersError)


def test_generator_is_deterministic(periodic_kernel):
    lcf_1 = generate_series(periodic_kernel, 140, n_series=3, seed=7)
    lcf_2 = generate_series(periodic_kernel, 140, n_series=3, seed=7)
    pd.testing.assert_frame_equal(lcf_1, lcf_2)
    assert np.array_equal(lcf_1['y_latent'].values, lcf_2['y_latent'].values)


def test_explicit_generator_matches_seed(periodic_kernel):
    lcf_seed = generate_series(periodic_kernel, 50, seed=3)
    lcf_rng = generate_series(periodic_kernel, 50,
                              rng=np.random.default_rng(3))
    pd.testing.assert_frame_equal(lcf_seed, lcf_rng)


def test_different_seeds_differ(periodic_kernel):
    lcf_1 = generate_series(periodic_kernel, 50, seed=1)
    lcf_2 = generate_series(periodic_kernel, 50, seed=2)
    assert not np.allclose(lcf_1['y_latent'], lcf_2['y_latent'])


def test_long_table_layout(periodic_kernel):
    lcf = generate_series(periodic_kernel, 20, n_series=3, seed=0,
                          label='star')
    assert list(lcf.columns) == ['t', 'series', 'y_latent']
    assert len(lcf) == 60
    # Time-major ordering
    assert list(lcf['t'].iloc[:6]) == [1, 1, 1, 2, 2, 2]
    assert list(lcf['series'].iloc[:3]) == ['star_1', 'star_2', 'star_3']
    assert sorted(lcf['t'].unique()) == list(range(1, 21))


def test_default_label(periodic_kernel):
    lcf = generate_series(periodic_kernel, 10, seed=0)
    assert set(lcf['series']) == {'series_1'}
    lcf = generate_series(periodic_kernel, 10, seed=0, label='a')
    assert set(lcf['series']) == {'a'}


def test_to_long_table_matches_wide_array():
    paths = np.arange(12, dtype=float).reshape(3, 4)
    lcf = to_long_table(paths, ['a', 'b', 'c'])
    for _, row in lcf.iterrows():
        j = ['a', 'b', 'c'].index(row['series'])
        assert row['y_latent'] == paths[j, row['t'] - 1]

    with pytest.raises(ValueError):
        to_long_table(paths, ['a', 'b'])


def test_series_are_exactly_periodic(periodic_kernel):
    """T = N/4 gives four identical cycles."""
    lcf = generate_series(periodic_kernel, 140, seed=11)
    y = lcf['y_latent'].values
    assert np.allclose(y[:105], y[35:], atol=1e-6)
    assert np.std(y) > 1.0


def test_end_to_end_aperiodic_example(aperiodic_kernel):
    lcf = generate_series(aperiodic_kernel, 140, n_series=1, seed=1)
    assert len(lcf) == 140
    assert lcf['series'].nunique() == 1
    y = lcf['y_latent'].values
    # Covariance is 100 everywhere: one shared value for every epoch
    assert np.allclose(y, y[0], atol=1e-6)
    assert np.all(np.isfinite(y))


def test_aperiodic_marginal_variance(aperiodic_kernel):
    K = aperiodic_kernel.get_matrix(10)
    paths = draw_paths(K, n_series=4000, seed=5)
    assert paths.shape == (4000, 10)
    assert np.var(paths[:, 0]) == pytest.approx(100.0, rel=0.1)
    assert np.mean(paths[:, 0]) == pytest.approx(0.0, abs=1.0)


def test_draws_reproduce_covariance(periodic_kernel):
    K = periodic_kernel.get_matrix(12)
    paths = draw_paths(K, n_series=20000, rng=np.random.default_rng(0))
    K_sample = np.cov(paths, rowvar=False)
    assert np.allclose(K_sample, K, atol=5.0)


def test_sampling_factor_reconstructs_matrix(periodic_kernel):
    K = periodic_kernel.get_matrix(40)
    L = sampling_factor(K)
    assert np.allclose(L @ L.T, K, atol=1e-4 * K.max())


def test_check_covariance_accepts_rank_deficient(aperiodic_kernel):
    w, V = check_covariance(aperiodic_kernel.get_matrix(25))
    assert w[-1] == pytest.approx(2500.0)


def test_check_covariance_rejects_indefinite():
    K = np.array([[1.0, 2.0],
                  [2.0, 1.0]])
    with pytest.raises(NonPositiveDefiniteError) as excinfo:
        check_covariance(K)
    assert excinfo.value.min_eigenvalue == pytest.approx(-1.0)
    assert 'invalid kernel parameters' in str(excinfo.value)
    # Also part of the invalid parameter family
    with pytest.raises(InvalidKernelParametersError):
        draw_paths(K, seed=0)


@pytest.mark.parametrize('K', [
    np.array([[1.0, 0.5], [0.0, 1.0]]),
    np.array([[1.0, np.nan], [np.nan, 1.0]]),
    np.ones((2, 3)),
])
def test_check_covariance_rejects_invalid(K):
    with pytest.raises(NonPositiveDefiniteError):
        check_covariance(K)


@pytest.mark.parametrize('n_series', [0, -1, 1.5])
def test_invalid_series_count(periodic_kernel, n_series):
    with pytest.raises(ValueError):
        generate_series(periodic_kernel, 10, n_series=n_series, seed=0)


def test_nan_covariance_fails_before_sampling():
    with pytest.raises(InvalidKernelParametersError):
        generate_series(lambda tau: np.full(np.shape(tau), np.nan), 10,
                        seed=0)


def test_custom_kernel_callable():
    lcf = generate_series(lambda tau: np.exp(-0.5 * (tau / 3.0)**2), 30, seed=0)
    assert len(lcf) == 30
    assert np.all(np.isfinite(lcf['y_latent']))


def test_verbose_prints(periodic_kernel, capsys):
    generate_series(periodic_kernel, 35, seed=0, verbose=True)
    assert 'effective rank' in capsys.readouterr().out
