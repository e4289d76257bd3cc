import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from lcdegrade import analysis
from lcdegrade.degradation import STAGES


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


def test_plot_degradation(combined_lcf):
    before = combined_lcf.copy()
    fig, axes = analysis.plot_degradation(combined_lcf, title='all',
                                          show=False)
    assert len(axes) == len(STAGES)
    assert len(fig.axes) == len(STAGES)
    pd.testing.assert_frame_equal(combined_lcf, before)


def test_plot_degradation_single_series(combined_lcf, tmp_path):
    path = tmp_path / 'periodic.png'
    fig, axes = analysis.plot_degradation(combined_lcf, series='periodic',
                                          show=False, save_path=str(path))
    assert path.exists()
    # Latent line plus the zero line
    assert len(axes[0].get_lines()) == 2


def test_plot_degradation_unknown_series(combined_lcf):
    with pytest.raises(ValueError):
        analysis.plot_degradation(combined_lcf, series='missing', show=False)


def test_plot_latent_only(latent_lcf):
    fig, axes = analysis.plot_degradation(latent_lcf,
                                          stages=('latent', 'discrete'),
                                          show=False)
    assert len(axes) == 2


def test_detected_stage_marks_non_detections(combined_lcf):
    lcf = combined_lcf[combined_lcf['series'] == 'long_period']
    n_limits = int((lcf['visible'] & lcf['non_detection']).sum())
    fig, ax = analysis.plot_stage(lcf, 'detected', show=False)
    markers = [line for line in ax.get_lines() if line.get_marker() == 'v']
    if n_limits:
        assert len(markers[0].get_xdata()) == n_limits
    else:
        assert not markers


def test_plot_series_grid(combined_lcf):
    fig, axes = analysis.plot_series_grid(combined_lcf, stage='visible',
                                          show=False)
    assert len(axes) == 3


def test_plot_kernel(periodic_kernel, tmp_path):
    path = tmp_path / 'kernel.png'
    fig, (ax_matrix, ax_tau) = analysis.plot_kernel(periodic_kernel, 40,
                                                    show=False,
                                                    save_path=str(path))
    assert path.exists()
    assert ax_matrix.images[0].get_array().shape == (40, 40)
    assert 'period' in fig._suptitle.get_text()


def test_series_colours():
    assert analysis.series_colours(3).shape == (3, 4)
    assert np.all(analysis.series_colours(0) <= 1.0)
