"""Tests for LOWESS smoothing and per-series z-scoring."""

import numpy as np
import pandas as pd
import pytest

from epi_clustering.cleaning import clean_panel
from epi_clustering.preprocessing import (
    elapsed_days,
    lowess_filter_2d,
    lowess_smooth,
    panel_to_matrix,
    preprocess_panel,
    zscore_2d,
)


@pytest.fixture
def clean(raw_panel, panel_config):
    return clean_panel(raw_panel, panel_config, verbose=False)


class TestLowess:
    """Tests for the LOWESS smoother."""

    def test_linear_series_unchanged(self):
        x = np.arange(50, dtype=float)
        y = 3.0 * x - 7.0
        np.testing.assert_allclose(lowess_smooth(y, x, frac=0.2), y, atol=1e-8)

    def test_output_follows_input_order(self):
        x = np.arange(40, dtype=float)
        y = np.sin(x / 5.0)
        out = lowess_smooth(y, x, frac=0.3)
        perm = np.random.default_rng(2).permutation(40)
        shuffled = lowess_smooth(y[perm], x[perm], frac=0.3)
        np.testing.assert_allclose(shuffled, out[perm])

    def test_reduces_noise(self):
        rng = np.random.default_rng(1)
        x = np.arange(200, dtype=float)
        signal = np.sin(x / 20.0)
        noisy = signal + 0.3 * rng.standard_normal(200)
        smoothed = lowess_smooth(noisy, x, frac=0.1)
        assert np.abs(smoothed - signal).mean() < np.abs(noisy - signal).mean()

    def test_frac_too_small_raises(self):
        x = np.arange(20, dtype=float)
        with pytest.raises(ValueError, match="frac"):
            lowess_smooth(np.ones(20), x, frac=0.05)

    def test_filter_2d_rowwise(self):
        x = np.arange(30, dtype=float)
        data = np.vstack([x, 2 * x, -x])
        out = lowess_filter_2d(data, x, frac=0.3)
        np.testing.assert_allclose(out, data, atol=1e-8)


class TestZScore:
    """Tests for row-wise standardisation."""

    def test_rows_have_zero_mean_unit_std(self):
        rng = np.random.default_rng(0)
        data = rng.normal(5.0, 3.0, size=(6, 40))
        z = zscore_2d(data)
        np.testing.assert_allclose(z.mean(axis=1), 0.0, atol=1e-10)
        np.testing.assert_allclose(z.std(axis=1), 1.0, atol=1e-10)

    def test_constant_row_becomes_zero(self):
        data = np.vstack([np.full(10, 4.0), np.arange(10, dtype=float)])
        z = zscore_2d(data)
        assert np.all(z[0] == 0.0)
        assert not np.isnan(z).any()


class TestPanelHelpers:
    """Tests for reshaping helpers."""

    def test_elapsed_days(self):
        dates = pd.date_range('2021-03-01', periods=4)
        np.testing.assert_array_equal(elapsed_days(dates), [0.0, 1.0, 2.0, 3.0])

    def test_panel_to_matrix_shape_and_order(self, clean, panel_config):
        regions = list(reversed(panel_config.regions))
        wide = panel_to_matrix(clean, 'hosp', regions=regions)
        assert list(wide.index) == regions
        assert wide.shape == (len(regions), panel_config.n_days - 1)
        assert wide.columns.is_monotonic_increasing


class TestPreprocessPanel:
    """Tests for the full preprocessing step."""

    def test_shape_and_order_preserved(self, clean, panel_config):
        out = preprocess_panel(clean, panel_config, verbose=False)
        assert out.shape == clean.shape
        pd.testing.assert_frame_equal(out[['date', 'region']], clean[['date', 'region']])

    def test_each_series_standardised(self, clean, panel_config):
        out = preprocess_panel(clean, panel_config, verbose=False)
        for variable in panel_config.variables:
            grouped = out.groupby('region')[variable]
            np.testing.assert_allclose(grouped.mean(), 0.0, atol=1e-8)
            np.testing.assert_allclose(grouped.std(ddof=0), 1.0, atol=1e-8)

    def test_matches_lowess_then_zscore(self, clean, panel_config):
        out = preprocess_panel(clean, panel_config, frac=0.1, verbose=False)

        wide = panel_to_matrix(clean, 'confirmed', regions=panel_config.regions)
        expected = zscore_2d(lowess_filter_2d(
            wide.to_numpy(), elapsed_days(wide.columns), frac=0.1))
        actual = panel_to_matrix(out, 'confirmed', regions=panel_config.regions).to_numpy()
        np.testing.assert_allclose(actual, expected)

    def test_input_not_modified(self, clean, panel_config):
        before = clean.copy()
        preprocess_panel(clean, panel_config, verbose=False)
        pd.testing.assert_frame_equal(clean, before)
