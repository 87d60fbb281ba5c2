"""Tests for the gap statistic and the k-selection rules."""

from functools import partial

import numpy as np
import pytest

from epi_clustering.clustering import hclust_composite
from epi_clustering.exceptions import DegenerateDistanceError, GapStatisticError
from epi_clustering.optimization import (
    find_optimal_clusters,
    gap_statistic,
    make_reference_sampler,
    max_se,
    reference_sample,
    within_dispersion,
)


@pytest.fixture
def three_groups():
    """50 vung chia 3 nhom tach biet (17/17/16), 2 bien x 1 thoi diem."""
    rng = np.random.default_rng(23)
    centers = np.array([[0.0, 0.0], [10.0, 0.0], [5.0, 8.66]])
    sizes = [17, 17, 16]
    return np.vstack([c + 0.3 * rng.standard_normal((s, 2)) for c, s in zip(centers, sizes)])


@pytest.fixture
def cluster_fn():
    return partial(hclust_composite, n_variables=2)


class TestWithinDispersion:
    """Tests for W_k."""

    def test_hand_value(self):
        X = np.array([[0.0, 0.0], [3.0, 4.0], [10.0, 10.0]])
        assert within_dispersion(X, [1, 1, 2]) == pytest.approx(1.25)

    def test_singletons_contribute_zero(self):
        X = np.array([[0.0], [1.0], [5.0]])
        assert within_dispersion(X, [1, 2, 3]) == 0.0

    def test_decreases_with_true_split(self, three_groups, cluster_fn):
        W1 = within_dispersion(three_groups, cluster_fn(three_groups, 1))
        W3 = within_dispersion(three_groups, cluster_fn(three_groups, 3))
        assert W3 < W1 / 10


class TestReferenceSampler:
    """Tests for the null reference distributions."""

    def test_original_stays_in_column_ranges(self, three_groups):
        sampler = make_reference_sampler(three_groups, 'original')
        ref = sampler(np.random.default_rng(0))
        assert ref.shape == three_groups.shape
        assert np.all(ref >= three_groups.min(axis=0))
        assert np.all(ref <= three_groups.max(axis=0))

    def test_scaled_pca_shape(self, three_groups):
        ref = make_reference_sampler(three_groups, 'scaledPCA')(np.random.default_rng(0))
        assert ref.shape == three_groups.shape
        assert np.all(np.isfinite(ref))

    def test_reference_sample_matches_sampler(self, three_groups):
        a = reference_sample(three_groups, np.random.default_rng(4), 'original')
        b = make_reference_sampler(three_groups, 'original')(np.random.default_rng(4))
        np.testing.assert_array_equal(a, b)

    def test_unknown_space_raises(self, three_groups):
        with pytest.raises(ValueError):
            make_reference_sampler(three_groups, 'gaussian')


class TestMaxSE:
    """Tests for the k-selection rules on hand-made gap curves."""

    F_PLAIN = [0.1, 0.5, 0.9, 0.85, 1.0]
    F_SHOULDER = [0.1, 0.5, 0.55, 0.3, 0.9]
    SE = [0.1] * 5

    @pytest.mark.parametrize("method, expected", [
        ('firstmax', 3),
        ('globalmax', 5),
        ('firstSEmax', 3),
        ('globalSEmax', 3),
        ('Tibs2001SEmax', 3),
    ])
    def test_plain_curve(self, method, expected):
        assert max_se(self.F_PLAIN, self.SE, method=method) == expected

    @pytest.mark.parametrize("method, expected", [
        ('firstmax', 3),
        ('globalmax', 5),
        ('firstSEmax', 2),
        ('globalSEmax', 5),
        ('Tibs2001SEmax', 2),
    ])
    def test_shoulder_curve(self, method, expected):
        assert max_se(self.F_SHOULDER, self.SE, method=method) == expected

    def test_zero_se_factor_is_first_local_max(self):
        assert max_se(self.F_SHOULDER, self.SE, method='firstSEmax', se_factor=0.0) == 3

    def test_increasing_curve_picks_last(self):
        assert max_se([0.1, 0.2, 0.3, 0.4], [0.01] * 4, method='firstSEmax') == 4

    def test_unknown_method_raises(self):
        with pytest.raises(ValueError):
            max_se(self.F_PLAIN, self.SE, method='elbow')

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            max_se([0.1, 0.2], [0.1])

    def test_nan_raises(self):
        with pytest.raises(GapStatisticError):
            max_se([0.1, np.nan, 0.3], [0.1, 0.1, 0.1])


class TestGapStatistic:
    """Tests for the gap table."""

    def test_table_layout(self, three_groups, cluster_fn):
        table = gap_statistic(three_groups, cluster_fn, k_max=5, n_bootstrap=10,
                              random_state=1, verbose=False)
        assert list(table.index) == [1, 2, 3, 4, 5]
        assert list(table.columns) == ['logW', 'E.logW', 'gap', 'SE.sim']
        np.testing.assert_allclose(table['gap'], table['E.logW'] - table['logW'])
        assert (table['SE.sim'] > 0).all()

    def test_deterministic_for_seed(self, three_groups, cluster_fn):
        a = gap_statistic(three_groups, cluster_fn, k_max=4, n_bootstrap=8,
                          random_state=5, verbose=False)
        b = gap_statistic(three_groups, cluster_fn, k_max=4, n_bootstrap=8,
                          random_state=5, verbose=False)
        c = gap_statistic(three_groups, cluster_fn, k_max=4, n_bootstrap=8,
                          random_state=6, verbose=False)
        np.testing.assert_array_equal(a.to_numpy(), b.to_numpy())
        assert not np.allclose(a['E.logW'], c['E.logW'])

    def test_k_max_too_large_raises(self, three_groups, cluster_fn):
        with pytest.raises(GapStatisticError):
            gap_statistic(three_groups, cluster_fn, k_max=len(three_groups),
                          n_bootstrap=5, verbose=False)

    def test_k_max_too_small_raises(self, three_groups, cluster_fn):
        with pytest.raises(GapStatisticError):
            gap_statistic(three_groups, cluster_fn, k_max=1, n_bootstrap=5, verbose=False)

    def test_single_bootstrap_raises(self, three_groups, cluster_fn):
        with pytest.raises(GapStatisticError):
            gap_statistic(three_groups, cluster_fn, k_max=3, n_bootstrap=1, verbose=False)

    def test_zero_dispersion_raises(self):
        X = np.ones((5, 2))
        with pytest.raises(GapStatisticError):
            gap_statistic(X, partial(hclust_composite, n_variables=1), k_max=2,
                          n_bootstrap=2, verbose=False)


class TestFindOptimalClusters:
    """Tests for the end-to-end k search."""

    @pytest.mark.parametrize("method", ['firstSEmax', 'firstmax', 'Tibs2001SEmax'])
    def test_three_separated_groups(self, three_groups, method):
        result = find_optimal_clusters(three_groups, 2, k_max=6, n_bootstrap=50,
                                       method=method, space_h0='original',
                                       random_state=23, verbose=False)
        assert result['recommended_k'] == 3
        assert result['gap_table'].shape == (6, 4)
        assert result['method'] == method

    def test_degenerate_input_raises(self):
        X = np.zeros((6, 4))
        with pytest.raises(DegenerateDistanceError):
            find_optimal_clusters(X, 2, k_max=3, n_bootstrap=5, verbose=False)
