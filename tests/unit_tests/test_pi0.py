"""Tests for Storey's pi0 estimation with bootstrap lambda selection."""

import numpy as np
import pytest

from alphaprotfdr.constants import PI0_ESTIMATION_FAILED
from alphaprotfdr.scoring import bootstrap_sample, estimate_pi0, pi0_at_lambdas, pi0_lambdas


class TestLambdas:
    """Test the lambda grid and pi0(lambda)."""

    def test_lambda_grid(self):
        """Test default lambdas: (i + 1) / 100 * 0.5."""
        lambdas = pi0_lambdas()

        assert len(lambdas) == 100
        assert lambdas[0] == pytest.approx(0.005)
        assert lambdas[-1] == pytest.approx(0.5)

    def test_pi0_at_lambdas(self):
        """Test pi0(lambda) = #{p >= lambda} / (n * (1 - lambda))."""
        pvalues = np.array([0.1, 0.2, 0.6, 0.8])
        result = pi0_at_lambdas(pvalues, np.array([0.15, 0.5]))

        np.testing.assert_allclose(result, [3 / 4 / 0.85, 2 / 4 / 0.5])


class TestBootstrap:
    """Test bootstrap resampling."""

    def test_sample_sorted_and_capped(self):
        """Test that samples are sorted and at most max_size long."""
        values = np.arange(5000, dtype=np.float64)
        sample = bootstrap_sample(values, np.random.default_rng(0), max_size=1000)

        assert len(sample) == 1000
        assert np.all(np.diff(sample) >= 0)
        assert np.all(np.isin(sample, values))

    def test_small_input_full_size(self):
        """Test that small inputs are resampled at full size."""
        sample = bootstrap_sample(np.array([0.1, 0.2, 0.3]), np.random.default_rng(0))
        assert len(sample) == 3


class TestEstimatePi0:
    """Test pi0 estimation."""

    def test_uniform_pvalues_near_one(self):
        """Test that all-null p-values give pi0 close to 1."""
        pvalues = np.random.default_rng(42).uniform(size=2000)

        pi0 = estimate_pi0(pvalues, rng=np.random.default_rng(0))

        assert 0.85 < pi0 <= 1.0

    def test_mixture(self):
        """Test a mixture of 80% null and 20% near-zero p-values."""
        rng = np.random.default_rng(1)
        pvalues = np.concatenate([
            rng.uniform(size=800),
            rng.uniform(0.0, 0.001, size=200),
        ])

        pi0 = estimate_pi0(pvalues, rng=np.random.default_rng(0))

        assert 0.6 < pi0 < 0.95

    def test_reproducible_with_seed(self):
        """Test that equal seeds give equal estimates."""
        pvalues = np.random.default_rng(5).uniform(size=300)

        first = estimate_pi0(pvalues, rng=np.random.default_rng(123))
        second = estimate_pi0(pvalues, rng=np.random.default_rng(123))

        assert first == second

    def test_empty_fails(self):
        """Test the sentinel for empty input."""
        assert estimate_pi0(np.zeros(0)) == PI0_ESTIMATION_FAILED

    def test_all_identical_fails(self):
        """Test the sentinel for zero-spread input."""
        assert estimate_pi0(np.zeros(50)) == PI0_ESTIMATION_FAILED
        assert estimate_pi0(np.full(50, 0.4)) == PI0_ESTIMATION_FAILED

    def test_perfect_separation_fails(self):
        """Test the sentinel when no lambda has pi0 > 0."""
        pvalues = np.array([0.0, 0.001, 0.002])
        assert estimate_pi0(pvalues, rng=np.random.default_rng(0)) == PI0_ESTIMATION_FAILED
