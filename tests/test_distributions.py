import math

import numpy as np
import pytest
import scipy as sp

from copulit.distributions import (
    LogNormalDistribution,
    NormalDistribution,
    PiecewiseConstantDistribution,
    StandardNormalDistribution,
    StandardUniformDistribution,
    UniformRealDistribution,
)
from copulit.exceptions import InvalidParameterError, InvalidProbabilityError

DISTRIBUTIONS = [
    NormalDistribution(mu=0, sigma=1),
    NormalDistribution(mu=-3.5, sigma=0.2),
    StandardNormalDistribution(),
    LogNormalDistribution(mu=0.5, sigma=0.8),
    UniformRealDistribution(min=-1, max=4),
    StandardUniformDistribution(),
    PiecewiseConstantDistribution.create([0, 1, 2, 5], [1, 3, 2]),
]


class TestDistributionContract:
    @pytest.mark.parametrize("distr", DISTRIBUTIONS, ids=repr)
    @pytest.mark.parametrize("p", [0.001, 0.1, 0.25, 0.5, 0.75, 0.9, 0.999])
    def test_quantile_round_trip(self, distr, p):
        x = distr.quantile(p)
        np.testing.assert_allclose(distr.cumulative_distribution(x), p, atol=1e-12)

    @pytest.mark.parametrize("distr", DISTRIBUTIONS, ids=repr)
    @pytest.mark.parametrize("p", [-0.1, 1.1, -math.inf, math.inf, math.nan])
    def test_invalid_probability(self, distr, p):
        with pytest.raises(InvalidProbabilityError):
            distr.quantile(p)

    @pytest.mark.parametrize("distr", DISTRIBUTIONS, ids=repr)
    def test_nan_propagates(self, distr):
        assert math.isnan(distr.density(math.nan))
        assert math.isnan(distr.density_ln(math.nan))
        assert math.isnan(distr.cumulative_distribution(math.nan))

    @pytest.mark.parametrize("distr", DISTRIBUTIONS, ids=repr)
    def test_density_ln_is_log_of_density(self, distr):
        for p in np.linspace(0.01, 0.99, 15):
            x = distr.quantile(p)
            np.testing.assert_allclose(
                math.exp(distr.density_ln(x)), distr.density(x), rtol=1e-12
            )

    @pytest.mark.parametrize("distr", DISTRIBUTIONS, ids=repr)
    def test_cumulative_distribution_is_monotone_and_saturates(self, distr):
        x = np.linspace(distr.quantile(0.0001) - 1, distr.quantile(0.9999) + 1, 101)
        cdf = np.array([distr.cumulative_distribution(x_i) for x_i in x])
        assert np.all(np.diff(cdf) >= 0)
        assert distr.cumulative_distribution(-1e300) == 0.0
        assert distr.cumulative_distribution(1e300) == 1.0

    @pytest.mark.parametrize("distr", DISTRIBUTIONS, ids=repr)
    def test_moments_match_quadrature(self, distr):
        low, high = distr.quantile(1e-12), distr.quantile(1 - 1e-12)
        inner = [b for b in getattr(distr, "boundaries", ()) if low < b < high]
        points = inner or None
        mean, _ = sp.integrate.quad(lambda x: x * distr.density(x), low, high, points=points, limit=200)
        np.testing.assert_allclose(mean, distr.mean, rtol=1e-6, atol=1e-9)


class TestNormal:
    @pytest.mark.parametrize("mu", [-10, 0, 3.3])
    @pytest.mark.parametrize("sigma", [0.1, 1, 25])
    def test_density_integrates_to_one(self, mu, sigma):
        distr = NormalDistribution(mu=mu, sigma=sigma)
        total, _ = sp.integrate.quad(
            distr.density, mu - 40 * sigma, mu + 40 * sigma, points=[mu]
        )
        np.testing.assert_allclose(total, 1.0, rtol=1e-8)

    @pytest.mark.parametrize("offset", [0.1, 0.5, 1.7, 4.0])
    def test_density_is_symmetric(self, offset):
        distr = NormalDistribution(mu=2.0, sigma=1.5)
        np.testing.assert_allclose(distr.density(2.0 + offset), distr.density(2.0 - offset))

    def test_against_scipy(self):
        distr = NormalDistribution(mu=1.0, sigma=2.0)
        x = np.linspace(-6, 8, 29)
        scipy_distr = sp.stats.norm(loc=1.0, scale=2.0)
        np.testing.assert_allclose([distr.density(x_i) for x_i in x], scipy_distr.pdf(x))
        np.testing.assert_allclose([distr.density_ln(x_i) for x_i in x], scipy_distr.logpdf(x))
        np.testing.assert_allclose(
            [distr.cumulative_distribution(x_i) for x_i in x], scipy_distr.cdf(x), atol=1e-15
        )

    def test_quantile_limits(self):
        distr = NormalDistribution(mu=0, sigma=1)
        assert distr.quantile(0.0) == -math.inf
        assert distr.quantile(1.0) == math.inf

    @pytest.mark.parametrize(
        "mu,sigma",
        [(math.nan, 1), (math.inf, 1), (0, 0), (0, -1), (0, math.inf), (0, math.nan)],
    )
    def test_invalid_parameters(self, mu, sigma):
        with pytest.raises(InvalidParameterError):
            NormalDistribution(mu=mu, sigma=sigma)

    def test_is_immutable(self):
        distr = NormalDistribution(mu=0, sigma=1)
        with pytest.raises(AttributeError):
            distr.mu = 5

    def test_standard_normal_matches_normal(self):
        standard, normal = StandardNormalDistribution(), NormalDistribution(0, 1)
        for x in [-3.0, -0.5, 0.0, 1.2]:
            assert standard.density(x) == normal.density(x)
            assert standard.cumulative_distribution(x) == normal.cumulative_distribution(x)
        assert standard.quantile(0.3) == normal.quantile(0.3)


class TestLogNormal:
    def test_against_scipy(self):
        distr = LogNormalDistribution(mu=0.3, sigma=0.7)
        scipy_distr = sp.stats.lognorm(s=0.7, scale=np.exp(0.3))
        x = np.linspace(0.05, 6, 25)
        np.testing.assert_allclose([distr.density(x_i) for x_i in x], scipy_distr.pdf(x))
        np.testing.assert_allclose(
            [distr.cumulative_distribution(x_i) for x_i in x], scipy_distr.cdf(x)
        )
        np.testing.assert_allclose(distr.mean, scipy_distr.mean())
        np.testing.assert_allclose(distr.variance, scipy_distr.var())

    @pytest.mark.parametrize("x", [0.0, -1.0, -math.inf])
    def test_non_positive_support(self, x):
        distr = LogNormalDistribution(mu=0, sigma=1)
        assert distr.density(x) == 0.0
        assert distr.density_ln(x) == -math.inf
        assert distr.cumulative_distribution(x) == 0.0

    def test_quantile_limits(self):
        distr = LogNormalDistribution(mu=1, sigma=2)
        assert distr.quantile(0.0) == 0.0
        assert distr.quantile(1.0) == math.inf

    @pytest.mark.parametrize("mean", [0.5, 2, 100])
    @pytest.mark.parametrize("std", [0.1, 1, 7])
    def test_from_moments(self, mean, std):
        distr = LogNormalDistribution.from_moments(mean=mean, std=std)
        np.testing.assert_allclose(distr.mean, mean)
        np.testing.assert_allclose(distr.standard_deviation, std)

    @pytest.mark.parametrize("mean,std", [(0, 1), (-1, 1), (1, 0), (1, math.nan)])
    def test_from_moments_invalid(self, mean, std):
        with pytest.raises(InvalidParameterError):
            LogNormalDistribution.from_moments(mean=mean, std=std)


class TestUniformReal:
    def test_known_values(self):
        distr = UniformRealDistribution(min=0, max=2)
        assert distr.density(1) == 0.5
        assert distr.density(3) == 0
        assert distr.quantile(0.5) == 1.0
        assert distr.cumulative_distribution(-1) == 0.0
        assert distr.cumulative_distribution(0.5) == 0.25
        assert distr.cumulative_distribution(2.5) == 1.0
        assert distr.density_ln(3) == -math.inf
        assert distr.density_ln(1) == -math.log(2)

    def test_density_on_closed_interval(self):
        distr = UniformRealDistribution(min=-1, max=1)
        assert distr.density(-1) == distr.density(1) == 0.5

    def test_quantile_endpoints_are_exact(self):
        distr = UniformRealDistribution(min=0.1, max=0.7)
        assert distr.quantile(0.0) == 0.1
        assert distr.quantile(1.0) == 0.7

    def test_moments(self):
        distr = UniformRealDistribution(min=2, max=8)
        assert distr.mean == 5
        assert distr.variance == 3
        np.testing.assert_allclose(distr.standard_deviation, math.sqrt(3))

    @pytest.mark.parametrize(
        "min,max", [(1, 1), (2, 1), (math.nan, 1), (0, math.inf), (-math.inf, 0)]
    )
    def test_invalid_parameters(self, min, max):
        with pytest.raises(InvalidParameterError):
            UniformRealDistribution(min=min, max=max)


class TestStandardUniform:
    DISTR = StandardUniformDistribution()

    @pytest.mark.parametrize("p", [1.0, 0.0, 0.5, 0.123])
    def test_quantile(self, p):
        assert self.DISTR.quantile(p) == p

    @pytest.mark.parametrize("p", [-0.1, 1.1])
    def test_invalid_quantile(self, p):
        with pytest.raises(InvalidProbabilityError):
            self.DISTR.quantile(p)

    @pytest.mark.parametrize(
        "x,probability", [(-0.1, 0.0), (0.0, 0.0), (0.1, 0.1), (1.0, 1.0), (1.1, 1.0)]
    )
    def test_cumulative_distribution(self, x, probability):
        assert self.DISTR.cumulative_distribution(x) == probability
        assert StandardUniformDistribution.cumulative_distribution_function(x) == probability

    @pytest.mark.parametrize("x,expected", [(0.5, 1.0), (-0.1, 0.0), (-1.1, 0.0)])
    def test_density(self, x, expected):
        assert self.DISTR.density(x) == expected

    @pytest.mark.parametrize("x,expected", [(0.5, 0.0), (-0.1, -math.inf), (-1.1, -math.inf)])
    def test_density_ln(self, x, expected):
        assert self.DISTR.density_ln(x) == expected

    def test_instances_are_interchangeable(self):
        assert StandardUniformDistribution() == self.DISTR
        assert hash(StandardUniformDistribution()) == hash(self.DISTR)


class TestPiecewiseConstant:
    @staticmethod
    def monotonic_test_distribution():
        return PiecewiseConstantDistribution.create([1.0, 2.0, 3.0], [1.0, 1.0])

    @pytest.mark.parametrize(
        "boundaries,weights",
        [
            ([1.0], [1.0]),
            ([1.0, 1.0], [1.0, 1.0]),
            ([1.0, 1.0], [1.0]),
            ([1.0, 2.0], [-1.0]),
            ([1.0, 2.0, 3.0], [1.0]),
            ([2.0, 1.0], [1.0]),
            ([1.0, 2.0], [0.0]),
            ([1.0, math.inf], [1.0]),
            ([1.0, 2.0], [math.nan]),
        ],
    )
    def test_construct_invalid(self, boundaries, weights):
        with pytest.raises(InvalidParameterError):
            PiecewiseConstantDistribution.create(boundaries, weights)

    @pytest.mark.parametrize(
        "x,expected",
        [(-1.0, 0.0), (1.0, 0.0), (2.0, 0.5), (3.0, 1.0), (4.0, 1.0), (2.5, 0.75), (1.5, 0.25)],
    )
    def test_cumulative_distribution(self, x, expected):
        assert self.monotonic_test_distribution().cumulative_distribution(x) == expected

    @pytest.mark.parametrize(
        "p,expected", [(0.0, 1.0), (0.5, 2.0), (1.0, 3.0), (0.25, 1.5), (0.75, 2.5)]
    )
    def test_quantile(self, p, expected):
        assert self.monotonic_test_distribution().quantile(p) == expected

    @pytest.mark.parametrize("p", [-0.1, 1.1])
    def test_quantile_invalid(self, p):
        with pytest.raises(InvalidProbabilityError):
            self.monotonic_test_distribution().quantile(p)

    def test_normalizes_weights(self):
        distr = PiecewiseConstantDistribution.create([0, 1, 2, 4], [2, 6, 2])
        assert distr.cumulative_probabilities == (0.0, 0.2, 0.8, 1.0)

    def test_zero_weight_interval(self):
        # The middle interval carries no probability
        distr = PiecewiseConstantDistribution.create([0, 1, 2, 3], [1, 0, 1])
        assert distr.cumulative_distribution(1.5) == 0.5
        assert distr.quantile(0.5) == 1.0
        assert distr.density(1.5) == 0.0
        assert distr.density_ln(1.5) == -math.inf

    def test_density_integrates_to_one(self):
        distr = PiecewiseConstantDistribution.create([0, 1, 2, 5], [1, 3, 2])
        total, _ = sp.integrate.quad(distr.density, -1, 6, points=[0, 1, 2, 5])
        np.testing.assert_allclose(total, 1.0)

    def test_variance_against_sampling(self):
        distr = PiecewiseConstantDistribution.create([0, 1, 2, 5], [1, 3, 2])
        rng = np.random.default_rng(42)
        samples = [distr.quantile(p) for p in rng.random(20_000)]
        np.testing.assert_allclose(np.var(samples), distr.variance, rtol=0.05)


if __name__ == "__main__":
    import pytest

    pytest.main(args=[__file__, "-v", "--capture=sys"])
