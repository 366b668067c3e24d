"""
Vectorized quantile functions, used to push arrays of uniform draws (for
instance the columns of Gaussian copula samples) through marginal
distributions:

>>> import numpy as np
>>> from copulit.distributions import UniformRealDistribution
>>> quantile(UniformRealDistribution(min=0, max=2), np.array([0.0, 0.25, 1.0]))
array([0. , 0.5, 2. ])
"""

from functools import singledispatch

import numpy as np
import scipy as sp

from copulit.distributions import (
    LogNormalDistribution,
    NormalDistribution,
    PiecewiseConstantDistribution,
    StandardNormalDistribution,
    StandardUniformDistribution,
    UniformRealDistribution,
)
from copulit.exceptions import InvalidProbabilityError
from copulit.math import SQRT_TWO


def _as_probabilities(draws):
    draws = np.asarray(draws, dtype=float)
    if not np.all((draws >= 0.0) & (draws <= 1.0)):
        raise InvalidProbabilityError("Probabilities must be in [0, 1]")
    return draws


@singledispatch
def quantile(distribution, draws):
    raise NotImplementedError(f"quantile not implemented for {distribution}")


@quantile.register(NormalDistribution)
def normal_quantile(distribution, draws):
    draws = _as_probabilities(draws)
    mu, sigma = distribution.mu, distribution.sigma
    return mu + sigma * SQRT_TWO * sp.special.erfinv(2 * draws - 1)


@quantile.register(StandardNormalDistribution)
def standard_normal_quantile(distribution, draws):
    draws = _as_probabilities(draws)
    return SQRT_TWO * sp.special.erfinv(2 * draws - 1)


@quantile.register(LogNormalDistribution)
def lognormal_quantile(distribution, draws):
    draws = _as_probabilities(draws)
    mu, sigma = distribution.mu, distribution.sigma
    with np.errstate(over="ignore"):
        return np.exp(mu + SQRT_TWO * sigma * sp.special.erfinv(2 * draws - 1))


@quantile.register(UniformRealDistribution)
def uniform_quantile(distribution, draws):
    draws = _as_probabilities(draws)
    lower, upper = distribution.min, distribution.max
    return lower + (upper - lower) * draws


@quantile.register(StandardUniformDistribution)
def standard_uniform_quantile(distribution, draws):
    return _as_probabilities(draws).copy()


@quantile.register(PiecewiseConstantDistribution)
def piecewise_constant_quantile(distribution, draws):
    # Zero weights make the cumulative probabilities flat, which np.interp
    # does not handle, so fall back to the scalar search
    draws = _as_probabilities(draws)
    return np.vectorize(distribution.quantile, otypes=[float])(draws)


if __name__ == "__main__":
    import pytest

    pytest.main(args=[__file__, "--doctest-modules", "-v", "--capture=sys"])
