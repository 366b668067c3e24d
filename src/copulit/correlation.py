"""
Correlated samplers built on a packed Cholesky factor.

A builder factorizes a matrix once. Every call to `build` then returns a new,
independent sampler that shares the (read-only) factor but owns its scratch
buffer and Box-Muller state, so each worker or simulation path can get its
own sampler cheaply:

>>> from copulit.sampling import NumpyUniformSource, sample
>>> builder = GaussianCopulaBuilder([[1.0, 0.8], [0.8, 1.0]])
>>> sampler1 = builder.build(NumpyUniformSource(random_state=1))
>>> sampler2 = builder.build(NumpyUniformSource(random_state=2))
>>> sampler1.factor is sampler2.factor
True
>>> draws = sample(sampler1, 1000)
>>> draws.shape
(1000, 2)
>>> bool(((draws > 0) & (draws < 1)).all())
True

The multivariate normal sampler works the same way, but adds a mean vector
and takes a covariance matrix by default:

>>> builder = MultivariateNormalBuilder(mean=[1.0, -1.0], matrix=[[4.0, 1.0], [1.0, 2.0]])
>>> builder.build(NumpyUniformSource(random_state=3)).draw().shape
(2,)
"""

import logging
import math

import numpy as np

from copulit.cholesky import PackedCholeskyFactor, offset, packed_cholesky_factor
from copulit.distributions import StandardNormalDistribution
from copulit.exceptions import InvalidParameterError, require
from copulit.sampling import Sampler
from copulit.samplers import StandardNormalSampler
from copulit.types import Array1D, MatrixKind, UniformSource

logger = logging.getLogger(__name__)


def lower_triangular_multiply(factor: PackedCholeskyFactor, z: Array1D, out: Array1D) -> Array1D:
    """Compute out = L @ z, with L in packed storage.

    Row i of L spans i + 1 stored entries, so the inner product only runs
    over z[: i + 1].
    """
    values = factor.values
    for i in range(factor.order):
        start = offset(i)
        out[i] = float(np.dot(values[start : start + i + 1], z[: i + 1]))
    return out


class _CholeskySampler(Sampler):
    """Shared machinery: a factor, a scratch buffer and a normal sampler."""

    def __init__(self, source: UniformSource, factor: PackedCholeskyFactor):
        require(source, "source")
        self.factor = require(factor, "factor")
        self.buffer = np.empty(factor.order, dtype=float)
        self.standard_normal = StandardNormalSampler(source)

    @property
    def order(self) -> int:
        return self.factor.order

    def __len__(self):
        return self.order

    def _correlated_normals(self) -> Array1D:
        normals = self.buffer
        self.standard_normal.fill(normals)
        return lower_triangular_multiply(self.factor, normals, np.empty(self.order))


class MultivariateNormalSampler(_CholeskySampler):
    """Draws vectors from N(mean, L @ L.T)."""

    def __init__(self, source: UniformSource, mean, factor: PackedCholeskyFactor):
        super().__init__(source, factor)
        self.mean = _as_mean(mean, factor.order)

    def draw(self) -> Array1D:
        result = self._correlated_normals()
        result += self.mean
        return result


class GaussianCopulaSampler(_CholeskySampler):
    """Draws vectors of Uniform(0, 1) marginals whose dependence is given by
    a Gaussian copula with the factorized correlation matrix."""

    def __init__(self, source: UniformSource, factor: PackedCholeskyFactor):
        super().__init__(source, factor)
        if factor.kind != "correlation":
            raise InvalidParameterError(
                f"A Gaussian copula needs a correlation factor, got kind={factor.kind!r}"
            )

    def draw(self) -> Array1D:
        result = self._correlated_normals()
        phi = StandardNormalDistribution.cumulative_distribution_function
        for i in range(self.order):
            result[i] = phi(result[i])
        return result


def _as_mean(mean, order: int) -> Array1D:
    require(mean, "mean")
    mean = np.array(mean, dtype=float)
    if mean.shape != (order,):
        raise InvalidParameterError(
            f"Mean must have shape ({order},) to match the matrix, got {mean.shape}"
        )
    if not all(math.isfinite(m) for m in mean):
        raise InvalidParameterError(f"Mean must be finite, got {mean}")
    mean.flags.writeable = False
    return mean


class GaussianCopulaBuilder:
    """Factorizes a correlation matrix once and builds copula samplers.

    Examples
    --------
    >>> builder = GaussianCopulaBuilder([[1.0, 1.2], [1.2, 1.0]])
    Traceback (most recent call last):
    ...
    copulit.exceptions.InvalidMatrixError: Matrix must be symmetric with values in [-1, 1], got matrix[1, 0]=1.2 and matrix[0, 1]=1.2
    """

    def __init__(self, correlation_matrix):
        self.factor = packed_cholesky_factor(
            require(correlation_matrix, "correlation_matrix"), kind="correlation"
        )
        logger.debug("Built copula factor of order %d", self.order)

    @property
    def order(self) -> int:
        return self.factor.order

    def build(self, source: UniformSource) -> GaussianCopulaSampler:
        return GaussianCopulaSampler(source, self.factor)


class MultivariateNormalBuilder:
    """Factorizes a covariance (or correlation) matrix once and builds
    multivariate normal samplers with the given mean."""

    def __init__(self, mean, matrix, kind: MatrixKind = "covariance"):
        self.factor = packed_cholesky_factor(require(matrix, "matrix"), kind=kind)
        self.mean = _as_mean(mean, self.factor.order)
        logger.debug("Built multivariate normal factor of order %d", self.order)

    @property
    def order(self) -> int:
        return self.factor.order

    def build(self, source: UniformSource) -> MultivariateNormalSampler:
        return MultivariateNormalSampler(source, self.mean, self.factor)


if __name__ == "__main__":
    import pytest

    pytest.main(args=[__file__, "--doctest-modules", "-v", "--capture=sys"])
