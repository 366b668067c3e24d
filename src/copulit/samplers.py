"""
Univariate normal-family samplers.

`StandardNormalSampler` uses the polar form of the Box-Muller transform:
pairs of uniforms are mapped into the unit disk and turned into two
independent standard normals. One is returned, the other is kept as a spare
for the next call.

>>> from copulit.sampling import NumpyUniformSource
>>> sampler = StandardNormalSampler(NumpyUniformSource(random_state=0))
>>> sampler.has_spare
False
>>> _ = sampler.draw()
>>> sampler.has_spare
True
>>> _ = sampler.draw()
>>> sampler.has_spare
False
"""

import math

from copulit.distributions import _validate_normal_parameters
from copulit.exceptions import require
from copulit.math import TWO_LN_TWO, exp, ilogb
from copulit.sampling import Sampler
from copulit.types import UniformSource

# Below this, u * u + v * v is recomputed from rescaled u and v
SMALL_RADIUS_SQUARED = 1e-4


class StandardNormalSampler(Sampler):
    """Draws standard normal variates from a uniform source."""

    def __init__(self, source: UniformSource):
        self.source = require(source, "source")
        self.spare: float | None = None

    @property
    def has_spare(self) -> bool:
        return self.spare is not None

    def draw(self) -> float:
        if self.spare is not None:
            spare, self.spare = self.spare, None
            return spare

        source = self.source
        while True:
            u = 2.0 * source.next() - 1.0
            v = 2.0 * source.next() - 1.0
            s = u * u + v * v
            if s < 1.0 and u != 0.0 and v != 0.0:
                break

        if s > SMALL_RADIUS_SQUARED:
            log_s = math.log(s)
        else:
            # Scale by a power of two so squaring cannot underflow
            exponent = -ilogb(max(abs(u), abs(v)))
            u = math.ldexp(u, exponent)
            v = math.ldexp(v, exponent)
            s = u * u + v * v
            log_s = math.log(s) - exponent * TWO_LN_TWO

        f = math.sqrt(-2.0 * log_s / s)
        self.spare = f * v
        return f * u

    def fill(self, buffer) -> None:
        """Overwrite every element of a mutable buffer with fresh draws."""
        for i in range(len(buffer)):
            buffer[i] = self.draw()


class LogNormalSampler(Sampler):
    """Draws exp(mu + sigma * Z) with Z standard normal.

    >>> from copulit.sampling import NumpyUniformSource
    >>> sampler = LogNormalSampler(NumpyUniformSource(random_state=0), mu=0, sigma=1)
    >>> sampler.draw() > 0
    True
    """

    def __init__(self, source: UniformSource, mu: float, sigma: float):
        require(source, "source")
        _validate_normal_parameters(mu, sigma)
        self.mu = mu
        self.sigma = sigma
        self.standard_normal = StandardNormalSampler(source)

    def draw(self) -> float:
        return exp(self.mu + self.sigma * self.standard_normal.draw())


if __name__ == "__main__":
    import pytest

    pytest.main(args=[__file__, "--doctest-modules", "-v", "--capture=sys"])
