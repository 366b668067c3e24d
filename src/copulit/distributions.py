"""
Copulit distributions are small immutable value objects. Each one exposes
the same four functions:

  - `density(x)` and `density_ln(x)`
  - `cumulative_distribution(x)`
  - `quantile(p)`, defined for p in [0, 1]

>>> uniform = UniformRealDistribution(min=0, max=2)
>>> uniform
UniformRealDistribution(min=0, max=2)
>>> uniform.density(1), uniform.density(3)
(0.5, 0.0)
>>> uniform.quantile(0.5)
1.0

Quantiles outside [0, 1] are rejected:

>>> StandardUniformDistribution().quantile(1.1)
Traceback (most recent call last):
...
copulit.exceptions.InvalidProbabilityError: Probability must be in [0, 1], got p=1.1

Densities and cumulative distributions are total functions. Arguments outside
the support give 0 (or -inf on the log scale) and NaN propagates:

>>> lognormal = LogNormalDistribution(mu=0, sigma=1)
>>> lognormal.density(-1.0), lognormal.density_ln(0.0)
(0.0, -inf)
>>> lognormal.cumulative_distribution(float("nan"))
nan

The piecewise constant distribution is built from boundaries and weights:

>>> distr = PiecewiseConstantDistribution.create([1, 2, 3], [1, 1])
>>> distr.cumulative_distribution(2.5)
0.75
>>> distr.quantile(0.25)
1.5
"""

import abc
import bisect
import dataclasses
import math

from copulit.exceptions import InvalidParameterError, InvalidProbabilityError
from copulit.math import SQRT_TWO, SQRT_TWO_PI, erf, erfinv, exp, fma
from copulit.utils import is_strictly_increasing, linear_interpolate


def check_probability(p):
    """Raise InvalidProbabilityError unless 0 <= p <= 1 (NaN is rejected)."""
    if not 0.0 <= p <= 1.0:
        raise InvalidProbabilityError(f"Probability must be in [0, 1], got {p=}")


def _validate_normal_parameters(mu, sigma):
    if not math.isfinite(mu):
        raise InvalidParameterError(f"mu must be finite, got {mu=}")
    if not (math.isfinite(sigma) and sigma > 0):
        raise InvalidParameterError(f"sigma must be positive and finite, got {sigma=}")


class Distribution(abc.ABC):
    """A univariate distribution over the reals."""

    @abc.abstractmethod
    def density(self, x: float) -> float:
        """Probability density at x."""

    @abc.abstractmethod
    def density_ln(self, x: float) -> float:
        """Natural logarithm of the probability density at x."""

    @abc.abstractmethod
    def cumulative_distribution(self, x: float) -> float:
        """Probability that a draw is less than or equal to x."""

    @abc.abstractmethod
    def quantile(self, probability: float) -> float:
        """Generalized inverse of the cumulative distribution."""


class ContinuousDistribution(Distribution):
    """A distribution with known first and second moments."""

    @property
    @abc.abstractmethod
    def mean(self) -> float: ...

    @property
    @abc.abstractmethod
    def variance(self) -> float: ...

    @property
    def standard_deviation(self) -> float:
        return math.sqrt(self.variance)


@dataclasses.dataclass(frozen=True)
class NormalDistribution(ContinuousDistribution):
    """Normal distribution parametrized by mean (mu) and std (sigma).

    Examples
    --------
    >>> normal = NormalDistribution(mu=1.0, sigma=2.0)
    >>> normal.cumulative_distribution(1.0)
    0.5
    >>> normal.quantile(0.5)
    1.0
    >>> normal.quantile(0.0), normal.quantile(1.0)
    (-inf, inf)
    >>> NormalDistribution(mu=0, sigma=0)
    Traceback (most recent call last):
    ...
    copulit.exceptions.InvalidParameterError: sigma must be positive and finite, got sigma=0
    """

    mu: float
    sigma: float

    def __post_init__(self):
        _validate_normal_parameters(self.mu, self.sigma)

    @property
    def mean(self) -> float:
        return self.mu

    @property
    def variance(self) -> float:
        return self.sigma * self.sigma

    @property
    def standard_deviation(self) -> float:
        return self.sigma

    def density(self, x: float) -> float:
        z = (x - self.mu) / self.sigma
        return math.exp(-0.5 * z * z) / (self.sigma * SQRT_TWO_PI)

    def density_ln(self, x: float) -> float:
        z = (x - self.mu) / self.sigma
        return -0.5 * z * z - math.log(self.sigma * SQRT_TWO_PI)

    def cumulative_distribution(self, x: float) -> float:
        return 0.5 + 0.5 * erf((x - self.mu) / (self.sigma * SQRT_TWO))

    def quantile(self, probability: float) -> float:
        check_probability(probability)
        return self.mu + self.sigma * SQRT_TWO * erfinv(2.0 * probability - 1.0)


@dataclasses.dataclass(frozen=True)
class StandardNormalDistribution(ContinuousDistribution):
    """The normal distribution with mu=0 and sigma=1. Carries no state."""

    mean = 0.0
    variance = 1.0
    standard_deviation = 1.0

    @staticmethod
    def density_function(x: float) -> float:
        return math.exp(-0.5 * x * x) / SQRT_TWO_PI

    @staticmethod
    def cumulative_distribution_function(x: float) -> float:
        """Standard normal CDF, Phi(x).

        >>> StandardNormalDistribution.cumulative_distribution_function(0.0)
        0.5
        """
        return 0.5 + 0.5 * erf(x / SQRT_TWO)

    @staticmethod
    def quantile_function(probability: float) -> float:
        check_probability(probability)
        return SQRT_TWO * erfinv(2.0 * probability - 1.0)

    def density(self, x: float) -> float:
        return self.density_function(x)

    def density_ln(self, x: float) -> float:
        return -0.5 * x * x - math.log(SQRT_TWO_PI)

    def cumulative_distribution(self, x: float) -> float:
        return self.cumulative_distribution_function(x)

    def quantile(self, probability: float) -> float:
        return self.quantile_function(probability)


@dataclasses.dataclass(frozen=True)
class LogNormalDistribution(ContinuousDistribution):
    """A distribution whose logarithm is Normal(mu, sigma).

    Examples
    --------
    >>> lognormal = LogNormalDistribution(mu=0.0, sigma=1.0)
    >>> lognormal.quantile(0.5)
    1.0
    >>> lognormal.cumulative_distribution(1.0)
    0.5
    >>> lognormal.quantile(0.0), lognormal.quantile(1.0)
    (0.0, inf)
    """

    mu: float
    sigma: float

    def __post_init__(self):
        _validate_normal_parameters(self.mu, self.sigma)

    @classmethod
    def from_moments(cls, mean, std):
        """
        Create a lognormal distribution with mean and std corresponding
        directly to the expected value and standard deviation of the
        resulting lognormal.

        Examples
        --------
        >>> distr = LogNormalDistribution.from_moments(mean=2.0, std=1.0)
        >>> round(distr.mean, 12), round(distr.standard_deviation, 12)
        (2.0, 1.0)
        """
        if not (math.isfinite(mean) and mean > 0):
            raise InvalidParameterError(f"mean must be positive and finite, got {mean=}")
        if not (math.isfinite(std) and std > 0):
            raise InvalidParameterError(f"std must be positive and finite, got {std=}")
        sigma_squared = math.log1p((std / mean) ** 2)
        return cls(mu=math.log(mean) - sigma_squared / 2, sigma=math.sqrt(sigma_squared))

    @property
    def mean(self) -> float:
        return exp(self.mu + self.sigma * self.sigma / 2.0)

    @property
    def variance(self) -> float:
        v = self.sigma * self.sigma
        return math.expm1(v) * exp(2.0 * self.mu + v)

    def density(self, x: float) -> float:
        if x <= 0.0:
            return 0.0
        z = (math.log(x) - self.mu) / self.sigma
        return math.exp(-0.5 * z * z) / (x * self.sigma * SQRT_TWO_PI)

    def density_ln(self, x: float) -> float:
        if x <= 0.0:
            return -math.inf
        z = (math.log(x) - self.mu) / self.sigma
        return -0.5 * z * z - math.log(x * self.sigma * SQRT_TWO_PI)

    def cumulative_distribution(self, x: float) -> float:
        if x <= 0.0:
            return 0.0
        return 0.5 + 0.5 * erf((math.log(x) - self.mu) / (SQRT_TWO * self.sigma))

    def quantile(self, probability: float) -> float:
        check_probability(probability)
        return exp(self.mu + SQRT_TWO * self.sigma * erfinv(2.0 * probability - 1.0))


@dataclasses.dataclass(frozen=True)
class UniformRealDistribution(ContinuousDistribution):
    """Uniform distribution on [min, max]."""

    min: float
    max: float

    def __post_init__(self):
        if not math.isfinite(self.min):
            raise InvalidParameterError(f"min must be finite, got min={self.min}")
        if not math.isfinite(self.max):
            raise InvalidParameterError(f"max must be finite, got max={self.max}")
        if not self.min < self.max:
            raise InvalidParameterError(f"Must have min < max, got {self.min} >= {self.max}")

    @property
    def mean(self) -> float:
        return (self.max + self.min) / 2.0

    @property
    def variance(self) -> float:
        width = self.max - self.min
        return width * width / 12.0

    def density(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        if x < self.min or x > self.max:
            return 0.0
        return 1.0 / (self.max - self.min)

    def density_ln(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        if x < self.min or x > self.max:
            return -math.inf
        return -math.log(self.max - self.min)

    def cumulative_distribution(self, x: float) -> float:
        if x <= self.min:
            return 0.0
        if x >= self.max:
            return 1.0
        return (x - self.min) / (self.max - self.min)

    def quantile(self, probability: float) -> float:
        check_probability(probability)
        return fma(self.max - self.min, probability, self.min)


@dataclasses.dataclass(frozen=True)
class StandardUniformDistribution(ContinuousDistribution):
    """Uniform distribution on [0, 1]. Carries no state, so all instances
    are interchangeable.

    >>> StandardUniformDistribution() == StandardUniformDistribution()
    True
    >>> StandardUniformDistribution().quantile(0.123)
    0.123
    """

    mean = 0.5
    variance = 1.0 / 12.0

    @staticmethod
    def cumulative_distribution_function(x: float) -> float:
        if x <= 0.0:
            return 0.0
        if x >= 1.0:
            return 1.0
        return x

    def density(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        return 1.0 if 0.0 <= x <= 1.0 else 0.0

    def density_ln(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        return 0.0 if 0.0 <= x <= 1.0 else -math.inf

    def cumulative_distribution(self, x: float) -> float:
        return self.cumulative_distribution_function(x)

    def quantile(self, probability: float) -> float:
        check_probability(probability)
        return float(probability)


@dataclasses.dataclass(frozen=True)
class PiecewiseConstantDistribution(ContinuousDistribution):
    """A histogram-like distribution: the density is constant between
    consecutive boundaries, proportional to the weight of that interval.

    Examples
    --------
    >>> distr = PiecewiseConstantDistribution.create([0, 1, 3], [1, 1])
    >>> distr.cumulative_probabilities
    (0.0, 0.5, 1.0)
    >>> distr.density(0.5), distr.density(2.0)
    (0.5, 0.25)
    >>> PiecewiseConstantDistribution.create([1, 1], [1])
    Traceback (most recent call last):
    ...
    copulit.exceptions.InvalidParameterError: Boundaries must be strictly increasing
    """

    boundaries: tuple
    weights: tuple
    cumulative_probabilities: tuple = dataclasses.field(init=False, repr=False)

    def __post_init__(self):
        boundaries = tuple(float(b) for b in self.boundaries)
        weights = tuple(float(w) for w in self.weights)

        if len(boundaries) < 2:
            raise InvalidParameterError("Require at least two boundaries")
        if len(boundaries) != len(weights) + 1:
            raise InvalidParameterError(
                f"Expected {len(boundaries) - 1} weights for {len(boundaries)} "
                f"boundaries, got {len(weights)}"
            )
        if not all(math.isfinite(b) for b in boundaries):
            raise InvalidParameterError("Boundaries must be finite")
        if not is_strictly_increasing(boundaries):
            raise InvalidParameterError("Boundaries must be strictly increasing")
        if not all(math.isfinite(w) and w >= 0 for w in weights):
            raise InvalidParameterError("Weights must be finite and non-negative")

        # Prefix sum with a leading zero, normalized by the total
        cumulative = [0.0]
        for weight in weights:
            cumulative.append(cumulative[-1] + weight)
        total = cumulative[-1]
        if total <= 0:
            raise InvalidParameterError("Weights must not all be zero")

        object.__setattr__(self, "boundaries", boundaries)
        object.__setattr__(self, "weights", weights)
        object.__setattr__(
            self, "cumulative_probabilities", tuple(c / total for c in cumulative)
        )

    @classmethod
    def create(cls, boundaries, weights):
        """Create from n boundaries and n - 1 interval weights."""
        return cls(tuple(boundaries), tuple(weights))

    def _interval_probabilities(self):
        cp = self.cumulative_probabilities
        return [cp[i + 1] - cp[i] for i in range(len(cp) - 1)]

    @property
    def mean(self) -> float:
        b = self.boundaries
        return sum(
            p * (b[i] + b[i + 1]) / 2.0
            for i, p in enumerate(self._interval_probabilities())
        )

    @property
    def variance(self) -> float:
        b = self.boundaries
        second_moment = sum(
            p * (b[i] * b[i] + b[i] * b[i + 1] + b[i + 1] * b[i + 1]) / 3.0
            for i, p in enumerate(self._interval_probabilities())
        )
        return max(second_moment - self.mean**2, 0.0)

    def density(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        b = self.boundaries
        if x < b[0] or x > b[-1]:
            return 0.0
        # Intervals are closed on the left, the last one on both sides
        i = min(bisect.bisect_right(b, x), len(b) - 1)
        cp = self.cumulative_probabilities
        return (cp[i] - cp[i - 1]) / (b[i] - b[i - 1])

    def density_ln(self, x: float) -> float:
        density = self.density(x)
        if math.isnan(density):
            return math.nan
        return math.log(density) if density > 0 else -math.inf

    def cumulative_distribution(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        b = self.boundaries
        cp = self.cumulative_probabilities
        if x <= b[0]:
            return 0.0
        if x >= b[-1]:
            return 1.0

        i = bisect.bisect_left(b, x)
        if b[i] == x:
            return cp[i]
        return linear_interpolate(b[i - 1], b[i], cp[i - 1], cp[i], x)

    def quantile(self, probability: float) -> float:
        check_probability(probability)
        b = self.boundaries
        cp = self.cumulative_probabilities

        # First cumulative probability that reaches `probability`
        i = bisect.bisect_left(cp, probability)
        if cp[i] == probability:
            return b[i]
        return linear_interpolate(cp[i - 1], cp[i], b[i - 1], b[i], probability)


if __name__ == "__main__":
    import pytest

    pytest.main(args=[__file__, "--doctest-modules", "-v", "--capture=sys"])
