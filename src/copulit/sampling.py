"""
Samplers draw one variate (a float or a vector) per call to `draw()`, pulling
randomness from a uniform source. Any object with a `next()` method returning
floats on [0, 1) qualifies; `NumpyUniformSource` adapts a numpy Generator:

>>> source = NumpyUniformSource(random_state=42)
>>> 0.0 <= source.next() < 1.0
True

Use `sample` to draw many variates at once:

>>> from copulit.samplers import StandardNormalSampler
>>> sample(StandardNormalSampler(source), 4).shape
(4,)
"""

import abc
import numbers

import numpy as np

from copulit.exceptions import InvalidParameterError, require


class Sampler(abc.ABC):
    """A stateful producer of random variates.

    Samplers hold mutable state and are not safe to share between threads.
    Use one sampler per stream of draws.
    """

    @abc.abstractmethod
    def draw(self):
        """Draw the next variate."""


class NumpyUniformSource:
    """Uniform source on [0, 1) backed by `numpy.random.default_rng`.

    Draws are generated in blocks of `block_size` and handed out one by one.
    """

    def __init__(self, random_state=None, block_size=4096):
        if not isinstance(block_size, numbers.Integral):
            raise TypeError("`block_size` must be a positive integer")
        if not block_size > 0:
            raise InvalidParameterError("`block_size` must be a positive integer")
        self.rng = np.random.default_rng(random_state)
        self.block_size = int(block_size)
        self._block = np.empty(0)
        self._position = 0

    def next(self) -> float:
        if self._position == len(self._block):
            self._block = self.rng.random(self.block_size)
            self._position = 0
        value = self._block[self._position]
        self._position += 1
        return float(value)


def sample(sampler: Sampler, size: int) -> np.ndarray:
    """Draw `size` variates from `sampler`.

    Returns an array of shape (size,) for scalar samplers and (size, order)
    for vector samplers. A size of zero gives an empty array.
    """
    require(sampler, "sampler")
    if not isinstance(size, numbers.Integral):
        raise TypeError("`size` must be a non-negative integer")
    if size < 0:
        raise InvalidParameterError(f"`size` must be a non-negative integer, got {size=}")

    order = getattr(sampler, "order", None)
    shape = (size,) if order is None else (size, order)
    result = np.empty(shape, dtype=float)
    for i in range(size):
        result[i] = sampler.draw()
    return result


if __name__ == "__main__":
    import pytest

    pytest.main(args=[__file__, "--doctest-modules", "-v", "--capture=sys"])
