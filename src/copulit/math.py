"""
Scalar numeric primitives shared by distributions and samplers.

The error function and its inverse come from scipy.special:

>>> erf(0.0)
0.0
>>> erfinv(0.0)
0.0
>>> erfinv(1.0)
inf

`fma` rounds once:

>>> fma(2.0, 0.25, 1.0)
1.5
>>> fma(0.1, 10.0, -1.0) == 0.1 * 10.0 - 1.0
False
"""

import math
from fractions import Fraction

import scipy as sp

SQRT_TWO = math.sqrt(2.0)
SQRT_TWO_PI = math.sqrt(2.0 * math.pi)
TWO_LN_TWO = 2.0 * math.log(2.0)


def erf(x: float) -> float:
    return float(sp.special.erf(x))


def erfinv(y: float) -> float:
    return float(sp.special.erfinv(y))


def fma(x: float, y: float, z: float) -> float:
    """Compute x * y + z with a single rounding."""
    if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(z)):
        return x * y + z
    # Integer true division is correctly rounded
    return float(Fraction(x) * Fraction(y) + Fraction(z))


def exp(x: float) -> float:
    """math.exp, returning inf instead of raising on overflow.

    >>> exp(1000.0)
    inf
    """
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def ilogb(x: float) -> int:
    """Unbiased binary exponent of a finite, non-zero x.

    >>> ilogb(1.0), ilogb(0.75), ilogb(2.0**-60)
    (0, -1, -60)
    """
    _, exponent = math.frexp(x)
    return exponent - 1


if __name__ == "__main__":
    import pytest

    pytest.main(args=[__file__, "--doctest-modules", "-v", "--capture=sys"])
