"""
Exceptions raised by copulit.

Every exception also derives from the builtin a caller would expect, so code
that catches ``ValueError`` (or ``TypeError`` for missing arguments) keeps
working:

>>> issubclass(InvalidProbabilityError, ValueError)
True
>>> issubclass(NotPositiveDefiniteError, InvalidMatrixError)
False
"""


class CopulitError(Exception):
    """Base class for all copulit errors."""


class InvalidParameterError(CopulitError, ValueError):
    """A constructor or function argument is non-finite or out of domain."""


class InvalidProbabilityError(CopulitError, ValueError):
    """A probability passed to a quantile function is outside [0, 1]."""


class InvalidMatrixError(CopulitError, ValueError):
    """A correlation or covariance matrix failed a structural check."""


class NotPositiveDefiniteError(CopulitError, ValueError):
    """The Cholesky factorization met a non-positive or non-finite pivot."""


class MissingArgumentError(CopulitError, TypeError):
    """A required argument was None."""


def require(value, name):
    """Return `value`, raising MissingArgumentError if it is None.

    >>> require(3, "order")
    3
    >>> require(None, "source")
    Traceback (most recent call last):
    ...
    copulit.exceptions.MissingArgumentError: `source` must not be None
    """
    if value is None:
        raise MissingArgumentError(f"`{name}` must not be None")
    return value
