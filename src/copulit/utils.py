from collections.abc import Iterable, Sequence

import numpy as np

from copulit.types import Array2D


def linear_interpolate(x0: float, x1: float, y0: float, y1: float, x: float) -> float:
    """Evaluate the line through (x0, y0) and (x1, y1) at x.

    Examples
    --------
    >>> linear_interpolate(1.0, 2.0, 0.0, 0.5, 1.5)
    0.25
    """
    slope = (y1 - y0) / (x1 - x0)
    return y0 + slope * (x - x0)


def is_strictly_increasing(values: Sequence[float]) -> bool:
    """
    Examples
    --------
    >>> is_strictly_increasing([1, 2, 3])
    True
    >>> is_strictly_increasing([1, 1, 3])
    False
    """
    return all(a < b for (a, b) in zip(values, values[1:]))


def build_corrmat(
    correlations: Iterable[tuple[tuple[int, ...], Array2D]], size: int | None = None
) -> Array2D:
    """Given a list of [(indices1, corrmat1), (indices2, corrmat2), ...],
    create a big correlation matrix of shape (size, size).

    Examples
    --------
    >>> correlations = [((0, 2), np.array([[1, 0.5], [0.5, 1]]))]
    >>> build_corrmat(correlations)
    array([[1. , 0. , 0.5],
           [0. , 1. , 0. ],
           [0.5, 0. , 1. ]])
    >>> build_corrmat([], size=2)
    array([[1., 0.],
           [0., 1.]])
    """
    # TODO: If no correlation is given, we implicitly assume zero.
    # For instance, if no correlation between indices (0, 3) is given
    # in the input data, then C[0, 3] = C[3, 0] = 0.0, which is strictly
    # speaking not the same (no preference vs. preference for 0 corr)
    correlations = list(correlations)
    if size is None:
        size = max(max(idx) for (idx, _) in correlations) + 1
    C = np.eye(size, dtype=float)

    for idx_i, corrmat_i in correlations:
        C[np.ix_(idx_i, idx_i)] = corrmat_i

    return C


if __name__ == "__main__":
    import pytest

    pytest.main(args=[__file__, "--doctest-modules", "-v", "--capture=sys"])
