"""
Packed Cholesky factorization of correlation and covariance matrices.

The lower triangular factor L with L @ L.T == A is stored row-major in a flat
array. Row i holds the i + 1 entries L[i, 0], ..., L[i, i] and starts at
offset(i) = i * (i + 1) / 2:

>>> factor = packed_cholesky_factor_correlation_matrix([[1.0, 0.6], [0.6, 1.0]])
>>> factor.values
array([1. , 0.6, 0.8])
>>> factor.row(1)
array([0.6, 0.8])
>>> factor.to_dense()
array([[1. , 0. ],
       [0.6, 0.8]])

Cheap structural checks run first. Positive definiteness is only discovered
by the factorization itself:

>>> packed_cholesky_factor_covariance_matrix([[1.0, 1.0], [1.0, 1.0]])
Traceback (most recent call last):
...
copulit.exceptions.NotPositiveDefiniteError: Expected a positive definite matrix, pivot 1 is 0.0
"""

import dataclasses
import logging
import math
import numbers

import numpy as np

from copulit.exceptions import (
    InvalidMatrixError,
    NotPositiveDefiniteError,
    require,
)
from copulit.types import Array1D, Array2D, MatrixKind

logger = logging.getLogger(__name__)


def offset(i: int) -> int:
    """Index of the first entry of row i in packed storage.

    >>> [offset(i) for i in range(5)]
    [0, 1, 3, 6, 10]
    """
    return i * (i + 1) // 2


def packed_size(order: int) -> int:
    return offset(order)


@dataclasses.dataclass(frozen=True, eq=False)
class PackedCholeskyFactor:
    """An immutable lower triangular factor in packed row-major storage.

    `kind` records whether the factorized matrix was a correlation or a
    covariance matrix. A correlation factor has rows of unit length.

    Examples
    --------
    >>> PackedCholeskyFactor(order=2, values=[2.0, 1.0, 1.0]).kind
    'covariance'
    >>> PackedCholeskyFactor(order=2, values=[1.0, 0.0, 0.0])
    Traceback (most recent call last):
    ...
    copulit.exceptions.InvalidMatrixError: Diagonal entries must be positive, got L[1, 1]=0.0
    """

    order: int
    values: Array1D
    kind: MatrixKind = "covariance"

    def __post_init__(self):
        if isinstance(self.order, bool) or not isinstance(self.order, numbers.Integral):
            raise InvalidMatrixError(f"Order must be an integer, got order={self.order!r}")
        if self.order < 1:
            raise InvalidMatrixError(f"Order must be at least 1, got order={self.order}")
        if self.kind not in ("correlation", "covariance"):
            raise InvalidMatrixError(f"Unknown matrix kind {self.kind!r}")
        order = int(self.order)

        values = np.array(self.values, dtype=float)
        if values.shape != (packed_size(order),):
            raise InvalidMatrixError(
                f"A packed factor of order {order} has {packed_size(order)}"
                f" entries, got shape {values.shape}"
            )
        if not np.all(np.isfinite(values)):
            raise InvalidMatrixError("Factor values must be finite")

        for i in range(order):
            diagonal = values[offset(i) + i]
            if not diagonal > 0:
                raise InvalidMatrixError(
                    f"Diagonal entries must be positive, got L[{i}, {i}]={diagonal}"
                )
            if self.kind == "correlation":
                row = values[offset(i) : offset(i) + i + 1]
                norm = float(np.dot(row, row))
                if not math.isclose(norm, 1.0, rel_tol=1e-9):
                    raise InvalidMatrixError(
                        f"Rows of a correlation factor must have unit length, "
                        f"row {i} has squared length {norm}"
                    )

        values.flags.writeable = False
        object.__setattr__(self, "order", order)
        object.__setattr__(self, "values", values)

    def __len__(self):
        return self.order

    def row(self, i: int) -> Array1D:
        """The i + 1 stored entries of row i (a read-only view)."""
        if not 0 <= i < self.order:
            raise IndexError(f"Row {i} out of range for order {self.order}")
        start = offset(i)
        return self.values[start : start + i + 1]

    def to_dense(self) -> Array2D:
        """Unpack into a square lower triangular matrix."""
        L = np.zeros((self.order, self.order), dtype=float)
        L[np.tril_indices(self.order)] = self.values
        return L


# =============================================================================
# VALIDATION
# =============================================================================


def _as_matrix(matrix) -> Array2D:
    require(matrix, "matrix")
    try:
        matrix = np.array(matrix, dtype=float)
    except (TypeError, ValueError) as err:
        raise InvalidMatrixError(f"Matrix must be a 2D array of numbers: {err}") from err
    return matrix


def check_dimensions(matrix: Array2D) -> None:
    """The matrix must be 2D, square and non-empty."""
    if matrix.ndim != 2:
        raise InvalidMatrixError(f"Matrix must be 2D, got {matrix.ndim=}")
    rows, columns = matrix.shape
    if rows != columns:
        raise InvalidMatrixError(f"Matrix must be square, got shape {matrix.shape}")
    if rows < 1:
        raise InvalidMatrixError("Matrix must not be empty")


def check_correlation_values(matrix: Array2D) -> None:
    """Symmetric, off-diagonal entries in [-1, 1] and a unit diagonal."""
    for r in range(matrix.shape[0]):
        for c in range(r):
            corr = matrix[r, c]
            # NaN fails every comparison, so it is caught by the `not`
            if not (-1.0 <= corr <= 1.0) or corr != matrix[c, r]:
                raise InvalidMatrixError(
                    f"Matrix must be symmetric with values in [-1, 1], got "
                    f"matrix[{r}, {c}]={corr} and matrix[{c}, {r}]={matrix[c, r]}"
                )

        if matrix[r, r] != 1.0:
            raise InvalidMatrixError(
                f"Diagonal values must equal 1.0, got matrix[{r}, {r}]={matrix[r, r]}"
            )


def check_covariance_values(matrix: Array2D) -> None:
    """Symmetric, finite entries and a strictly positive diagonal."""
    for r in range(matrix.shape[0]):
        for c in range(r):
            cov = matrix[r, c]
            if not math.isfinite(cov) or cov != matrix[c, r]:
                raise InvalidMatrixError(
                    f"Matrix must be symmetric with finite values, got "
                    f"matrix[{r}, {c}]={cov} and matrix[{c}, {r}]={matrix[c, r]}"
                )

        variance = matrix[r, r]
        if not (math.isfinite(variance) and variance > 0):
            raise InvalidMatrixError(
                f"Diagonal values must be positive and finite, got "
                f"matrix[{r}, {r}]={variance}"
            )


# =============================================================================
# FACTORIZATION
# =============================================================================


def packed_cholesky_decomposition(matrix: Array2D) -> Array1D:
    """Cholesky decomposition of a validated square matrix into packed storage.

    Only the lower triangle of `matrix` is read.
    """
    order = matrix.shape[0]
    result = np.zeros(packed_size(order), dtype=float)

    for i in range(order):
        row_i = result[offset(i) : offset(i) + i + 1]
        for j in range(i):
            row_j = result[offset(j) : offset(j) + j + 1]
            total = float(np.dot(row_i[:j], row_j[:j]))
            row_i[j] = (matrix[i, j] - total) / row_j[j]

        radicand = matrix[i, i] - float(np.dot(row_i[:i], row_i[:i]))
        if not (math.isfinite(radicand) and radicand > 0):
            raise NotPositiveDefiniteError(
                f"Expected a positive definite matrix, pivot {i} is {radicand}"
            )
        row_i[i] = math.sqrt(radicand)

    return result


def packed_cholesky_factor(matrix, kind: MatrixKind = "correlation") -> PackedCholeskyFactor:
    """Validate a correlation or covariance matrix and factorize it."""
    matrix = _as_matrix(matrix)
    check_dimensions(matrix)
    if kind == "correlation":
        check_correlation_values(matrix)
    elif kind == "covariance":
        check_covariance_values(matrix)
    else:
        raise ValueError(f"Unknown matrix kind {kind!r}")

    values = packed_cholesky_decomposition(matrix)
    logger.debug("Factorized %d x %d %s matrix", *matrix.shape, kind)
    return PackedCholeskyFactor(order=matrix.shape[0], values=values, kind=kind)


def packed_cholesky_factor_correlation_matrix(matrix) -> PackedCholeskyFactor:
    """Packed Cholesky factor of a correlation matrix."""
    return packed_cholesky_factor(matrix, kind="correlation")


def packed_cholesky_factor_covariance_matrix(matrix) -> PackedCholeskyFactor:
    """Packed Cholesky factor of a covariance matrix."""
    return packed_cholesky_factor(matrix, kind="covariance")


if __name__ == "__main__":
    import pytest

    pytest.main(args=[__file__, "--doctest-modules", "-v", "--capture=sys"])
