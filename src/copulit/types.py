from typing import Literal, Protocol, runtime_checkable

import numpy as np

Array1D = np.ndarray[tuple[int], np.dtype[np.float64]]
Array2D = np.ndarray[tuple[int, int], np.dtype[np.float64]]
MatrixKind = Literal["correlation", "covariance"]
DistributionType = Literal[
    "normal",
    "lognormal",
    "uniform",
    "standarduniform",
    "piecewiseconstant",
]


@runtime_checkable
class UniformSource(Protocol):
    """Anything producing independent draws uniformly distributed on [0, 1)
    (or [0, 1]) through a single method."""

    def next(self) -> float: ...
