from copulit.distributions import (
    Distribution,
    ContinuousDistribution,
    NormalDistribution,
    StandardNormalDistribution,
    LogNormalDistribution,
    UniformRealDistribution,
    StandardUniformDistribution,
    PiecewiseConstantDistribution,
)
from copulit.cholesky import (
    PackedCholeskyFactor,
    packed_cholesky_factor_correlation_matrix,
    packed_cholesky_factor_covariance_matrix,
)
from copulit.correlation import (
    GaussianCopulaBuilder,
    GaussianCopulaSampler,
    MultivariateNormalBuilder,
    MultivariateNormalSampler,
)
from copulit.exceptions import (
    CopulitError,
    InvalidMatrixError,
    InvalidParameterError,
    InvalidProbabilityError,
    MissingArgumentError,
    NotPositiveDefiniteError,
)
from copulit.quantiles import quantile
from copulit.samplers import LogNormalSampler, StandardNormalSampler
from copulit.sampling import NumpyUniformSource, Sampler, sample


__all__ = [
    # Distributions
    "Distribution",
    "ContinuousDistribution",
    "NormalDistribution",
    "StandardNormalDistribution",
    "LogNormalDistribution",
    "UniformRealDistribution",
    "StandardUniformDistribution",
    "PiecewiseConstantDistribution",
    "quantile",
    # Factorization
    "PackedCholeskyFactor",
    "packed_cholesky_factor_correlation_matrix",
    "packed_cholesky_factor_covariance_matrix",
    # Samplers
    "Sampler",
    "NumpyUniformSource",
    "StandardNormalSampler",
    "LogNormalSampler",
    "GaussianCopulaBuilder",
    "GaussianCopulaSampler",
    "MultivariateNormalBuilder",
    "MultivariateNormalSampler",
    # Functional stuff
    "sample",
    # Errors
    "CopulitError",
    "InvalidParameterError",
    "InvalidProbabilityError",
    "InvalidMatrixError",
    "NotPositiveDefiniteError",
    "MissingArgumentError",
]
