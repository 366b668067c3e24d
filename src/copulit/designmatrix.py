"""
Create a design matrix (a table of correlated random samples) from a config.

A config has three sections. `metadata` sets the number of samples and the
seed, `variables` names the marginal distributions and `correlations` lists
pairwise correlations, each as a mapping {value: [name1, name2]}:

>>> config = {
...     "metadata": {"samples": 500, "seed": 42},
...     "variables": {
...         "porosity": {"type": "normal", "mu": 0.2, "sigma": 0.02},
...         "thickness": {"type": "uniform", "min": 10, "max": 30},
...         "permeability": {"type": "lognormal", "mu": 3.0, "sigma": 0.5},
...     },
...     "correlations": [{0.7: ["porosity", "permeability"]}],
... }
>>> df = design_matrix(config)
>>> df.shape
(500, 3)
>>> list(df.columns)
['porosity', 'thickness', 'permeability']

Samples are drawn from a Gaussian copula and pushed through the quantile
function of every marginal, so the correlations are imposed on the ranks.
"""

import argparse
import logging

import pandas as pd
import scipy as sp
import yaml

from copulit.correlation import GaussianCopulaBuilder
from copulit.distributions import (
    LogNormalDistribution,
    NormalDistribution,
    PiecewiseConstantDistribution,
    StandardUniformDistribution,
    UniformRealDistribution,
)
from copulit.exceptions import InvalidParameterError
from copulit.quantiles import quantile
from copulit.sampling import NumpyUniformSource, sample
from copulit.types import DistributionType
from copulit.utils import build_corrmat

logger = logging.getLogger(__name__)

TYPE_MAPPING: dict[DistributionType, type] = {
    "normal": NormalDistribution,
    "lognormal": LogNormalDistribution,
    "uniform": UniformRealDistribution,
    "standarduniform": StandardUniformDistribution,
    "piecewiseconstant": PiecewiseConstantDistribution,
}


def create_distribution(vardata):
    """Create a distribution from a dict like {"type": "normal", "mu": 0, ...}.

    >>> create_distribution({"type": "Normal", "mu": 0, "sigma": 1})
    NormalDistribution(mu=0, sigma=1)
    """
    vardata = dict(vardata)
    var_type = str(vardata.pop("type")).lower()
    if var_type not in TYPE_MAPPING:
        raise InvalidParameterError(
            f"Unknown distribution type {var_type!r}, expected one of {sorted(TYPE_MAPPING)}"
        )
    return TYPE_MAPPING[var_type](**vardata)


def design_matrix(config):
    """Given a dictionary config, returns a dataframe with samples."""

    # Load sections of the dictionary as variables
    metadata = config["metadata"]
    variables = config["variables"]
    correlations = config.get("correlations") or []

    # =================== CONVERT ===================

    # Convert dict of {name:data, ...} to {name:Distribution, ...}
    distributions = {
        varname: create_distribution(vardata) for (varname, vardata) in variables.items()
    }
    index = {varname: i for (i, varname) in enumerate(distributions)}

    # =================== CORRELATIONS ===================

    pairs = []
    for correlation in correlations:
        value, (varname1, varname2) = next(iter(correlation.items()))
        for varname in (varname1, varname2):
            if varname not in index:
                raise InvalidParameterError(f"Unknown variable {varname!r} in correlations")
        if varname1 == varname2:
            raise InvalidParameterError(
                f"Cannot correlate {varname1!r} with itself in correlations"
            )

        corr_mat = sp.linalg.circulant([1.0, float(value)])
        pairs.append(((index[varname1], index[varname2]), corr_mat))

    corr_mat = build_corrmat(pairs, size=len(distributions))
    logger.debug("Correlation matrix:\n%s", corr_mat)

    # =================== SAMPLE ===================

    builder = GaussianCopulaBuilder(corr_mat)
    sampler = builder.build(NumpyUniformSource(random_state=metadata.get("seed")))
    cube = sample(sampler, int(metadata["samples"]))

    # Push each column of uniforms through the marginal quantile function
    df_samples = pd.DataFrame(
        {
            varname: quantile(distr, cube[:, index[varname]])
            for (varname, distr) in distributions.items()
        }
    )

    logger.info("Sampled %d rows of %d variables", *df_samples.shape)
    logger.debug("Correlations:\n%s", df_samples.corr(method="spearman"))

    return df_samples


def cmd_designmatrix(args):
    """Execute the subcommand."""
    logger.debug("Arguments: %s", args)

    # Load data from file into a dictionary
    with open(args.config, "r") as file_handle:
        config = yaml.safe_load(file_handle)
        logger.info("Loaded: %s", args.config)

    df_samples = design_matrix(config)
    df_samples.to_csv(args.output, index=False)
    logger.info("Saved: %s", args.output)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="copulit",
        description="Correlated sampling through a Gaussian copula.",
    )

    subparsers = parser.add_subparsers(required=True)

    # Parse the 'designmatrix' subcommand
    p1 = subparsers.add_parser(
        "designmatrix", help="Creates a design matrix (random samples)."
    )
    p1.add_argument("config", help="A .yml config file.")
    p1.add_argument("--output", help="An output .csv file.", default="designmatrix.csv")
    p1.add_argument("--verbose", "-v", action="count", default=0)
    p1.set_defaults(func=cmd_designmatrix)

    return parser


def main(argv=None):
    # Parse args and pass to function
    args = build_parser().parse_args(argv)
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    args.func(args)


if __name__ == "__main__":
    main()
