"""
Map-equation codelength.

The two-level map equation for modules with exit probabilities q_i and
visiting probabilities p_i is

    L = plogp(sum q_i) - 2 sum plogp(q_i) - sum_nodes plogp(p_a)
        + sum plogp(q_i + p_i)

where plogp(x) = x log2 x with plogp(0) = 0. The node-level term only
depends on the uncoarsened distribution and is computed once
(``probability_sum``) and reused for every partition of the same network.
"""

from typing import Union

import numpy as np
import polars as pl
from scipy import special

from infoflow.common.context import ExecutionContext
from infoflow.common.logging_config import get_logger

logger = get_logger(__name__)

_LOG2 = np.log(2.0)


def plogp(x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    Compute x * log2(x), with plogp(0) = 0 exactly.

    Parameters
    ----------
    x : float or np.ndarray
        Non-negative value(s)

    Examples
    --------
    >>> plogp(0.0)
    0.0
    >>> plogp(0.5)
    -0.5
    """
    result = special.xlogy(x, x) / _LOG2
    if np.ndim(result) == 0:
        return float(result)
    return result


def plogp_expr(expr: pl.Expr) -> pl.Expr:
    """Polars expression computing plogp element-wise, zero where expr <= 0."""
    return pl.when(expr > 0).then(expr * expr.log(2)).otherwise(0.0)


def probability_sum(
    modules: pl.LazyFrame,
    context: ExecutionContext,
    prob_col: str = "prob"
) -> float:
    """
    Sum plogp(prob) over all rows of a frame.

    Must be evaluated on the per-node distribution, before any coarsening.
    """
    result = context.collect(
        modules.select(plogp_expr(pl.col(prob_col)).sum().alias("plogp_p")),
        "probability_sum"
    )
    return float(result.item())


def calculate_codelength(
    modules: pl.LazyFrame,
    prob_sum: float,
    context: ExecutionContext
) -> float:
    """
    Evaluate the map equation over a set of module records.

    Parameters
    ----------
    modules : pl.LazyFrame
        Module records with ``prob`` and ``exitq`` columns
    prob_sum : float
        Cached sum of plogp(prob) over the uncoarsened nodes
    context : ExecutionContext
        Execution handle used to evaluate the reduction

    Returns
    -------
    float
        Codelength in bits
    """
    exitq = pl.col("exitq")
    stats = context.collect(
        modules.select(
            exitq.sum().alias("exitq_sum"),
            plogp_expr(exitq).sum().alias("plogp_exitq"),
            plogp_expr(exitq + pl.col("prob")).sum().alias("plogp_exitq_prob"),
        ),
        "calculate_codelength"
    ).row(0, named=True)

    codelength = (
        plogp(float(stats["exitq_sum"]))
        - 2.0 * float(stats["plogp_exitq"])
        - prob_sum
        + float(stats["plogp_exitq_prob"])
    )
    logger.debug("Codelength %.6f (exitq_sum=%.6f, prob_sum=%.6f)",
                 codelength, stats["exitq_sum"], prob_sum)
    return codelength
