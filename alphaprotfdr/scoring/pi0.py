"""Storey's pi0 estimation with bootstrap selection of lambda.

pi0 is the proportion of truly null (incorrect) identifications. For a
threshold lambda:

    pi0(lambda) = #{p >= lambda} / (n * (1 - lambda))

The lambda whose pi0 is most stable under bootstrap resampling (smallest
mean squared deviation from the minimal pi0) is selected.

Randomness comes exclusively from the `numpy.random.Generator` passed in, so
results are reproducible for a fixed seed.

Examples
--------
>>> import numpy as np
>>> from alphaprotfdr.scoring import estimate_pi0
>>>
>>> rng = np.random.default_rng(42)
>>> pvalues = rng.uniform(size=500)
>>> pi0 = estimate_pi0(pvalues, rng=np.random.default_rng(0))
>>> 0.8 < pi0 <= 1.0
True
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from numba import njit

from ..constants import (
    PI0_ESTIMATION_FAILED,
    PI0_MAX_BOOTSTRAP_SIZE,
    PI0_MAX_LAMBDA,
    PI0_NUM_BOOTSTRAP,
    PI0_NUM_LAMBDA,
)

logger = logging.getLogger(__name__)


def pi0_lambdas(
    num_lambda: int = PI0_NUM_LAMBDA, max_lambda: float = PI0_MAX_LAMBDA
) -> np.ndarray:
    """Evenly spaced lambda candidates in (0, max_lambda]."""
    return (np.arange(num_lambda, dtype=np.float64) + 1.0) / num_lambda * max_lambda


@njit
def pi0_at_lambdas(sorted_pvalues: np.ndarray, lambdas: np.ndarray) -> np.ndarray:
    """pi0(lambda) for each lambda; p-values must be sorted ascending."""
    n = len(sorted_pvalues)
    result = np.empty(len(lambdas), dtype=np.float64)
    for i in range(len(lambdas)):
        start = np.searchsorted(sorted_pvalues, lambdas[i])
        result[i] = (n - start) / n / (1.0 - lambdas[i])
    return result


def bootstrap_sample(
    values: np.ndarray,
    rng: np.random.Generator,
    max_size: int = PI0_MAX_BOOTSTRAP_SIZE,
) -> np.ndarray:
    """Resample with replacement (at most max_size draws), sorted ascending."""
    num_draw = min(len(values), max_size)
    draws = rng.integers(0, len(values), size=num_draw)
    return np.sort(values[draws])


def estimate_pi0(
    pvalues: np.ndarray,
    rng: Optional[np.random.Generator] = None,
    num_bootstrap: int = PI0_NUM_BOOTSTRAP,
    num_lambda: int = PI0_NUM_LAMBDA,
    max_lambda: float = PI0_MAX_LAMBDA,
    max_bootstrap_size: int = PI0_MAX_BOOTSTRAP_SIZE,
) -> float:
    """Estimate pi0 from p-values.

    Parameters
    ----------
    pvalues : np.ndarray
        p-values (any order)
    rng : np.random.Generator, optional
        Random source for the bootstrap. A fresh unseeded generator is used
        if omitted.
    num_bootstrap : int, default=100
        Bootstrap iterations
    num_lambda : int, default=100
        Number of lambda candidates
    max_lambda : float, default=0.5
        Largest lambda candidate
    max_bootstrap_size : int, default=1000
        Cap on the size of each bootstrap sample

    Returns
    -------
    float
        pi0 in [0, 1], or PI0_ESTIMATION_FAILED (-1.0) if the p-values are
        degenerate (empty, all identical, or no lambda with pi0 > 0)

    Notes
    -----
    1. pi0(lambda) on the full data; keep lambdas with pi0 > 0
    2. For each bootstrap sample accumulate (pi0_boot(lambda) - min pi0)^2
    3. Return pi0 of the lambda with the smallest accumulated error
    """
    if rng is None:
        rng = np.random.default_rng()

    pvalues = np.asarray(pvalues, dtype=np.float64)
    if len(pvalues) == 0 or np.ptp(pvalues) == 0.0:
        logger.warning(
            "Degenerate p-value distribution: impossible to estimate pi0"
        )
        return PI0_ESTIMATION_FAILED

    sorted_pvalues = np.sort(pvalues)
    lambdas = pi0_lambdas(num_lambda, max_lambda)
    pi0s = pi0_at_lambdas(sorted_pvalues, lambdas)

    keep = pi0s > 0.0
    if not np.any(keep):
        logger.warning(
            "Too good separation between target and decoy proteins: "
            "impossible to estimate pi0"
        )
        return PI0_ESTIMATION_FAILED

    lambdas = lambdas[keep]
    pi0s = pi0s[keep]
    min_pi0 = pi0s.min()

    mse = np.zeros(len(lambdas), dtype=np.float64)
    for _ in range(num_bootstrap):
        boot = bootstrap_sample(pvalues, rng, max_bootstrap_size)
        mse += (pi0_at_lambdas(boot, lambdas) - min_pi0) ** 2

    # argmin returns the first (smallest) lambda on ties
    pi0 = float(np.clip(pi0s[np.argmin(mse)], 0.0, 1.0))
    logger.debug(f"pi0 = {pi0:.4f} at lambda = {lambdas[np.argmin(mse)]:.3f}")
    return pi0
