"""Model-based protein q-values from posterior error probabilities.

The q-value of a rank is the mean PEP of all target proteins ranked at or
above it, monotonized so that q-values never decrease towards worse ranks.

Key Features
------------
- Tie handling through `LabelledRanking` (ties as one protein or expanded)
- Decoys never contribute to the running sum or count
- NaN / inf / >1 values clamped to 1.0 before monotonization
- Numba-accelerated walk and monotonization

Examples
--------
>>> import numpy as np
>>> from alphaprotfdr.proteins import RankedProteinList
>>> from alphaprotfdr.scoring import estimate_qvalues
>>>
>>> ranked = RankedProteinList.from_pairs([(0.0, ["P1"]), (0.2, ["P2"]), (0.1, ["P3"])])
>>> labelled = ranked.label(lambda name: False)
>>> estimate_qvalues(labelled)
array([0.  , 0.05, 0.1 ])
"""

from __future__ import annotations

import numpy as np
from numba import njit

from ..proteins.ranking import LabelledRanking


@njit
def clamp_unit(value: float) -> float:
    """Map NaN, +-inf and values above 1 to 1.0 ("no confidence")."""
    if np.isnan(value) or np.isinf(value) or value > 1.0:
        return 1.0
    return value


@njit
def monotonize_running_min(values: np.ndarray) -> np.ndarray:
    """Running minimum from the worst rank to the best rank.

    The result is non-decreasing when read from best to worst rank.
    """
    result = values.copy()
    for i in range(len(result) - 2, -1, -1):
        if result[i + 1] < result[i]:
            result[i] = result[i + 1]
    return result


@njit
def monotonize_running_max(values: np.ndarray) -> np.ndarray:
    """Running maximum from the best rank to the worst rank."""
    result = values.copy()
    for i in range(1, len(result)):
        if result[i] < result[i - 1]:
            result[i] = result[i - 1]
    return result


@njit
def _raw_qvalues(probabilities: np.ndarray, n_targets: np.ndarray) -> np.ndarray:
    """Mean target PEP at each step, before monotonization."""
    n = len(probabilities)
    raw = np.empty(n, dtype=np.float64)
    total = 0.0
    count = 0

    for i in range(n):
        total += probabilities[i] * n_targets[i]
        count += n_targets[i]
        if count == 0:
            # Only decoys so far
            raw[i] = 1.0
        else:
            raw[i] = clamp_unit(total / count)

    return raw


def estimate_raw_qvalues(labelled: LabelledRanking) -> np.ndarray:
    """Running mean target PEP per step (the estimated FDR curve).

    Parameters
    ----------
    labelled : LabelledRanking
        Ranked steps with target counts

    Returns
    -------
    np.ndarray
        Unmonotonized q-values, clamped to [0, 1]
    """
    return _raw_qvalues(
        np.ascontiguousarray(labelled.probabilities, dtype=np.float64),
        np.ascontiguousarray(labelled.n_targets, dtype=np.int64),
    )


def estimate_qvalues(labelled: LabelledRanking) -> np.ndarray:
    """Model-based q-values, one per step of the labelled ranking.

    Parameters
    ----------
    labelled : LabelledRanking
        Ranked steps (one per group, or one per protein)

    Returns
    -------
    np.ndarray
        q-values, non-decreasing from best to worst rank

    Notes
    -----
    q(k) = sum_{i<=k} PEP_i * targets_i / sum_{i<=k} targets_i, then the
    running minimum is taken from the worst rank upwards. Steps before the
    first target get 1.0.
    """
    if len(labelled) == 0:
        return np.zeros(0, dtype=np.float64)
    return monotonize_running_min(estimate_raw_qvalues(labelled))
