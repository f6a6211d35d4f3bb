"""Empirical (decoy-based) protein q-values and p-values.

Empirical q-values count decoys instead of trusting the model's PEPs:

    q_emp(k) = decoys(k) * pi0 * (N_targets / N_decoys) / targets(k)

where decoys(k) and targets(k) are cumulative counts down to step k and
N_targets / N_decoys are the sizes of the registry's target and decoy sets.

p-values are continuity-corrected empirical CDF values of the decoy
distribution, assigned per step.

Two p-value flavours exist:
- `estimate_empirical_qvalues()` returns one p-value per step, published
  with the protein statistics
- `estimate_target_pvalues()` returns one p-value per target protein, with
  tie-block interpolation, used as input to the pi0 estimator
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from numba import njit

from ..proteins.ranking import LabelledRanking
from .qvalues import clamp_unit, monotonize_running_min


@njit
def _empirical_walk(
    n_targets: np.ndarray,
    n_decoys: np.ndarray,
    pi0: float,
    target_decoy_ratio: float,
    number_decoy_proteins: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """Raw empirical q-values and p-values per step."""
    n = len(n_targets)
    qvalues = np.empty(n, dtype=np.float64)
    pvalues = np.empty(n, dtype=np.float64)

    decoys = 0
    targets = 0
    qvalue = 0.0

    for i in range(n):
        decoys += n_decoys[i]
        targets += n_targets[i]

        # 0 until the first target is seen
        if targets > 0:
            qvalue = clamp_unit(decoys * pi0 * target_decoy_ratio / targets)
        qvalues[i] = qvalue

        if n_decoys[i] > 0:
            pvalue = decoys / number_decoy_proteins
        else:
            pvalue = (decoys + 1.0) / (number_decoy_proteins + 1.0)
        pvalues[i] = clamp_unit(pvalue)

    return qvalues, pvalues


def estimate_empirical_qvalues(
    labelled: LabelledRanking,
    number_target_proteins: int,
    number_decoy_proteins: int,
    pi0: float = 1.0,
) -> Tuple[np.ndarray, np.ndarray]:
    """Empirical q-values and p-values, one per step.

    Parameters
    ----------
    labelled : LabelledRanking
        Ranked steps with target/decoy counts
    number_target_proteins : int
        Size of the target protein set
    number_decoy_proteins : int
        Size of the decoy protein set
    pi0 : float, default=1.0
        Proportion of null (incorrect) target identifications

    Returns
    -------
    qvalues : np.ndarray
        Empirical q-values, non-decreasing from best to worst rank
    pvalues : np.ndarray
        Continuity-corrected empirical p-values

    Raises
    ------
    ValueError
        If either protein set is empty
    """
    if number_target_proteins <= 0 or number_decoy_proteins <= 0:
        raise ValueError(
            "Empirical q-values need target and decoy proteins; got "
            f"{number_target_proteins} targets and {number_decoy_proteins} decoys"
        )
    if len(labelled) == 0:
        return np.zeros(0, dtype=np.float64), np.zeros(0, dtype=np.float64)

    qvalues, pvalues = _empirical_walk(
        np.ascontiguousarray(labelled.n_targets, dtype=np.int64),
        np.ascontiguousarray(labelled.n_decoys, dtype=np.int64),
        float(pi0),
        number_target_proteins / number_decoy_proteins,
        int(number_decoy_proteins),
    )
    return monotonize_running_min(qvalues), pvalues


@njit
def _target_pvalues(probabilities: np.ndarray, is_decoy: np.ndarray) -> np.ndarray:
    """Tie-interpolated decoy counts ranked above each target (unnormalized)."""
    n = len(probabilities)
    counts = np.empty(n, dtype=np.float64)
    size = 0

    n_decoys = 0
    start = 0
    while start < n:
        # Find the block of identical probabilities
        end = start
        block_targets = 0
        block_decoys = 0
        while end < n and probabilities[end] == probabilities[start]:
            if is_decoy[end]:
                block_decoys += 1
            else:
                block_targets += 1
            end += 1

        for ix in range(block_targets):
            counts[size] = n_decoys + block_decoys / (block_targets + 1.0) * (ix + 1)
            size += 1

        n_decoys += block_decoys
        start = end

    return counts[:size] / n_decoys


def estimate_target_pvalues(labelled: LabelledRanking) -> np.ndarray:
    """Empirical p-values of the target proteins, for pi0 estimation.

    Each target receives the fraction of decoys ranked above it. Decoys tied
    with targets are spread evenly over the targets of the tie block.

    Parameters
    ----------
    labelled : LabelledRanking
        Ranking in per-protein expansion (one protein per step)

    Returns
    -------
    np.ndarray
        p-values sorted ascending; empty if there are no decoys

    Examples
    --------
    >>> # T, D, T(tie with D), T
    >>> labelled = LabelledRanking(
    ...     np.array([0.0, 0.1, 0.1, 0.3]),
    ...     np.array([1, 0, 1, 1]),
    ...     np.array([0, 1, 0, 0]),
    ... )
    >>> estimate_target_pvalues(labelled)
    array([0. , 0.5, 1. ])
    """
    if np.any(labelled.n_targets + labelled.n_decoys != 1):
        raise ValueError("Target p-values need a per-protein expansion of the ranking")

    is_decoy = np.ascontiguousarray(labelled.n_decoys > 0)
    if not np.any(is_decoy):
        return np.zeros(0, dtype=np.float64)

    pvalues = _target_pvalues(
        np.ascontiguousarray(labelled.probabilities, dtype=np.float64), is_decoy
    )
    return np.sort(pvalues)
