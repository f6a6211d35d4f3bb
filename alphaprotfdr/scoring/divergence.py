"""Divergence between model-estimated and decoy-based (empirical) FDR.

A well-calibrated model gives estimated FDRs close to the empirical ones.
This module builds both curves along the ranking and integrates their
difference over the estimated-FDR axis, up to a threshold T:

- squared mode (default): integral of (est - emp)^2
- conservative mode: integral of |est - emp| (segment-wise)

Both curves are monotonized forward (running maximum), since a worse rank
cannot have a lower FDR. While building them, an auto-updating ROC N may
be widened.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from numba import njit

from ..constants import ROC_N_MAX, ROC_N_MIN
from ..proteins.ranking import LabelledRanking
from .qvalues import clamp_unit
from .roc import segment_area, segment_area_squared


@dataclass
class FDRCurves:
    """Estimated and empirical FDR along the ranking.

    Attributes
    ----------
    estimated : np.ndarray
        Running mean target PEP, non-decreasing
    empirical : np.ndarray
        Decoy-based FDR, non-decreasing
    roc_n : int
        ROC N after any widening during the walk
    """

    estimated: np.ndarray
    empirical: np.ndarray
    roc_n: int


@njit
def _fdr_walk(
    probabilities: np.ndarray,
    n_targets: np.ndarray,
    n_decoys: np.ndarray,
    pi0: float,
    target_decoy_ratio: float,
    threshold: float,
    roc_n: int,
    update_roc_n: bool,
    roc_threshold: float,
) -> Tuple[np.ndarray, np.ndarray, int]:
    n = len(probabilities)
    estimated = np.empty(n, dtype=np.float64)
    empirical = np.empty(n, dtype=np.float64)
    size = 0

    total = 0.0
    fp = 0
    tp = 0
    est_fdr = 0.0
    emp_fdr = 0.0
    previous_est = 0.0
    previous_emp = 0.0

    for i in range(n):
        fp += n_decoys[i]
        tp += n_targets[i]
        total += probabilities[i] * n_targets[i]

        # Before the first target the estimated FDR is 1.0, as for the
        # model q-values; the empirical FDR stays at 0.0
        if tp > 0:
            est_fdr = clamp_unit(total / tp)
            emp_fdr = clamp_unit(fp * pi0 * target_decoy_ratio / tp)
        else:
            est_fdr = 1.0

        if est_fdr < previous_est:
            est_fdr = previous_est
        else:
            previous_est = est_fdr

        if emp_fdr < previous_emp:
            emp_fdr = previous_emp
        else:
            previous_emp = emp_fdr

        if update_roc_n and est_fdr <= roc_threshold:
            roc_n = max(roc_n, max(ROC_N_MIN, min(fp, ROC_N_MAX)))

        estimated[size] = est_fdr
        empirical[size] = emp_fdr
        size += 1

        # Later points lie beyond the divergence integral
        if est_fdr > threshold:
            break

    return estimated[:size], empirical[:size], roc_n


def estimated_and_empirical_fdr(
    labelled: LabelledRanking,
    number_target_proteins: int,
    number_decoy_proteins: int,
    threshold: float,
    pi0: float = 1.0,
    roc_n: int = ROC_N_MIN,
    update_roc_n: bool = False,
    roc_threshold: float = 0.05,
) -> FDRCurves:
    """Build the estimated and empirical FDR curves.

    Parameters
    ----------
    labelled : LabelledRanking
        Ranked steps (one per group, or one per protein)
    number_target_proteins, number_decoy_proteins : int
        Target and decoy set sizes
    threshold : float
        Stop after the first point with estimated FDR above this value
    pi0 : float, default=1.0
        Null proportion for the empirical FDR
    roc_n : int
        Current ROC N
    update_roc_n : bool, default=False
        Widen ROC N to clamp(false positives, 50, 1000) whenever the
        estimated FDR is at or below roc_threshold
    roc_threshold : float, default=0.05
        Estimated FDR bound for widening ROC N

    Returns
    -------
    FDRCurves
    """
    if number_target_proteins <= 0 or number_decoy_proteins <= 0:
        raise ValueError(
            "Empirical FDR needs target and decoy proteins; got "
            f"{number_target_proteins} targets and {number_decoy_proteins} decoys"
        )

    estimated, empirical, new_roc_n = _fdr_walk(
        np.ascontiguousarray(labelled.probabilities, dtype=np.float64),
        np.ascontiguousarray(labelled.n_targets, dtype=np.int64),
        np.ascontiguousarray(labelled.n_decoys, dtype=np.int64),
        float(pi0),
        number_target_proteins / number_decoy_proteins,
        float(threshold),
        int(roc_n),
        bool(update_roc_n),
        float(roc_threshold),
    )
    return FDRCurves(estimated, empirical, int(new_roc_n))


@njit
def _divergence_integral(
    estimated: np.ndarray, difference: np.ndarray, threshold: float, conservative: bool
) -> Tuple[float, int]:
    total = 0.0
    k = 0
    while k < len(difference) - 1:
        if estimated[k] >= threshold:
            break
        if conservative:
            total += abs(segment_area(
                estimated[k], difference[k], estimated[k + 1], difference[k + 1], estimated[k + 1]
            ))
        else:
            total += segment_area_squared(
                estimated[k], difference[k], estimated[k + 1], difference[k + 1], estimated[k + 1]
            )
        k += 1
    return total, k


def fdr_divergence(
    estimated: np.ndarray,
    empirical: np.ndarray,
    threshold: float,
    conservative: bool = False,
) -> float:
    """Divergence between estimated and empirical FDR below a threshold.

    Parameters
    ----------
    estimated : np.ndarray
        Estimated FDR curve (non-decreasing)
    empirical : np.ndarray
        Empirical FDR curve
    threshold : float
        Upper bound T of the estimated-FDR domain
    conservative : bool, default=False
        Integrate |est - emp| instead of (est - emp)^2

    Returns
    -------
    float
        Integral normalized by the covered range
        min(T, est[stop]) - est[0]; +inf if the curves are empty or the
        first estimated FDR is already at or above T; 0.0 for a zero-width
        range

    Examples
    --------
    >>> est = np.array([0.0, 0.02, 0.04])
    >>> fdr_divergence(est, est, threshold=0.05)
    0.0
    """
    estimated = np.ascontiguousarray(estimated, dtype=np.float64)
    empirical = np.ascontiguousarray(empirical, dtype=np.float64)
    if len(estimated) != len(empirical):
        raise ValueError(
            f"Curves differ in length: {len(estimated)} vs {len(empirical)}"
        )
    if len(estimated) == 0 or estimated[0] >= threshold:
        return np.inf

    total, stop = _divergence_integral(
        estimated, estimated - empirical, float(threshold), bool(conservative)
    )

    x_range = min(threshold, estimated[stop]) - estimated[0]
    if x_range <= 0.0:
        return 0.0
    return total / x_range
