"""ROC curve and partial area under it (ROC_N).

The ROC curve counts cumulative false positives (decoys) and true positives
(targets) down the ranked protein list. ROC_N is the area under this curve
up to N false positives, normalized by N times the total number of targets,
so that a perfect ranking scores 1.0.

Examples
--------
>>> import numpy as np
>>> from alphaprotfdr.scoring import roc_n
>>> roc_n(np.array([0, 10]), np.array([0, 5]), 10)
0.5
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from numba import njit

from ..proteins.ranking import LabelledRanking


class InsufficientDecoysError(ValueError):
    """ROC_N requested beyond the number of observed decoys."""


@njit
def _antiderivative(m: float, b: float, x: float) -> float:
    """Antiderivative of y = m*x + b."""
    return m * x * x / 2.0 + b * x


@njit
def _square_antiderivative(m: float, b: float, x: float) -> float:
    """Antiderivative of y = (m*x + b)^2."""
    u = m * m
    v = 2.0 * m * b
    t = b * b
    return u * x * x * x / 3.0 + v * x * x / 2.0 + t * x


@njit
def segment_area(x1: float, y1: float, x2: float, y2: float, max_x: float) -> float:
    """Area under the line through (x1, y1), (x2, y2) on [x1, min(max_x, x2)].

    Zero-width segments contribute 0.0.
    """
    if x2 == x1:
        return 0.0
    m = (y2 - y1) / (x2 - x1)
    b = y1 - m * x1
    area = _antiderivative(m, b, min(max_x, x2)) - _antiderivative(m, b, x1)
    if np.isnan(area):
        return 0.0
    return area


@njit
def segment_area_squared(x1: float, y1: float, x2: float, y2: float, max_x: float) -> float:
    """Area under the squared line through (x1, y1), (x2, y2)."""
    if x2 == x1:
        return 0.0
    m = (y2 - y1) / (x2 - x1)
    b = y1 - m * x1
    area = _square_antiderivative(m, b, min(max_x, x2)) - _square_antiderivative(m, b, x1)
    if np.isnan(area):
        return 0.0
    return area


@njit
def _roc_points(
    n_targets: np.ndarray,
    n_decoys: np.ndarray,
    roc_n: int,
    total_targets: int,
    total_decoys: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """Cumulative (fp, tp) per step, stopping once fp exceeds roc_n."""
    n = len(n_targets)
    fps = np.empty(n + 2, dtype=np.int64)
    tps = np.empty(n + 2, dtype=np.int64)
    fp = 0
    tp = 0
    size = 0

    for i in range(n):
        fp += n_decoys[i]
        tp += n_targets[i]
        fps[size] = fp
        tps[size] = tp
        size += 1
        if fp > roc_n:
            break

    fps[size] = fp
    tps[size] = tp
    size += 1

    # Asymptotic point: every known decoy and target
    fps[size] = total_decoys
    tps[size] = total_targets
    size += 1

    return fps[:size], tps[:size]


def build_roc_curve(
    labelled: LabelledRanking,
    roc_n: int,
    total_targets: int,
    total_decoys: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """ROC step curve of a ranking.

    Parameters
    ----------
    labelled : LabelledRanking
        Ranking with one step per protein group
    roc_n : int
        The walk stops after the first step with more than roc_n false
        positives
    total_targets, total_decoys : int
        Sizes of the target and decoy protein sets (final point)

    Returns
    -------
    false_positives : np.ndarray (int64)
    true_positives : np.ndarray (int64)
    """
    return _roc_points(
        np.ascontiguousarray(labelled.n_targets, dtype=np.int64),
        np.ascontiguousarray(labelled.n_decoys, dtype=np.int64),
        int(roc_n),
        int(total_targets),
        int(total_decoys),
    )


@njit
def _roc_n_area(fps: np.ndarray, tps: np.ndarray, n: float) -> float:
    total = 0.0
    for k in range(len(fps) - 1):
        if fps[k] >= n:
            break
        if fps[k] != fps[k + 1]:
            total += segment_area(fps[k], tps[k], fps[k + 1], tps[k + 1], n)
    return total


def roc_n(false_positives: np.ndarray, true_positives: np.ndarray, n: int) -> float:
    """Normalized partial area under the ROC curve up to n false positives.

    Parameters
    ----------
    false_positives, true_positives : np.ndarray
        ROC curve points, cumulative
    n : int
        False positive bound

    Returns
    -------
    float
        Area / (n * final true positives), in [0, 1]

    Raises
    ------
    InsufficientDecoysError
        If the curve ends with fewer than n false positives
    ValueError
        If n is not positive or the curve is empty
    """
    if n <= 0:
        raise ValueError(f"ROC N must be positive, got {n}")
    if len(false_positives) == 0 or len(false_positives) != len(true_positives):
        raise ValueError("ROC curve must be non-empty with matching coordinates")
    if false_positives[-1] < n:
        raise InsufficientDecoysError(
            f"There are not enough false positives; needed {n} "
            f"and was only given {int(false_positives[-1])}"
        )
    if true_positives[-1] == 0:
        return 0.0

    area = _roc_n_area(
        np.ascontiguousarray(false_positives, dtype=np.float64),
        np.ascontiguousarray(true_positives, dtype=np.float64),
        float(n),
    )
    return area / (n * float(true_positives[-1]))
